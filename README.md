# devicelink

A small telemetry setup in two parts that talk to each other over TCP with
JSON messages:

- **a server** (`devicelink.server.TelemetryServer`) that accepts connections,
  gives each connection an ID such as `Client_1`, records every message it
  receives and acknowledges it;
- **device emulators** (`devicelink.client.DeviceEmulator`) that connect to the
  server, wait for their ID and then send random network metrics, device status
  reports and log entries, each kind on its own timer.

Only the standard library is used at run time.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running

Start the server. It listens on `0.0.0.0`, port 12345, unless told otherwise:

```
devicelink-server
devicelink-server --host 127.0.0.1 --port 12345
```

Its log lines (`[hh:mm:ss.zzz] message`) go to standard error through
`logging`. It runs until interrupted; if it cannot listen, it exits with
status 1.

In another terminal, start the emulators. The optional first argument is how
many emulators to run; the default is 10. An argument that is not an integer
counts as 0:

```
devicelink-client 5
devicelink-client 5 --host localhost --port 12345
```

The emulators are started 0.1 seconds apart. Each one connects to
`localhost:12345` by default, giving up on an attempt after 5 seconds. If it
cannot connect, or loses the connection, it tries again after 5 seconds. Once
the server sends its `connection_ack`, the emulator starts three timers:

| Message          | Interval     |
|------------------|--------------|
| `NetworkMetrics` | 100–999 ms   |
| `DeviceStatus`   | 1000–4999 ms |
| `Log`            | 2000–9999 ms |

Each interval is drawn once at random, when the emulator is acknowledged
(`DeviceEmulator.schedule_intervals()` returns them in seconds).

## Protocol

Every message is a JSON object with a `"type"` field. On the wire it is
indented JSON with sorted keys and a trailing newline.

Sent by the server:

- `{"type": "connection_ack", "client_id": "Client_1"}` when a client connects
- `{"type": "data_ack", "data_type": "<type>", "status": "received"}` for every
  JSON object it receives

Sent by the emulators:

- `NetworkMetrics`: `bandwidth` (0.0–99.9), `latency` (0.0–9.9),
  `packet_loss` (0.000–0.049)
- `DeviceStatus`: `uptime` (0–99999), `cpu_usage` and `memory_usage` (0–99)
- `Log`: `severity` (`INFO`, `WARNING` or `ERROR`) and `message`, one of a
  fixed set of log texts

`devicelink.protocol` builds and parses these messages:

- `MessageType` — the values of the `type` field;
- `encode_message(message)` and `decode_message(data)`; `decode_message`
  accepts bytes or text and raises `ProtocolError` (a `ValueError`) when the
  input is not valid UTF-8 JSON or not a JSON object;
- `compact(message)` — the single-line form of a message;
- `connection_ack(client_id)`, `data_ack(data_type)`;
- `network_metrics(rng)`, `device_status(rng)`, `log_entry(rng)` — each takes
  an optional `random.Random`.

## Using it from Python

```python
from devicelink.server import TelemetryServer

server = TelemetryServer()
client_id = server.register_client("127.0.0.1")          # "Client_1"
reply = server.handle_data(
    client_id, b'{"type": "Log", "severity": "INFO", "message": "ok"}'
)                                                        # encoded data_ack
print(server.data_rows[-1])   # DataRow(client_id, data_type, content, time)
print(server.client_rows())   # [("Client_1", "127.0.0.1", "Connected")]
print(server.log_lines)
```

`handle_data` returns `None` for an unknown client or for input that is not a
JSON object; in the latter case it adds a line to the log. `TelemetryServer`
also takes a `clock` callable, used for the timestamps. `start()` and `stop()`
are coroutines; `stop()` drops every client.

On the emulator side, `DeviceEmulator(host, port, rng, retry_delay)` runs with
`await emulator.run()` until cancelled. `handle_message(data)` processes what
the server sent and returns the parsed message; `send(message)` returns
whether the message was written. `run_emulators(count, host, port)` is a
coroutine that runs several emulators at once.

## What it does not do

The server has no graphical window: clients, received reports and log lines
are kept in memory (`clients`, `data_rows`, `log_lines`) and log lines are
written through `logging`. Nothing is stored on disk, and the server does not
act on the values it receives beyond recording and acknowledging them. Each
read from a connection is treated as one whole message; there is no framing
beyond that.