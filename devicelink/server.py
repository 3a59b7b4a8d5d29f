"""Telemetry server that accepts device emulators and records their reports."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from devicelink.protocol import (
    ProtocolError,
    compact,
    connection_ack,
    data_ack,
    decode_message,
    encode_message,
)

DEFAULT_PORT = 12345

logger = logging.getLogger(__name__)


@dataclass
class ClientRecord:
    """A connected client as known to the server."""

    client_id: str
    address: str
    connected: bool = True


@dataclass(frozen=True)
class DataRow:
    """One received report."""

    client_id: str
    data_type: str
    content: str
    time: str


class TelemetryServer:
    """Accepts client connections, acknowledges them and stores their reports."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self._clock = clock or datetime.now
        self.clients: dict[str, ClientRecord] = {}
        self.data_rows: list[DataRow] = []
        self.log_lines: list[str] = []
        self._counter = 0
        self._server: asyncio.AbstractServer | None = None
        self._writers: dict[str, asyncio.StreamWriter] = {}
        self.log("Server application started")

    @property
    def listening(self) -> bool:
        return self._server is not None

    async def start(self) -> None:
        """Start listening; a failure is logged and raised."""
        if self._server is not None:
            return
        try:
            self._server = await asyncio.start_server(
                self._handle_connection, self.host, self.port
            )
        except OSError as exc:
            self.log(f"Failed to start server: {exc}")
            raise
        sockets = self._server.sockets
        if sockets:
            self.port = sockets[0].getsockname()[1]
        self.log(f"Server started on port {self.port}")

    async def stop(self) -> None:
        """Stop listening and drop every client."""
        if self._server is None:
            return
        server, self._server = self._server, None
        server.close()
        for writer in self._writers.values():
            writer.transport.abort()
        self._writers.clear()
        self.clients.clear()
        await server.wait_closed()
        self.log("Server stopped")

    def register_client(self, address: str) -> str:
        """Record a new client and return the identifier given to it."""
        self._counter += 1
        client_id = f"Client_{self._counter}"
        self.clients[client_id] = ClientRecord(client_id, address)
        self.log(f"New client connected: {client_id} ({address})")
        return client_id

    def unregister_client(self, client_id: str) -> None:
        """Forget a client that has disconnected."""
        if client_id not in self.clients:
            return
        self.log(f"Client disconnected: {client_id}")
        del self.clients[client_id]
        self._writers.pop(client_id, None)

    def handle_data(self, client_id: str, payload: bytes) -> bytes | None:
        """Process a report from a client and return the acknowledgment to send."""
        if client_id not in self.clients:
            return None
        try:
            message = decode_message(payload)
        except ProtocolError as exc:
            if exc.not_object:
                self.log(str(exc))
            else:
                self.log(f"Invalid JSON from client: {exc}")
            return None
        data_type = message.get("type")
        if not isinstance(data_type, str):
            data_type = ""
        now = self._clock()
        self.data_rows.append(
            DataRow(client_id, data_type, compact(message), now.strftime("%H:%M:%S"))
        )
        return encode_message(data_ack(data_type))

    def client_rows(self) -> list[tuple[str, str, str]]:
        """Return (client id, address, status) for every known client."""
        return [
            (rec.client_id, rec.address, "Connected" if rec.connected else "Disconnected")
            for rec in self.clients.values()
        ]

    def log(self, message: str) -> str:
        """Record a timestamped log line and return it."""
        now = self._clock()
        line = f"[{now:%H:%M:%S}.{now.microsecond // 1000:03d}] {message}"
        self.log_lines.append(line)
        logger.info(line)
        return line

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = writer.get_extra_info("peername")
        address = str(peer[0]) if peer else ""
        client_id = self.register_client(address)
        self._writers[client_id] = writer
        try:
            writer.write(encode_message(connection_ack(client_id)))
            await writer.drain()
            while True:
                data = await reader.read(65536)
                if not data:
                    break
                reply = self.handle_data(client_id, data)
                if reply is not None:
                    writer.write(reply)
                    await writer.drain()
        except (ConnectionError, OSError):
            pass
        finally:
            record = self.clients.get(client_id)
            if record is not None:
                record.connected = False
            self.unregister_client(client_id)
            writer.close()


async def _serve(host: str, port: int) -> None:
    server = TelemetryServer(host, port)
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main(argv: list[str] | None = None) -> int:
    """Run the telemetry server until interrupted."""
    parser = argparse.ArgumentParser(description="Telemetry server for device emulators.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        asyncio.run(_serve(args.host, args.port))
    except KeyboardInterrupt:
        return 0
    except OSError:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())