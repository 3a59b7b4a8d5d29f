"""Device emulator that connects to the telemetry server and streams reports."""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from typing import Any, Callable

from devicelink.protocol import (
    MessageType,
    ProtocolError,
    decode_message,
    device_status,
    encode_message,
    log_entry,
    network_metrics,
)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 12345
DEFAULT_CLIENT_COUNT = 10
CONNECT_TIMEOUT = 5.0
START_STAGGER = 0.1

logger = logging.getLogger(__name__)

_BUILDERS: dict[MessageType, Callable[[random.Random], dict[str, Any]]] = {
    MessageType.NETWORK_METRICS: network_metrics,
    MessageType.DEVICE_STATUS: device_status,
    MessageType.LOG: log_entry,
}


class DeviceEmulator:
    """A simulated network device reporting metrics, status and logs."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        rng: random.Random | None = None,
        retry_delay: float = 5.0,
    ) -> None:
        self.host = host
        self.port = port
        self.rng = rng if rng is not None else random.Random()
        self.retry_delay = retry_delay
        self.connect_timeout = CONNECT_TIMEOUT
        self.client_id: str | None = None
        self.acknowledged: list[str] = []
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def run(self) -> None:
        """Connect, receive and reconnect until cancelled."""
        try:
            while True:
                if await self._connect():
                    await self._receive()
                    logger.info("Disconnected from server. Reconnecting...")
                else:
                    logger.info(
                        "Connection failed. Retrying in %g seconds...", self.retry_delay
                    )
                await asyncio.sleep(self.retry_delay)
        finally:
            self._stop_sending()
            self._close()

    def handle_message(self, data: bytes | str) -> dict[str, Any] | None:
        """Process bytes received from the server; return the parsed message."""
        try:
            message = decode_message(data)
        except ProtocolError as exc:
            logger.error("Invalid JSON received: %s", exc)
            return None
        kind = message.get("type")
        if kind == MessageType.CONNECTION_ACK.value:
            client_id = message.get("client_id")
            self.client_id = client_id if isinstance(client_id, str) else ""
            logger.info("Connection acknowledged. Client ID: %s", self.client_id)
            self._start_sending()
        elif kind == MessageType.DATA_ACK.value:
            data_type = message.get("data_type")
            data_type = data_type if isinstance(data_type, str) else ""
            self.acknowledged.append(data_type)
            logger.info("Data acknowledged: %s", data_type)
        return message

    def send(self, message: dict[str, Any]) -> bool:
        """Send a message to the server; return whether it was written."""
        if not self.connected:
            logger.error("Cannot send data - not connected to server")
            return False
        assert self._writer is not None
        self._writer.write(encode_message(message))
        logger.info("Sent: %s", message.get("type", ""))
        return True

    def schedule_intervals(self) -> dict[MessageType, float]:
        """Draw the reporting period in seconds for each kind of report."""
        return {
            MessageType.NETWORK_METRICS: (100 + self.rng.randrange(900)) / 1000.0,
            MessageType.DEVICE_STATUS: (1000 + self.rng.randrange(4000)) / 1000.0,
            MessageType.LOG: (2000 + self.rng.randrange(8000)) / 1000.0,
        }

    async def _connect(self) -> bool:
        logger.info("Connecting to server...")
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), self.connect_timeout
            )
        except (OSError, asyncio.TimeoutError, TimeoutError):
            return False
        self._reader, self._writer = reader, writer
        logger.info("Connected to server. Waiting for acknowledgment...")
        return True

    async def _receive(self) -> None:
        reader = self._reader
        if reader is None:
            return
        try:
            while True:
                data = await reader.read(65536)
                if not data:
                    break
                self.handle_message(data)
        except (ConnectionError, OSError):
            pass
        finally:
            self._close()

    def _close(self) -> None:
        writer, self._writer, self._reader = self._writer, None, None
        if writer is not None:
            writer.close()

    def _start_sending(self) -> None:
        self._stop_sending()
        loop = asyncio.get_running_loop()
        for kind, interval in self.schedule_intervals().items():
            self._tasks.append(loop.create_task(self._report(interval, _BUILDERS[kind])))

    def _stop_sending(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    async def _report(
        self, interval: float, build: Callable[[random.Random], dict[str, Any]]
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            self.send(build(self.rng))


async def run_emulators(
    count: int = DEFAULT_CLIENT_COUNT, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> None:
    """Start ``count`` emulators, a short pause apart, and run them until cancelled."""
    logger.info("Starting %d client emulators...", count)
    tasks: list[asyncio.Task[None]] = []
    try:
        for _ in range(count):
            tasks.append(asyncio.create_task(DeviceEmulator(host, port).run()))
            await asyncio.sleep(START_STAGGER)
        logger.info("All clients started. Press Ctrl+C to stop.")
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def main(argv: list[str] | None = None) -> int:
    """Run a number of device emulators until interrupted."""
    parser = argparse.ArgumentParser(description="Run device emulators.")
    parser.add_argument("count", nargs="?", default=str(DEFAULT_CLIENT_COUNT))
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        asyncio.run(run_emulators(_to_int(args.count), args.host, args.port))
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())