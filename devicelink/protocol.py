"""JSON messages exchanged between device emulators and the telemetry server."""

from __future__ import annotations

import json
import random
from enum import Enum
from typing import Any

SEVERITIES = ("INFO", "WARNING", "ERROR")

LOG_MESSAGES = (
    "System boot completed",
    "Network interface eth0 connected",
    "High CPU usage detected",
    "Memory threshold exceeded",
    "Packet loss increased",
    "Device temperature normal",
    "Disk space low",
    "Scheduled maintenance required",
)


class MessageType(str, Enum):
    """Values of the ``type`` field of a message."""

    CONNECTION_ACK = "connection_ack"
    DATA_ACK = "data_ack"
    NETWORK_METRICS = "NetworkMetrics"
    DEVICE_STATUS = "DeviceStatus"
    LOG = "Log"


class ProtocolError(ValueError):
    """Raised when received bytes are not a JSON object."""

    def __init__(self, message: str, *, not_object: bool = False) -> None:
        super().__init__(message)
        self.not_object = not_object


def encode_message(message: dict[str, Any]) -> bytes:
    """Serialise a message as indented JSON with sorted keys and a trailing newline."""
    text = json.dumps(message, indent=4, sort_keys=True, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


def decode_message(data: bytes | str) -> dict[str, Any]:
    """Parse received bytes into a message object."""
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        value = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(str(exc)) from exc
    if not isinstance(value, dict):
        raise ProtocolError("Received data is not a JSON object", not_object=True)
    return value


def compact(message: dict[str, Any]) -> str:
    """Return the single-line JSON form of a message."""
    return json.dumps(message, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def connection_ack(client_id: str) -> dict[str, Any]:
    """Build the acknowledgment sent to a newly connected client."""
    return {"type": MessageType.CONNECTION_ACK.value, "client_id": client_id}


def data_ack(data_type: str) -> dict[str, Any]:
    """Build the acknowledgment for a received data message."""
    return {"type": MessageType.DATA_ACK.value, "data_type": data_type, "status": "received"}


def _rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def network_metrics(rng: random.Random | None = None) -> dict[str, Any]:
    """Build a random network metrics report."""
    rng = _rng(rng)
    return {
        "type": MessageType.NETWORK_METRICS.value,
        "bandwidth": rng.randrange(1000) / 10.0,
        "latency": rng.randrange(100) / 10.0,
        "packet_loss": rng.randrange(50) / 1000.0,
    }


def device_status(rng: random.Random | None = None) -> dict[str, Any]:
    """Build a random device status report."""
    rng = _rng(rng)
    return {
        "type": MessageType.DEVICE_STATUS.value,
        "uptime": rng.randrange(100000),
        "cpu_usage": rng.randrange(100),
        "memory_usage": rng.randrange(100),
    }


def log_entry(rng: random.Random | None = None) -> dict[str, Any]:
    """Build a random log record."""
    rng = _rng(rng)
    return {
        "type": MessageType.LOG.value,
        "severity": SEVERITIES[rng.randrange(len(SEVERITIES))],
        "message": LOG_MESSAGES[rng.randrange(len(LOG_MESSAGES))],
    }