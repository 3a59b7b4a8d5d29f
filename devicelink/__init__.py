"""Telemetry server, device emulators and the JSON messages they exchange over TCP."""

__version__ = "0.1.0"
__all__ = ["__version__"]