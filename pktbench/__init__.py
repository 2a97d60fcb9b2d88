"""Traffic generator and latency meter over UDP and raw packet sockets."""

__version__ = "0.1.0"

__all__ = ["__version__"]