"""Images, ports, mounts, log streams and readiness conditions for Docker-based tests."""

__version__ = "0.1.0"

__all__ = [
    "build_images",
    "generic",
    "http_wait",
    "logs",
    "mounts",
    "no_expose_port",
    "ports",
    "simple_web_server",
    "strategies",
    "wait",
]