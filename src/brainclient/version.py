"""Client version reported to the hub in every request."""

CLIENT_VERSION = "1.2.0"

__all__ = ["CLIENT_VERSION"]
