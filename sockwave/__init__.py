"""WebSocket frames, messages, codecs, handshake validation and a blocking upgrade server."""

__version__ = "0.1.0"