"""Parse GDB/MI records and MessagePack RPC records, and drive GDB over its MI."""

__version__ = "1.0.0"