"""IDL Sentinel - on-chain interface definition change monitoring."""

__version__ = "0.1.0"
