"""End-to-end test harness for an xy-chain node."""

__version__ = "0.1.0"
