"""Verbex: tool dispatch and transaction orchestration for gasless smart accounts."""

__version__ = "0.1.0"
