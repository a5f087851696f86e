"""Swapper: order-book priced currency swap quotes with timed confirmation."""

__version__ = "0.1.0"
