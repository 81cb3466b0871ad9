"""triplog - EV trip log analytics store."""

__version__ = "1.0.0"
