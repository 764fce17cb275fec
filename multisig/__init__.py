"""Multi-signature treasury with proposal voting over ICRC-1 style ledgers, run on an in-process runtime."""

__version__ = "0.1.0"