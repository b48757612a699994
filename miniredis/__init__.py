"""Command layer of a small Redis-compatible server: RESP frames and commands."""

__version__ = "0.4.1"