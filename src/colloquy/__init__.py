"""Colloquy - multi-agent discussion threads backed by chat-completion APIs."""

__version__ = "0.3.0"
