"""Tests for utils/sanitize.py."""

from __future__ import annotations

from colloquy.utils.sanitize import sanitize_error


def test_redacts_bearer_token():
    assert sanitize_error("sent Bearer abc.def") == "sent Bearer [REDACTED]"


def test_redacts_sk_keys():
    assert "[REDACTED_KEY]" in sanitize_error("bad key sk-abcdefghijklmnopqrstuvwxyz")


def test_redacts_configured_secret():
    assert sanitize_error("key was my-secret-key", ["my-secret-key"]) == "key was [REDACTED_KEY]"


def test_empty_passthrough():
    assert sanitize_error("") == ""
