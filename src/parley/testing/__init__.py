"""Testing utilities for locale-routed applications."""

from parley.testing.client import TestClient

__all__ = ["TestClient"]
