"""Test utilities for perch applications.

Provides an ASGI test client and a context manager for driving controls
outside a request::

    from perch.testing import TestClient, mock_context
"""

from perch.testing.client import TestClient
from perch.testing.mock import mock_context

__all__ = [
    "TestClient",
    "mock_context",
]
