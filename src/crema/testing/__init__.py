"""Test utilities for crema applications::

    from crema.testing import TestClient
"""

from crema.testing.client import TestClient

__all__ = ["TestClient"]
