"""Test utilities for perch applications.

Provides an ASGI test client and a recording result processor::

    from perch.testing import ResultRecorder, TestClient
"""

from perch.testing.client import TestClient
from perch.testing.recorder import RecordedResult, ResultRecorder

__all__ = [
    "RecordedResult",
    "ResultRecorder",
    "TestClient",
]
