import os
import sys

import pytest

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock():
    return FakeClock()
