"""Pytest configuration to ensure the project root is on ``sys.path``.

This makes the top-level ``notify`` package importable when running ``pytest``
from a checkout without installing it first.
"""
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def logfile(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "myservice.log"
