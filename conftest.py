"""Pytest configuration for the stachetype test suite."""
import sys
from pathlib import Path

import pytest

# Project root on the path so the main.py script can be imported by tests
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture
def write_file(tmp_path):
    """Write `text` to a file under tmp_path and return its path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write
