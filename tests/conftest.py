"""
Shared fixtures for invoice tests.
"""

import pytest
import tempfile
from datetime import datetime
from pathlib import Path
from unittest.mock import patch


# Sunday
FIXED_NOW = datetime(2026, 10, 18, 14, 5)
CAPTION = "#+CAPTION: Clock summary at [2026-10-18 Sun 14:05]"


@pytest.fixture
def temp_app_dir():
    """Point the config file at a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with patch('clock_invoice.utils.config.get_app_dir', return_value=Path(tmpdir)):
            yield Path(tmpdir)


@pytest.fixture
def client_source():
    """One document: a 95 minute task with a 30 minute subtask."""
    return {
        "name": "client-a.org",
        "total_minutes": 95,
        "entries": [
            {"level": 1, "headline": "Client A", "minutes": 95,
             "properties": {"Effort": "1:30", "Comment": "Kickoff call"}},
            {"level": 2, "headline": "Review", "minutes": 30, "properties": {}},
        ],
    }


@pytest.fixture
def second_source():
    return {
        "name": "client-b.org",
        "total_minutes": 45,
        "entries": [
            {"level": 1, "headline": "Client B", "minutes": 45},
        ],
    }


@pytest.fixture
def empty_source():
    return {
        "name": "idle.org",
        "total_minutes": 0,
        "entries": [
            {"level": 1, "headline": "Nothing clocked", "minutes": 0},
        ],
    }
