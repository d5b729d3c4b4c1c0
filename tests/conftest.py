"""
Shared pytest fixtures for scheduling engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
import yaml

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from scheduling.models import CustomPlayoffConfig, Format


@pytest.fixture
def client():
    """Create a test client for the JSON service."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def four_teams():
    return ['A', 'B', 'C', 'D']


@pytest.fixture
def make_teams():
    """Factory for ``n`` team ids in seed order: T1, T2, ..."""
    def _make(n):
        return [f"T{i}" for i in range(1, n + 1)]
    return _make


@pytest.fixture
def league_format():
    return Format(rounds=1, mode='league')


@pytest.fixture
def custom_format():
    return Format(mode='custom_playoff', custom_config=CustomPlayoffConfig(field_size=8))


@pytest.fixture
def data_files(tmp_path):
    """Write a team list and a format file into a temporary data directory."""
    teams_file = tmp_path / "teams.yaml"
    format_file = tmp_path / "format.yaml"
    with open(teams_file, 'w') as f:
        yaml.dump({'teams': ['A', 'B', 'C', 'D']}, f)
    with open(format_file, 'w') as f:
        yaml.dump({'rounds': 1, 'mode': 'league'}, f)
    return {
        'dir': tmp_path,
        'teams': str(teams_file),
        'format': str(format_file),
        'schedule': str(tmp_path / "schedule.yaml"),
    }
