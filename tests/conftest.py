"""
Shared pytest fixtures for the Americano organizer tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from filelock import FileLock

from americano.fixture import generate_fixture


@pytest.fixture
def eight_players():
    """Roster A..H."""
    return ["A", "B", "C", "D", "E", "F", "G", "H"]


@pytest.fixture
def ten_players():
    """The built-in fallback roster."""
    return ["Mesut", "Berk", "Mumtaz", "Ahmet", "Erdem", "Sercan", "Sezgin", "Batuhan", "Emre", "Okan"]


@pytest.fixture
def two_courts():
    return ["Saha 1", "Saha 2"]


@pytest.fixture
def single_match_fixture(eight_players):
    """One round, one slot, one court: E & F vs G & H with A-D benched."""
    return generate_fixture(eight_players, 1, 1, ["Court 1"])


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point every data file of the app at a temporary directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()

    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'PLAYERS_FILE', str(data_dir / "players.yaml"))
    monkeypatch.setattr(app_module, 'PLAYERS_OVERRIDE_FILE', str(data_dir / "players_override.yaml"))
    monkeypatch.setattr(app_module, 'CONFIG_FILE', str(data_dir / "config.yaml"))
    monkeypatch.setattr(app_module, 'POINTS_FILE', str(data_dir / "points.yaml"))
    monkeypatch.setattr(app_module, 'MATCHES_FILE', str(data_dir / "matches.yaml"))
    monkeypatch.setattr(app_module, 'CONFIG_SHARED_FILE', str(data_dir / "config_shared.yaml"))
    monkeypatch.setattr(app_module, '_data_lock', FileLock(str(data_dir / ".lock"), timeout=10))

    return str(data_dir)
