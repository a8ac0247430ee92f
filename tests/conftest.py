import importlib
import sys
from pathlib import Path

import pytest

# Ensure the package under test is importable without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def fresh_config(monkeypatch):
    """
    Reload config so environment overrides take effect, and restore it afterwards.
    """
    import smrec.config as config

    yield lambda: importlib.reload(config)
    monkeypatch.undo()
    importlib.reload(config)


@pytest.fixture
def tiny_transactions():
    """Three items, one tag type: A-x, A-y, B-x, C-y."""
    return [
        {"Item": "A", "genre": "x"},
        {"Item": "A", "genre": "y"},
        {"Item": "B", "genre": "x"},
        {"Item": "C", "genre": "y"},
    ]


@pytest.fixture
def tiny_smr(tiny_transactions):
    from smrec.matrix_builder import build_from_transactions

    return build_from_transactions(tiny_transactions, ["genre"], "Item")


@pytest.fixture
def movie_transactions():
    return [
        {"Movie": "heat", "Genre": "crime", "Director": "mann"},
        {"Movie": "heat", "Genre": "drama", "Director": "mann"},
        {"Movie": "collateral", "Genre": "crime", "Director": "mann"},
        {"Movie": "alien", "Genre": "horror", "Director": "scott"},
        {"Movie": "alien", "Genre": "scifi", "Director": "scott"},
        {"Movie": "aliens", "Genre": "scifi", "Director": "cameron"},
        {"Movie": "aliens", "Genre": "action", "Director": "cameron"},
        {"Movie": "gladiator", "Genre": "drama", "Director": "scott"},
        {"Movie": "gladiator", "Genre": "action", "Director": "scott"},
    ]


@pytest.fixture
def movie_smr(movie_transactions):
    from smrec.matrix_builder import build_from_transactions

    return build_from_transactions(movie_transactions, ["Genre", "Director"], "Movie")
