import logging

import pytest

from cli.main import main
from database.DatabaseProvider import DatabaseProvider
from database.QueryExecutor import QueryExecutor
from database.StationRepository import StationRepository
from inventory.StationService import StationService
from inventory.models import Position


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "cli.db")
    provider = DatabaseProvider(path)
    provider.initialize_schema()
    service = StationService(StationRepository(QueryExecutor(provider.get_connection())))
    for number in (1, 2):
        station = service.create_station("mouse", Position(100, 100), "A1")
        service.assign_number(station.id, number)
    provider.close()
    return path


def test_init_db_logs_command(tmp_path, caplog, capsys):
    path = str(tmp_path / "fresh.db")

    with caplog.at_level(logging.INFO, logger="cli"):
        assert main(["--db", path, "init-db"]) == 0

    assert "Schema ready" in capsys.readouterr().out
    assert f"Running init-db on {path}" in caplog.text


def test_validate_fails_on_overlap(db_path, caplog, capsys):
    with caplog.at_level(logging.INFO, logger="cli"):
        assert main(["--db", db_path, "validate", "mouse"]) == 1

    assert "[overlap]" in capsys.readouterr().out
    assert "Layout check failed with 1 issues" in caplog.text


def test_autofix_then_validate(db_path, capsys):
    assert main(["--db", db_path, "autofix", "mouse"]) == 0
    assert "Moved station 2 to resolve overlap" in capsys.readouterr().out

    assert main(["--db", db_path, "validate", "mouse", "--bay", "A1"]) == 0
