import pytest

from database.AuditRepository import AuditRepository
from database.BayRepository import BayRepository
from database.DatabaseProvider import DatabaseProvider
from database.LogRepository import LogRepository
from database.QueryExecutor import QueryExecutor
from database.StationRepository import StationRepository
from inventory.AuditReports import AuditReports
from inventory.AuditService import AuditService
from inventory.BayService import BayService
from inventory.ChangeLog import ChangeLog
from inventory.StationService import StationService
from inventory.models import Position
from layout.LayoutEngine import LayoutEngine

API_KEY = "test-key"


@pytest.fixture
def executor():
    """Query executor over a fresh in-memory database"""
    provider = DatabaseProvider(":memory:")
    provider.initialize_schema()
    yield QueryExecutor(provider.get_connection())
    provider.close()


@pytest.fixture
def station_repo(executor):
    return StationRepository(executor)


@pytest.fixture
def bay_repo(executor):
    return BayRepository(executor)


@pytest.fixture
def station_service(station_repo):
    return StationService(station_repo)


@pytest.fixture
def bay_service(bay_repo, station_repo):
    return BayService(bay_repo, station_repo)


@pytest.fixture
def engine(station_repo):
    return LayoutEngine(station_repo)


@pytest.fixture
def change_log(executor):
    return ChangeLog(LogRepository(executor))


@pytest.fixture
def audit_service(executor, change_log):
    return AuditService(AuditRepository(executor), change_log)


@pytest.fixture
def audit_reports(executor):
    return AuditReports(AuditRepository(executor))


@pytest.fixture
def make_station(station_service):
    """Factory fixture for creating numbered stations at a position"""
    def _make_station(number, x, y, bay="A1", device_type="mouse"):
        station = station_service.create_station(device_type, Position(x, y), bay)
        if number is not None:
            station = station_service.assign_number(station.id, number)
        return station
    return _make_station


@pytest.fixture
def api_client(tmp_path, monkeypatch):
    """TestClient against a file-backed database in a temp directory"""
    from fastapi.testclient import TestClient

    from api.main import app

    monkeypatch.setenv("DB_PATH", str(tmp_path / "inventory.db"))
    monkeypatch.setenv("API_KEYS", API_KEY)
    monkeypatch.setenv("RATE_LIMIT_PER_HOUR", "1000")
    with TestClient(app) as client:
        client.headers.update({"Authorization": f"Bearer {API_KEY}"})
        yield client
