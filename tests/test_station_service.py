"""Tests for station CRUD, numbering and device registration."""

import pytest

from inventory.errors import ConflictError, NotFoundError
from inventory.models import Position


class TestCreateStation:
    def test_new_station_is_empty_and_unnumbered(self, station_service):
        station = station_service.create_station("mouse", Position(10, 20), "A1")

        assert station.station_number is None
        assert station.display_number == "Unnumbered"
        assert station.status == "empty"
        assert station_service.get_station(station.id).position == Position(10, 20)

    def test_bulk_create(self, station_service):
        created = station_service.bulk_create([
            {"device_type": "mouse", "position": Position(0, 0), "bay": "A1"},
            {"device_type": "keyboard", "position": None},
        ])

        assert [s.device_type for s in created] == ["mouse", "keyboard"]
        assert created[1].position == Position(0, 0)
        assert created[1].bay is None


class TestNumbering:
    def test_assign_number(self, station_service, make_station):
        station = make_station(4, 0, 0)
        assert station_service.get_station(station.id).station_number == 4
        assert station_service.next_station_number("mouse") == 5

    def test_duplicate_number_rejected(self, station_service, make_station):
        make_station(1, 0, 0)
        other = make_station(None, 60, 0)

        with pytest.raises(ConflictError, match="Station number 1 already exists for mouse"):
            station_service.assign_number(other.id, 1)

    def test_same_number_allowed_across_device_types(self, make_station):
        make_station(1, 0, 0)
        keyboard = make_station(1, 0, 0, device_type="keyboard")
        assert keyboard.station_number == 1

    def test_deleted_station_releases_number(self, station_service, make_station):
        first = make_station(1, 0, 0)
        station_service.delete_station(first.id)

        second = make_station(None, 0, 0)
        assert station_service.assign_number(second.id, 1).station_number == 1


class TestDevices:
    def test_register_and_remove(self, station_service, make_station):
        station = make_station(1, 0, 0)

        registered = station_service.register_device(station.id, "SN1", "HP", "X500", "desk 4")
        assert registered.status == "occupied"
        assert station_service.get_station(station.id).device.serial_number == "SN1"

        removed = station_service.remove_device(station.id)
        assert removed.device is None
        assert station_service.get_station(station.id).has_device is False

    def test_duplicate_serials_are_allowed(self, station_service, make_station):
        first = make_station(1, 0, 0)
        second = make_station(2, 60, 0)
        station_service.register_device(first.id, "SN1")
        station_service.register_device(second.id, "SN1")

        assert len(station_service.find_by_serial("SN1", "mouse")) == 2

    def test_search_by_partial_serial(self, station_service, make_station):
        station = make_station(1, 0, 0)
        station_service.register_device(station.id, "ABC-123")
        make_station(2, 60, 0)

        found = station_service.search("mouse", serial_number="c-1")
        assert [s.id for s in found] == [station.id]

    def test_list_by_device_presence(self, station_service, make_station):
        station = make_station(1, 0, 0)
        make_station(2, 60, 0)
        station_service.register_device(station.id, "SN1")

        assert len(station_service.list_stations("mouse", has_device=True)) == 1
        assert len(station_service.list_stations("mouse", has_device=False)) == 1


class TestUpdatesAndDeletion:
    def test_move_and_reassign(self, station_service, make_station):
        station = make_station(1, 0, 0)

        station_service.update_position(station.id, 45, 90)
        station_service.assign_bay(station.id, "B2")

        stored = station_service.get_station(station.id)
        assert stored.position == Position(45, 90)
        assert stored.bay == "B2"

    def test_deleted_station_is_hidden(self, station_service, make_station):
        station = make_station(1, 0, 0)
        station_service.delete_station(station.id)

        assert station_service.list_stations("mouse") == []
        with pytest.raises(NotFoundError, match="Station not found"):
            station_service.get_station(station.id)

    def test_unknown_station(self, station_service):
        with pytest.raises(NotFoundError):
            station_service.remove_device("missing")


class TestCopyStations:
    def test_clipboard_keeps_request_order(self, station_service, make_station):
        first = make_station(1, 0, 0)
        second = make_station(2, 60, 0)

        clipboard = station_service.copy_stations([second.id, "missing", first.id])

        assert clipboard["type"] == "station"
        assert clipboard["count"] == 2
        assert [s.id for s in clipboard["items"]] == [second.id, first.id]

    def test_nothing_to_copy(self, station_service, make_station):
        station = make_station(1, 0, 0)
        station_service.delete_station(station.id)

        with pytest.raises(NotFoundError, match="No stations found"):
            station_service.copy_stations([station.id])
