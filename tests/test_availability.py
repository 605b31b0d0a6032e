"""Tests for the availability suggester."""

import pytest

from turnero.config import SlotsConfig
from turnero.core.availability import AvailabilitySuggester, parse_hhmm
from turnero.core.registry import BookingRegistry
from turnero.database import Database
from turnero.errors import StoreUnavailableError
from turnero.models import BookingInput, Service

DATE = "2025-10-15"
SERVICE = "Corte clásico"
CATALOG = [Service(id="", name="Corte clásico"), Service(id="", name="Barba")]


@pytest.fixture
def db(tmp_path):
    d = Database(tmp_path / "test.db")
    d.connect()
    d.seed_services(CATALOG)
    yield d
    d.close()


@pytest.fixture
def registry(db):
    return BookingRegistry(db)


@pytest.fixture
def suggester(registry):
    return AvailabilitySuggester(SlotsConfig(), registry)


def _book(registry, time, service=SERVICE, date=DATE):
    return registry.create(BookingInput(
        name="Cliente", service=service, date=date, time=time, phone="+5400000",
    ))


def test_parse_hhmm():
    assert parse_hhmm("09:30") == (9, 30)
    assert parse_hhmm("9:05") == (9, 5)


def test_daily_grid_default():
    grid = AvailabilitySuggester(SlotsConfig(), None).daily_grid(DATE)
    assert grid[0] == "09:00"
    assert grid[-1] == "18:30"  # closing time is exclusive
    assert len(grid) == 20
    assert grid == sorted(grid)


def test_daily_grid_custom_step():
    config = SlotsConfig(opening_time="10:00", closing_time="12:00", step_minutes=45)
    grid = AvailabilitySuggester(config, None).daily_grid(DATE)
    assert grid == ["10:00", "10:45", "11:30"]


def test_daily_grid_invalid_date():
    assert AvailabilitySuggester(SlotsConfig(), None).daily_grid("mañana") == []


def test_suggestions_closest_to_requested_time(registry, suggester):
    _book(registry, "11:30")
    assert suggester.suggest_slots(DATE, SERVICE, near="11:30") == ["10:30", "11:00", "12:00"]


def test_suggestions_skip_occupied(registry, suggester):
    for t in ("11:00", "11:30", "12:00"):
        _book(registry, t)

    suggestions = suggester.suggest_slots(DATE, SERVICE, near="11:30")

    assert suggestions == ["10:00", "10:30", "12:30"]
    for t in suggestions:
        assert registry.is_slot_available(DATE, t, SERVICE)


def test_suggestions_never_include_requested_time(suggester):
    # Requested slot is free here, yet it is not offered back
    assert "11:30" not in suggester.suggest_slots(DATE, SERVICE, near="11:30")


def test_suggestions_only_check_the_same_service(registry, suggester):
    _book(registry, "11:00", service="Barba")
    _book(registry, "11:30")
    assert "11:00" in suggester.suggest_slots(DATE, SERVICE, near="11:30")


def test_suggestions_without_near_are_earliest(registry, suggester):
    _book(registry, "09:00")
    assert suggester.suggest_slots(DATE, SERVICE) == ["09:30", "10:00", "10:30"]


def test_suggestions_ascending_and_deterministic(registry, suggester):
    _book(registry, "14:00")
    first = suggester.suggest_slots(DATE, SERVICE, near="14:00")
    second = suggester.suggest_slots(DATE, SERVICE, near="14:00")
    assert first == second
    assert first == sorted(first)


def test_suggestions_near_opening(registry, suggester):
    _book(registry, "09:00")
    assert suggester.suggest_slots(DATE, SERVICE, near="09:00") == ["09:30", "10:00", "10:30"]


def test_suggestions_max_count(registry):
    config = SlotsConfig(max_suggestions=5)
    suggester = AvailabilitySuggester(config, registry)
    assert len(suggester.suggest_slots(DATE, SERVICE, near="12:00")) == 5


def test_fully_booked_day(registry):
    config = SlotsConfig(opening_time="09:00", closing_time="10:00")
    suggester = AvailabilitySuggester(config, registry)
    _book(registry, "09:00")
    _book(registry, "09:30")
    assert suggester.suggest_slots(DATE, SERVICE, near="09:00") == []


def test_invalid_date_returns_empty(suggester):
    assert suggester.suggest_slots("2025-02-30", SERVICE, near="10:00") == []


def test_invalid_near_ignored(suggester):
    assert suggester.suggest_slots(DATE, SERVICE, near="tarde") == ["09:00", "09:30", "10:00"]


def test_store_failure_returns_empty(db, suggester):
    def broken(*args, **kwargs):
        raise StoreUnavailableError("disk gone")

    db.find_booking = broken
    assert suggester.suggest_slots(DATE, SERVICE, near="10:00") == []


def test_negative_max_suggestions_yields_nothing(registry):
    suggester = AvailabilitySuggester(SlotsConfig(max_suggestions=-1), registry)
    assert suggester.suggest_slots(DATE, SERVICE, near="12:00") == []
