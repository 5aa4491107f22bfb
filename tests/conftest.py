import itertools

import pytest

from flight_records import make_record

BASE_FLIGHT = {
    "year": 2024,
    "month": 1,
    "day": 1,
    "day_of_week": 1,
    "airline": "Delta",
    "flight_number": 100,
    "origin_airport": "NYC",
    "destination_airport": "LAX",
    "scheduled_departure": 800,
    "departure_time": 800,
    "departure_delay": 0,
    "scheduled_time": 300,
    "elapsed_time": 300,
    "distance": 2475,
    "scheduled_arrival": 1100,
    "arrival_time": 1100,
    "arrival_delay": 0,
}


@pytest.fixture
def make_flight():
    """
    Build FlightRecords from BASE_FLIGHT plus overrides, with ids counting up
    from 0 in creation order.
    """
    ids = itertools.count()

    def _make(**overrides):
        return make_record(next(ids), {**BASE_FLIGHT, **overrides})

    return _make
