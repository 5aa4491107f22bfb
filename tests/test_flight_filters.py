import pytest

from flight_filters import DEFAULT_DELAY_RANGE, FilterSpec, apply_filters, filter_options


@pytest.fixture
def flights(make_flight):
    return [
        make_flight(airline="Delta", origin_airport="NYC", destination_airport="LAX", arrival_delay=10),
        make_flight(airline="United", origin_airport="SEA", destination_airport="BOS", arrival_delay=500),
        make_flight(airline="Delta", origin_airport="SEA", destination_airport="BOS", arrival_delay=-50),
        make_flight(airline="United", origin_airport="NYC", destination_airport="LAX", arrival_delay=200),
        make_flight(airline="Alaska", origin_airport="NYC", destination_airport="LAX", arrival_delay=-51),
    ]


def test_default_spec_keeps_only_default_delay_range(flights) -> None:
    result = apply_filters(flights, FilterSpec())

    assert FilterSpec().delay_range == DEFAULT_DELAY_RANGE == (-50, 200)
    # boundaries are inclusive; 500 and -51 fall outside
    assert [r.id for r in result] == [0, 2, 3]


def test_airline_filter(flights) -> None:
    result = apply_filters(flights, FilterSpec(airline="Delta"))

    assert [r.id for r in result] == [0, 2]


def test_route_filter(flights) -> None:
    result = apply_filters(flights, FilterSpec(route="NYC-LAX"))

    assert [r.id for r in result] == [0, 3]


def test_filters_combine_as_conjunction(flights) -> None:
    result = apply_filters(flights, FilterSpec(airline="United", route="NYC-LAX", delay_range=(0, 100)))

    assert result == []


def test_filtering_is_idempotent(flights) -> None:
    spec = FilterSpec(route="SEA-BOS", delay_range=(-60, 600))
    once = apply_filters(flights, spec)

    assert apply_filters(once, spec) == once
    assert [r.id for r in once] == [1, 2]


def test_inverted_range_matches_nothing(flights) -> None:
    assert apply_filters(flights, FilterSpec(delay_range=(100, -100))) == []


def test_empty_input() -> None:
    assert apply_filters([], FilterSpec(airline="Delta")) == []


def test_filter_does_not_mutate_input(flights) -> None:
    before = list(flights)
    apply_filters(flights, FilterSpec(airline="Delta"))

    assert flights == before


def test_filter_options_are_sorted_and_distinct(flights) -> None:
    options = filter_options(flights)

    assert options["airlines"] == ["Alaska", "Delta", "United"]
    assert options["routes"] == ["NYC-LAX", "SEA-BOS"]
