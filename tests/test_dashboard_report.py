from pathlib import Path

import numpy as np
import pandas as pd

import dashboard_report
from dashboard_report import build_dashboard, main, parse_args
from delay_aggregation import heatmap_by_day_hour, monthly_trend, route_delays
from flight_filters import FilterSpec
from flight_records import RECORD_COLUMNS, generate_sample_flights, records_to_frame
from health_scoring import airline_health_scores, route_health_scores

SCENARIO_CSV = (
    "AIRLINE,ORIGIN_AIRPORT,DESTINATION_AIRPORT,DEPARTURE_DELAY,ARRIVAL_DELAY\n"
    "Delta,NYC,LAX,20,25\n"
    "Delta,NYC,LAX,-5,-10\n"
    "United,SEA,BOS,0,500\n"
)

DASHBOARD_KEYS = {
    "filters",
    "filter_options",
    "overview",
    "airline_delays",
    "weekday_delays",
    "monthly_trend",
    "route_ranking",
    "route_ranking_summary",
    "heatmap",
    "route_health",
    "airline_health",
    "overall_health",
}


def test_build_dashboard_uses_filtered_rows(make_flight) -> None:
    records = [
        make_flight(airline="Delta", arrival_delay=10),
        make_flight(airline="United", origin_airport="SEA", arrival_delay=20),
        make_flight(airline="Delta", arrival_delay=500),
    ]
    dashboard = build_dashboard(records, FilterSpec(airline="Delta"))

    assert set(dashboard) == DASHBOARD_KEYS
    assert dashboard["overview"]["total_flights"] == 1
    assert dashboard["airline_delays"]["airline"].tolist() == ["Delta"]
    # dropdown options still list everything
    assert dashboard["filter_options"]["airlines"] == ["Delta", "United"]


def test_build_dashboard_handles_empty_selection(make_flight) -> None:
    dashboard = build_dashboard([make_flight(arrival_delay=900)])

    assert dashboard["overview"]["total_flights"] == 0
    assert dashboard["route_health"].empty
    assert dashboard["overall_health"] == 0.0
    assert len(dashboard["heatmap"]) == 168


def test_build_dashboard_on_sample_data() -> None:
    dashboard = build_dashboard(generate_sample_flights(rng=np.random.RandomState(11)))

    assert len(dashboard["route_ranking"]) == 15
    assert 0 <= dashboard["overall_health"] <= 100


def test_build_dashboard_builds_one_frame(monkeypatch, make_flight) -> None:
    calls = []

    def counting(records):
        calls.append(1)
        return records_to_frame(records)

    monkeypatch.setattr(dashboard_report, "records_to_frame", counting)
    build_dashboard([make_flight(), make_flight(airline="United", arrival_delay=40)])

    assert len(calls) == 1


def test_views_leave_a_shared_frame_untouched() -> None:
    frame = records_to_frame(generate_sample_flights(rng=np.random.RandomState(12)))
    before = frame.copy()

    for view in (monthly_trend, route_delays, airline_health_scores, route_health_scores, heatmap_by_day_hour):
        view(frame)

    assert list(frame.columns) == RECORD_COLUMNS
    pd.testing.assert_frame_equal(frame, before)


def test_views_agree_on_records_and_frames(make_flight) -> None:
    records = [
        make_flight(arrival_delay=10),
        make_flight(origin_airport="SEA", arrival_delay=70, departure_delay=30),
    ]
    frame = records_to_frame(records)

    pd.testing.assert_frame_equal(airline_health_scores(records), airline_health_scores(frame))
    pd.testing.assert_frame_equal(monthly_trend(records), monthly_trend(frame))


def test_parse_args_defaults() -> None:
    args = parse_args([])

    assert args.csv is None
    assert args.airline == "all"
    assert (args.min_delay, args.max_delay) == (-50, 200)
    assert args.top == 15


def test_main_reports_uploaded_csv(tmp_path: Path, capsys) -> None:
    path = tmp_path / "flights.csv"
    path.write_text(SCENARIO_CSV)

    main([str(path), "--seed", "1"])
    out = capsys.readouterr().out

    assert "Analyzing 2 flight records" in out
    assert "NYC-LAX" in out
    # arrival delay 500 is outside the default range
    assert "SEA-BOS" not in out
    assert "Overall system health: 50.0" in out
    assert "sample data" not in out


def test_main_filters_by_route(tmp_path: Path, capsys) -> None:
    path = tmp_path / "flights.csv"
    path.write_text(SCENARIO_CSV)

    main([str(path), "--route", "SEA-BOS", "--max-delay", "1000"])
    out = capsys.readouterr().out

    assert "Analyzing 1 flight records" in out


def test_main_falls_back_to_sample_data(tmp_path: Path, capsys) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("AIRLINE,ARRIVAL_DELAY\n")

    main([str(path), "--seed", "3", "--top", "5"])
    out = capsys.readouterr().out

    assert "Showing generated sample data" in out
    assert "Top 5 most delayed routes" in out


def test_main_without_csv_uses_sample_data(capsys) -> None:
    main(["--seed", "5"])
    out = capsys.readouterr().out

    assert "Showing generated sample data" in out
    assert "Overall system health" in out
