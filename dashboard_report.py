#!/usr/bin/env python3
"""
Build the flight delay dashboard and print it as console tables.

Loads a CSV upload (or sample data when none is given or the file has no
usable rows), applies the airline / route / arrival-delay filters, and runs
every dashboard view: delay by airline and weekday, monthly trend, most
delayed routes, weekday x hour heatmap, and route / airline health scores.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from delay_aggregation import (
    TOP_ROUTES,
    dataset_overview,
    delay_by_airline,
    delay_by_weekday,
    heatmap_by_day_hour,
    monthly_trend,
    route_ranking_summary,
    top_delayed_routes,
)
from flight_filters import ALL, DEFAULT_DELAY_RANGE, FilterSpec, apply_filters, filter_options
from flight_records import (
    DELAY_THRESHOLD,
    FlightRecord,
    generate_sample_flights,
    load_flight_dataset,
    records_to_frame,
)
from health_scoring import airline_health_scores, overall_health, route_health_scores


def build_dashboard(
    records: List[FlightRecord],
    spec: Optional[FilterSpec] = None,
    top_n: int = TOP_ROUTES,
) -> dict:
    """
    Filter the full record set and compute every view from the filtered rows.
    Filter options always come from the unfiltered set.
    """
    spec = spec or FilterSpec()
    filtered = records_to_frame(apply_filters(records, spec))
    route_ranking = top_delayed_routes(filtered, top_n=top_n)
    route_scores = route_health_scores(filtered)
    return {
        "filters": spec,
        "filter_options": filter_options(records),
        "overview": dataset_overview(filtered),
        "airline_delays": delay_by_airline(filtered),
        "weekday_delays": delay_by_weekday(filtered),
        "monthly_trend": monthly_trend(filtered),
        "route_ranking": route_ranking,
        "route_ranking_summary": route_ranking_summary(route_ranking),
        "heatmap": heatmap_by_day_hour(filtered),
        "route_health": route_scores,
        "airline_health": airline_health_scores(filtered),
        "overall_health": overall_health(route_scores),
    }


def _print_table(title: str, table: pd.DataFrame) -> None:
    print(f"\n{title}")
    if table.empty:
        print("  No flights match the current filters.")
    else:
        print(table.round(1).to_string(index=False))


def print_dashboard(dashboard: dict, used_sample: bool = False) -> None:
    overview = dashboard["overview"]
    spec = dashboard["filters"]
    if used_sample:
        print("Showing generated sample data (no usable rows in the upload).")
    print(
        f"Filters: airline={spec.airline}, route={spec.route}, "
        f"arrival delay {spec.delay_range[0]} to {spec.delay_range[1]} min"
    )
    print(f"Analyzing {overview['total_flights']:,} flight records")
    print(
        f"Mean arrival delay: {overview['avg_arrival_delay']:.1f} min; "
        f"max arrival delay: {overview['max_arrival_delay']:.0f} min; "
        f"on time (arrival <= {DELAY_THRESHOLD} min): {overview['on_time_rate']:.1f}%"
    )

    _print_table("Average delay by airline (min):", dashboard["airline_delays"])
    _print_table("Average arrival delay by day of week (min):", dashboard["weekday_delays"])
    _print_table("Monthly trend:", dashboard["monthly_trend"])

    ranking = dashboard["route_ranking"]
    _print_table(f"Top {len(ranking)} most delayed routes:", ranking)
    headline = dashboard["route_ranking_summary"]
    print(
        f"Worst route avg: {headline['worst_avg_delay']:.1f} min; "
        f"best of ranked: {headline['best_avg_delay']:.1f} min; "
        f"mean delay rate: {headline['mean_delay_rate']:.1f}%"
    )

    heatmap = dashboard["heatmap"]
    pivot = heatmap.pivot(index="day", columns="hour", values="avg_delay").reindex(
        heatmap["day"].drop_duplicates()
    )
    print("\nAverage arrival delay by day and scheduled departure hour (min):")
    print(pivot.round(0).to_string())

    _print_table("Route health scores:", dashboard["route_health"])
    _print_table("Airline health scores (not normalized):", dashboard["airline_health"])
    print(f"\nOverall system health: {dashboard['overall_health']:.1f}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Summarize flight delays and route health from a CSV upload."
    )
    parser.add_argument(
        "csv",
        nargs="?",
        type=Path,
        default=None,
        help="Flight CSV with a header row. Uses generated sample data when omitted.",
    )
    parser.add_argument("--airline", default=ALL, help="Only include this airline.")
    parser.add_argument("--route", default=ALL, help="Only include this ORIGIN-DEST route.")
    parser.add_argument(
        "--min-delay",
        type=float,
        default=DEFAULT_DELAY_RANGE[0],
        help="Lowest arrival delay (minutes) to include.",
    )
    parser.add_argument(
        "--max-delay",
        type=float,
        default=DEFAULT_DELAY_RANGE[1],
        help="Highest arrival delay (minutes) to include.",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=TOP_ROUTES,
        help="How many of the most delayed routes to show.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for sample data and defaulted fields, for repeatable output.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log parsing and filtering details.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    rng = np.random.RandomState(args.seed) if args.seed is not None else None

    if args.csv is None:
        records, used_sample = generate_sample_flights(rng=rng), True
    else:
        records, used_sample = load_flight_dataset(args.csv, rng=rng)

    spec = FilterSpec(
        airline=args.airline,
        route=args.route,
        delay_range=(args.min_delay, args.max_delay),
    )
    dashboard = build_dashboard(records, spec, top_n=args.top)
    print_dashboard(dashboard, used_sample=used_sample)


if __name__ == "__main__":
    main()
