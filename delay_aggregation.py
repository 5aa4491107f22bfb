#!/usr/bin/env python3
"""
Delay aggregations behind the dashboard charts.

Each function takes a list of FlightRecords, or the frame built from them by
records_to_frame() (usually already filtered), and returns a DataFrame with
one row per group:
- delay by airline (departure and arrival means)
- delay by weekday, Monday first
- monthly trend with on-time rate
- top delayed routes
- weekday x departure-hour heatmap (full 7 x 24 grid)

Empty input never raises: the tables come back empty (the heatmap comes back
as a zero grid) and headline numbers fall back to 0.
"""

from __future__ import annotations

import calendar
from typing import Dict, List

import pandas as pd
from pandas import DataFrame

from flight_records import DELAY_THRESHOLD, WEEKDAY_ORDER, Records, as_frame

TOP_ROUTES = 15
HOURS = range(24)

MONTH_NAMES = {number: calendar.month_name[number] for number in range(1, 13)}

AIRLINE_COLUMNS = ["airline", "avg_departure_delay", "avg_arrival_delay", "flights"]
WEEKDAY_COLUMNS = ["day", "avg_delay", "flights"]
MONTH_COLUMNS = ["month", "month_name", "avg_delay", "flights", "on_time_rate"]
ROUTE_COLUMNS = ["route", "avg_delay", "flights", "delayed_flights", "delay_rate"]
HEATMAP_COLUMNS = ["day", "hour", "avg_delay", "flights"]


def _empty(columns: List[str]) -> DataFrame:
    return pd.DataFrame(columns=columns)


def delay_by_airline(records: Records) -> DataFrame:
    df = as_frame(records)
    if df.empty:
        return _empty(AIRLINE_COLUMNS)
    summary = df.groupby("airline", sort=False).agg(
        avg_departure_delay=("departure_delay", "mean"),
        avg_arrival_delay=("arrival_delay", "mean"),
        flights=("id", "count"),
    )
    return summary.reset_index()[AIRLINE_COLUMNS]


def delay_by_weekday(records: Records) -> DataFrame:
    """
    Mean arrival delay per weekday, in calendar order (Monday -> Sunday).
    Days with no flights are left out.
    """
    df = as_frame(records)
    if df.empty:
        return _empty(WEEKDAY_COLUMNS)
    summary = df.groupby("day_of_week_name", sort=False).agg(
        avg_delay=("arrival_delay", "mean"),
        flights=("id", "count"),
    )
    present = [day for day in WEEKDAY_ORDER if day in summary.index]
    summary = summary.loc[present].rename_axis("day")
    return summary.reset_index()[WEEKDAY_COLUMNS]


def monthly_trend(records: Records) -> DataFrame:
    """
    Mean arrival delay, flight count and on-time rate per month number,
    ascending. A flight is on time when its arrival delay is at most 15 min.
    """
    df = as_frame(records)
    if df.empty:
        return _empty(MONTH_COLUMNS)
    df = df[["id", "month", "arrival_delay"]].assign(on_time=df["arrival_delay"] <= DELAY_THRESHOLD)
    summary = df.groupby("month", sort=True).agg(
        avg_delay=("arrival_delay", "mean"),
        flights=("id", "count"),
        on_time=("on_time", "sum"),
    )
    summary["on_time_rate"] = summary["on_time"] / summary["flights"] * 100
    summary = summary.reset_index()
    summary["month_name"] = summary["month"].map(
        lambda month: MONTH_NAMES.get(month, str(month))
    )
    return summary[MONTH_COLUMNS]


def route_delays(records: Records) -> DataFrame:
    """All routes in first-seen order with arrival-delay statistics."""
    df = as_frame(records)
    if df.empty:
        return _empty(ROUTE_COLUMNS)
    df = df[["id", "route", "arrival_delay"]].assign(late=df["arrival_delay"] > DELAY_THRESHOLD)
    summary = df.groupby("route", sort=False).agg(
        avg_delay=("arrival_delay", "mean"),
        flights=("id", "count"),
        delayed_flights=("late", "sum"),
    )
    summary["delayed_flights"] = summary["delayed_flights"].astype(int)
    summary["delay_rate"] = summary["delayed_flights"] / summary["flights"] * 100
    return summary.reset_index()[ROUTE_COLUMNS]


def top_delayed_routes(records: Records, top_n: int = TOP_ROUTES) -> DataFrame:
    """
    The top_n routes by mean arrival delay, worst first. Ties keep the order
    in which the routes first appear in the data.
    """
    routes = route_delays(records)
    if routes.empty:
        return routes
    ranked = routes.sort_values("avg_delay", ascending=False, kind="mergesort")
    return ranked.head(top_n).reset_index(drop=True)


def route_ranking_summary(ranking: DataFrame) -> Dict[str, float]:
    """Headline numbers for a top_delayed_routes() table."""
    if ranking.empty:
        return {"worst_avg_delay": 0.0, "best_avg_delay": 0.0, "mean_delay_rate": 0.0}
    return {
        "worst_avg_delay": float(ranking["avg_delay"].iloc[0]),
        "best_avg_delay": float(ranking["avg_delay"].iloc[-1]),
        "mean_delay_rate": float(ranking["delay_rate"].mean()),
    }


def heatmap_by_day_hour(records: Records) -> DataFrame:
    """
    Mean arrival delay for every weekday x scheduled-departure-hour cell.
    Always 168 rows; empty cells have avg_delay 0 and flights 0.
    """
    grid = pd.MultiIndex.from_product([list(WEEKDAY_ORDER), list(HOURS)], names=["day", "hour"])
    df = as_frame(records)
    if df.empty:
        cells = pd.DataFrame({"avg_delay": 0.0, "flights": 0}, index=grid)
    else:
        cells = (
            df.groupby(["day_of_week_name", "hour"])
            .agg(avg_delay=("arrival_delay", "mean"), flights=("id", "count"))
            .rename_axis(["day", "hour"])
            .reindex(grid)
        )
        cells["avg_delay"] = cells["avg_delay"].fillna(0.0)
        cells["flights"] = cells["flights"].fillna(0).astype(int)
    return cells.reset_index()[HEATMAP_COLUMNS]


def dataset_overview(records: Records) -> Dict[str, float]:
    """Totals shown above the charts."""
    df = as_frame(records)
    if df.empty:
        return {
            "total_flights": 0,
            "avg_arrival_delay": 0.0,
            "max_arrival_delay": 0.0,
            "on_time_rate": 0.0,
            "airlines": 0,
            "routes": 0,
        }
    return {
        "total_flights": len(df),
        "avg_arrival_delay": float(df["arrival_delay"].mean()),
        "max_arrival_delay": float(df["arrival_delay"].max()),
        "on_time_rate": float((df["arrival_delay"] <= DELAY_THRESHOLD).mean() * 100),
        "airlines": int(df["airline"].nunique()),
        "routes": int(df["route"].nunique()),
    }
