"""
Route and airline health scores.

A health score penalizes both how often flights leave late and how late they
are:

    health_score = 100 - (delay_percent + 0.5 * avg_positive_delay)

where delay_percent is the share of departures more than 15 minutes late and
avg_positive_delay averages departure delay with early departures counted as
zero. Route scores are min-max normalized across all routes so the best route
reads 100 and the worst 0. Airline scores use the same formula without
normalization, so the two views are on different scales.
"""

from __future__ import annotations

import pandas as pd
from pandas import DataFrame, Series

from flight_records import DELAY_THRESHOLD, Records, as_frame

SEVERITY_WEIGHT = 0.5
SEVERE_DELAY_THRESHOLD = 60
# Used when every score is identical and min-max has no range.
FLAT_NORMALIZED_SCORE = 50.0

ROUTE_GRADES = [(80, "A+"), (70, "A"), (60, "B"), (50, "C"), (40, "D")]
AIRLINE_GRADES = [(90, "A+"), (80, "A"), (70, "B"), (60, "C"), (50, "D")]

ROUTE_HEALTH_COLUMNS = [
    "route",
    "origin",
    "destination",
    "delay_percent",
    "avg_positive_delay",
    "health_score",
    "normalized_health_score",
    "total_flights",
    "delayed_flights",
    "grade",
]
AIRLINE_HEALTH_COLUMNS = [
    "airline",
    "delay_percent",
    "avg_positive_delay",
    "health_score",
    "on_time_rate",
    "delay_rate",
    "severe_delay_rate",
    "avg_arrival_delay",
    "total_flights",
    "delayed_flights",
    "grade",
]


def _grade(score: float, ladder) -> str:
    for threshold, letter in ladder:
        if score >= threshold:
            return letter
    return "F"


def route_grade(score: float) -> str:
    return _grade(score, ROUTE_GRADES)


def airline_grade(score: float) -> str:
    return _grade(score, AIRLINE_GRADES)


def health_score(delay_percent, avg_positive_delay):
    """Works on scalars and Series alike."""
    return 100 - (delay_percent + avg_positive_delay * SEVERITY_WEIGHT)


def min_max_normalize(scores: Series) -> Series:
    """
    Rescale to 0-100. A set with no spread maps every score to 50.
    """
    if scores.empty:
        return scores.astype(float)
    low, high = scores.min(), scores.max()
    span = high - low
    if span > 0:
        return 100 * (scores - low) / span
    return pd.Series(FLAT_NORMALIZED_SCORE, index=scores.index)


def _delay_stats(df: DataFrame, key: str) -> DataFrame:
    stats = df.groupby(key, sort=False).agg(
        total_flights=("id", "count"),
        delayed_flights=("is_delayed", "sum"),
        positive_delay_sum=("positive_delay", "sum"),
    )
    stats["delayed_flights"] = stats["delayed_flights"].astype(int)
    stats["delay_percent"] = stats["delayed_flights"] / stats["total_flights"] * 100
    stats["avg_positive_delay"] = stats["positive_delay_sum"] / stats["total_flights"]
    stats["health_score"] = health_score(stats["delay_percent"], stats["avg_positive_delay"])
    return stats


def route_health_scores(records: Records) -> DataFrame:
    """
    One row per route, best normalized score first (ties keep first-seen order).
    """
    df = as_frame(records)
    if df.empty:
        return pd.DataFrame(columns=ROUTE_HEALTH_COLUMNS)

    stats = _delay_stats(df, "route")
    endpoints = df.groupby("route", sort=False).agg(
        origin=("origin_airport", "first"),
        destination=("destination_airport", "first"),
    )
    stats = stats.join(endpoints)
    stats["normalized_health_score"] = min_max_normalize(stats["health_score"])
    stats["grade"] = stats["normalized_health_score"].map(route_grade)

    ranked = stats.sort_values("normalized_health_score", ascending=False, kind="mergesort")
    return ranked.reset_index()[ROUTE_HEALTH_COLUMNS]


def airline_health_scores(records: Records) -> DataFrame:
    """
    One row per airline, highest raw health score first. Scores are not
    normalized. The on-time / delayed / severe rates bucket arrival delay at
    15 and 60 minutes.
    """
    df = as_frame(records)
    if df.empty:
        return pd.DataFrame(columns=AIRLINE_HEALTH_COLUMNS)

    on_time = df["arrival_delay"] <= DELAY_THRESHOLD
    severe = df["arrival_delay"] > SEVERE_DELAY_THRESHOLD
    df = df.assign(on_time=on_time, severe=severe, late=~on_time & ~severe)

    stats = _delay_stats(df, "airline")
    buckets = df.groupby("airline", sort=False).agg(
        on_time=("on_time", "sum"),
        late=("late", "sum"),
        severe=("severe", "sum"),
        avg_arrival_delay=("arrival_delay", "mean"),
    )
    stats = stats.join(buckets)
    stats["on_time_rate"] = stats["on_time"] / stats["total_flights"] * 100
    stats["delay_rate"] = stats["late"] / stats["total_flights"] * 100
    stats["severe_delay_rate"] = stats["severe"] / stats["total_flights"] * 100
    stats["grade"] = stats["health_score"].map(airline_grade)

    ranked = stats.sort_values("health_score", ascending=False, kind="mergesort")
    return ranked.reset_index()[AIRLINE_HEALTH_COLUMNS]


def overall_health(route_scores: DataFrame) -> float:
    """Unweighted mean of the normalized route scores; 0 with no routes."""
    if route_scores.empty:
        return 0.0
    return float(route_scores["normalized_health_score"].mean())
