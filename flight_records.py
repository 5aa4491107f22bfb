#!/usr/bin/env python3
"""
Typed flight records for the delay dashboard.

Parses the raw CSV text into FlightRecord objects, fills any missing or
unparseable cell with a documented default, and derives the secondary fields
(route, weekday name, departure hour, date string, positive delay, delayed
flag). When an upload yields no usable rows, the loader falls back to a
synthetic dataset of the same shape so the dashboard always has something to
render.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, fields
from operator import attrgetter
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Departure delay strictly above this many minutes marks a flight as delayed.
DELAY_THRESHOLD = 15
SAMPLE_SIZE = 1000
DEFAULT_YEAR = 2024

# Monday-first display order shared by every weekday grouping.
WEEKDAY_ORDER = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
WEEKDAY_NAMES = {number: name for number, name in enumerate(WEEKDAY_ORDER, start=1)}

SAMPLE_AIRLINES = ["Delta", "American", "United", "Southwest", "JetBlue", "Alaska", "Spirit"]
SAMPLE_AIRPORTS = ["NYC", "LAX", "CHI", "MIA", "SF", "DEN", "ATL", "DFW", "SEA", "BOS"]

# Half-open [low, high) ranges for randomized defaults.
FIELD_RANGES = {
    "month": (1, 13),
    "day": (1, 29),
    "day_of_week": (1, 8),
    "flight_number": (1, 10000),
    "scheduled_departure": (0, 2400),
    "departure_time": (0, 2400),
    "scheduled_arrival": (0, 2400),
    "arrival_time": (0, 2400),
    "departure_delay": (-20.0, 100.0),
    "arrival_delay": (-30.0, 120.0),
    "scheduled_time": (60.0, 460.0),
    "elapsed_time": (60.0, 460.0),
    "distance": (200.0, 3200.0),
}

# Fields that copy an already-resolved field when their own cell is missing.
COPY_DEFAULTS = {
    "departure_time": "scheduled_departure",
    "elapsed_time": "scheduled_time",
    "arrival_time": "scheduled_arrival",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

RandomSource = Optional[np.random.RandomState]


@dataclass(frozen=True)
class FieldSpec:
    header: str
    attr: str
    kind: str  # "int", "float" or "str"


# CSV header -> record attribute. Order matters: scheduled values resolve
# before the fields that copy them.
FIELD_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec("YEAR", "year", "int"),
    FieldSpec("MONTH", "month", "int"),
    FieldSpec("DAY", "day", "int"),
    FieldSpec("DAY_OF_WEEK", "day_of_week", "int"),
    FieldSpec("AIRLINE", "airline", "str"),
    FieldSpec("FLIGHT_NUMBER", "flight_number", "int"),
    FieldSpec("ORIGIN_AIRPORT", "origin_airport", "str"),
    FieldSpec("DESTINATION_AIRPORT", "destination_airport", "str"),
    FieldSpec("SCHEDULED_DEPARTURE", "scheduled_departure", "int"),
    FieldSpec("DEPARTURE_TIME", "departure_time", "float"),
    FieldSpec("DEPARTURE_DELAY", "departure_delay", "float"),
    FieldSpec("SCHEDULED_TIME", "scheduled_time", "float"),
    FieldSpec("ELAPSED_TIME", "elapsed_time", "float"),
    FieldSpec("DISTANCE", "distance", "float"),
    FieldSpec("SCHEDULED_ARRIVAL", "scheduled_arrival", "int"),
    FieldSpec("ARRIVAL_TIME", "arrival_time", "float"),
    FieldSpec("ARRIVAL_DELAY", "arrival_delay", "float"),
)
FIELD_BY_ATTR = {spec.attr: spec for spec in FIELD_SPECS}


@dataclass(frozen=True)
class FlightRecord:
    id: int
    year: int
    month: int
    day: int
    day_of_week: int
    airline: str
    flight_number: int
    origin_airport: str
    destination_airport: str
    scheduled_departure: int
    departure_time: float
    departure_delay: float
    scheduled_time: float
    elapsed_time: float
    distance: float
    scheduled_arrival: int
    arrival_time: float
    arrival_delay: float
    # derived
    route: str
    day_of_week_name: str
    hour: int
    date: str
    positive_delay: float
    is_delayed: int


RECORD_COLUMNS = [f.name for f in fields(FlightRecord)]


# ---------------------------------------------------------------------------
# Field derivation
# ---------------------------------------------------------------------------
def extract_hour(scheduled_departure) -> int:
    """Hour of day from an HHMM-encoded time such as 1430 -> 14."""
    if not scheduled_departure or scheduled_departure < 0:
        return 0
    return int(scheduled_departure // 100)


def weekday_name(day_of_week: int) -> str:
    return WEEKDAY_NAMES.get(day_of_week, "Monday")


def format_date(year: int, month: int, day: int) -> str:
    return f"{year}-{month:02d}-{day:02d}"


def derive_fields(primary: Dict) -> Dict:
    """
    Compute the secondary fields from a fully populated set of primary fields.
    """
    departure_delay = primary["departure_delay"]
    return {
        "route": f"{primary['origin_airport']}-{primary['destination_airport']}",
        "day_of_week_name": weekday_name(primary["day_of_week"]),
        "hour": extract_hour(primary["scheduled_departure"]),
        "date": format_date(primary["year"], primary["month"], primary["day"]),
        "positive_delay": max(departure_delay, 0),
        "is_delayed": 1 if departure_delay > DELAY_THRESHOLD else 0,
    }


def make_record(record_id: int, primary: Dict) -> FlightRecord:
    return FlightRecord(id=record_id, **primary, **derive_fields(primary))


# ---------------------------------------------------------------------------
# Defaulting policy
# ---------------------------------------------------------------------------
def _rng(rng: RandomSource) -> np.random.RandomState:
    return rng if rng is not None else np.random.RandomState()


def parse_int(raw) -> Optional[int]:
    """
    Base-10 parse of the leading integer in a cell ("12.7" -> 12, "7a" -> 7).
    Returns None when the cell has no leading integer or the digits are too
    long to convert.
    """
    if raw is None:
        return None
    match = _LEADING_INT.match(str(raw))
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # past the interpreter's int string-conversion digit limit
        return None


def parse_number(raw, kind: str) -> Optional[Union[int, float]]:
    """parse_int(), converted to float for float-kind fields when it fits."""
    value = parse_int(raw)
    if value is None or kind != "float":
        return value
    try:
        return float(value)
    except OverflowError:
        return None


def default_for(attr: str, rng: RandomSource = None):
    """
    Default value for a record attribute whose cell is missing or unparseable.
    Raises KeyError for attributes that are not part of the CSV schema.
    """
    if attr not in FIELD_BY_ATTR:
        raise KeyError(f"Unknown flight field: {attr}")
    rng = _rng(rng)
    if attr == "year":
        return DEFAULT_YEAR
    if attr == "airline":
        return f"Airline {rng.randint(1, 11)}"
    if attr == "origin_airport":
        return "NYC"
    if attr == "destination_airport":
        return "LAX"
    low, high = FIELD_RANGES[attr]
    if isinstance(low, float):
        return float(rng.uniform(low, high))
    value = int(rng.randint(low, high))
    return float(value) if FIELD_BY_ATTR[attr].kind == "float" else value


def coerce_field(attr: str, raw, rng: RandomSource = None):
    """
    Resolve one cell to a typed value, falling back to default_for().
    """
    spec = FIELD_BY_ATTR[attr]
    if spec.kind == "str":
        text = "" if raw is None else str(raw).strip()
        return text if text else default_for(attr, rng)
    value = parse_number(raw, spec.kind)
    if value is None:
        return default_for(attr, rng)
    return value


def resolve_row(cells: Dict[str, str], rng: RandomSource = None) -> Dict:
    """
    Turn a header -> cell mapping into a complete set of primary fields.
    """
    rng = _rng(rng)
    primary = {}
    for spec in FIELD_SPECS:
        raw = cells.get(spec.header)
        source = COPY_DEFAULTS.get(spec.attr)
        if source is not None and parse_number(raw, spec.kind) is None:
            primary[spec.attr] = float(primary[source])
            continue
        primary[spec.attr] = coerce_field(spec.attr, raw, rng)
    return primary


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------
def read_csv_cells(text: str) -> pd.DataFrame:
    """
    Split CSV text into a string-only DataFrame: one row per non-blank data
    line, cells split on every comma (quotes are ordinary characters), header
    names stripped, surplus cells dropped and short rows padded with empty
    strings. Repeated header names keep their first column.
    """
    lines = text.splitlines()
    if not lines:
        return pd.DataFrame()
    header = [name.strip() for name in lines[0].split(",")]
    width = len(header)

    rows = []
    for line in lines[1:]:
        if not line.strip():
            continue
        cells = line.split(",")[:width]
        rows.append(cells + [""] * (width - len(cells)))

    frame = pd.DataFrame(rows, columns=header, dtype=str)
    return frame.loc[:, ~frame.columns.duplicated()]


def parse_flight_csv(text: str, rng: RandomSource = None) -> List[FlightRecord]:
    """
    Parse raw CSV text into FlightRecords, looking cells up by header name.

    Never drops a data row: every missing or malformed cell is defaulted.
    Returns an empty list when there are no non-blank data lines.
    """
    if not text or not text.strip():
        return []
    frame = read_csv_cells(text)
    if frame.empty:
        return []

    rng = _rng(rng)
    known = [spec.header for spec in FIELD_SPECS if spec.header in frame.columns]
    missing = [spec.header for spec in FIELD_SPECS if spec.header not in frame.columns]
    if missing:
        logger.info("Columns not in header, defaulting: %s", ", ".join(missing))

    # A frame with no recognized columns still has one row per data line.
    rows = frame[known].to_dict(orient="records") if known else [{}] * len(frame)
    records = []
    for index, cells in enumerate(rows):
        records.append(make_record(index, resolve_row(cells, rng)))

    logger.info("Parsed %d flight records", len(records))
    return records


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------
def generate_sample_flights(n: int = SAMPLE_SIZE, rng: RandomSource = None) -> List[FlightRecord]:
    """
    Synthetic placeholder dataset with the same schema as parsed uploads.
    """
    rng = _rng(rng)
    records = []
    for i in range(n):
        origin = SAMPLE_AIRPORTS[rng.randint(len(SAMPLE_AIRPORTS))]
        destination = SAMPLE_AIRPORTS[rng.randint(len(SAMPLE_AIRPORTS))]
        while destination == origin:
            destination = SAMPLE_AIRPORTS[rng.randint(len(SAMPLE_AIRPORTS))]

        scheduled_departure = default_for("scheduled_departure", rng)
        departure_delay = default_for("departure_delay", rng)
        primary = {
            "year": DEFAULT_YEAR,
            "month": default_for("month", rng),
            "day": default_for("day", rng),
            "day_of_week": default_for("day_of_week", rng),
            "airline": SAMPLE_AIRLINES[rng.randint(len(SAMPLE_AIRLINES))],
            "flight_number": default_for("flight_number", rng),
            "origin_airport": origin,
            "destination_airport": destination,
            "scheduled_departure": scheduled_departure,
            "departure_time": scheduled_departure + departure_delay,
            "departure_delay": departure_delay,
            "scheduled_time": default_for("scheduled_time", rng),
            "elapsed_time": default_for("elapsed_time", rng),
            "distance": default_for("distance", rng),
            "scheduled_arrival": default_for("scheduled_arrival", rng),
            "arrival_time": default_for("arrival_time", rng),
            "arrival_delay": default_for("arrival_delay", rng),
        }
        records.append(make_record(i, primary))
    return records


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
FlightSource = Union[str, bytes, Path, io.IOBase]


def read_flight_text(source: FlightSource) -> str:
    """
    Read the full upload. Strings are raw CSV text; paths are read from disk.
    """
    if isinstance(source, Path):
        return source.read_text(encoding="utf-8")
    if isinstance(source, bytes):
        return source.decode("utf-8")
    if hasattr(source, "read"):
        data = source.read()
        return data.decode("utf-8") if isinstance(data, bytes) else data
    return source


def load_flight_dataset(
    source: FlightSource,
    rng: RandomSource = None,
) -> Tuple[List[FlightRecord], bool]:
    """
    Read and parse an upload, substituting sample data when reading or
    parsing fails for any reason, or when there are no data rows.
    Returns (records, used_sample).
    """
    try:
        records = parse_flight_csv(read_flight_text(source), rng=rng)
    except Exception:
        logger.exception("Could not read flight data, using sample data instead")
        return generate_sample_flights(rng=rng), True

    if not records:
        logger.warning("No flight rows found, using sample data instead")
        return generate_sample_flights(rng=rng), True
    return records, False


_record_values = attrgetter(*RECORD_COLUMNS)
# Views take either a record list or a frame already built by records_to_frame().
Records = Union[List[FlightRecord], pd.DataFrame]


def records_to_frame(records: Iterable[FlightRecord]) -> pd.DataFrame:
    """One row per record, columns in FlightRecord field order."""
    return pd.DataFrame([_record_values(record) for record in records], columns=RECORD_COLUMNS)


def as_frame(records: Records) -> pd.DataFrame:
    """Views must not add columns to a frame they are handed."""
    if isinstance(records, pd.DataFrame):
        return records
    return records_to_frame(records)
