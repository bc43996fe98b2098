"""
Cell Coercion — Lenient Number and Date Parsing

Every place a cell is treated as a quantity or a point in time goes through
these functions. Both are total: any input yields a value or a sentinel
(NaN / None), never an exception.
"""

import math
import re
import warnings
from datetime import date, datetime
from typing import Any, Optional

import numpy as np
import pandas as pd

from ..core.config import settings

NAN = float("nan")

# Sign, digits with optional fraction, optional exponent. Nothing else.
NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')

_STRIP_PATTERN = re.compile(r'[%s,\s]' % re.escape(settings.CURRENCY_SYMBOL))

_DATE_PARSE_ERRORS = (ValueError, TypeError, OverflowError)


def parse_num(raw: Any) -> float:
    """
    Coerce a raw cell to a float.

    Strips the currency symbol, thousands separators and whitespace, then
    reads what is left. Returns NaN for missing cells, empty or non-numeric
    residue, and non-finite results.
    """
    if raw is None or isinstance(raw, (bool, np.bool_)):
        return NAN

    if isinstance(raw, (int, float, np.integer, np.floating)):
        value = float(raw)
        return value if math.isfinite(value) else NAN

    text = _STRIP_PATTERN.sub("", str(raw))
    if not NUMBER_PATTERN.match(text):
        return NAN

    value = float(text)
    return value if math.isfinite(value) else NAN


def parse_date(raw: Any) -> Optional[pd.Timestamp]:
    """
    Coerce a raw cell to a UTC timestamp.

    Naive values are read as UTC, aware values are converted to UTC.
    Bare numbers are quantities, not dates, and return None, as does any
    text without a digit (keeps 'now' / 'today' out).
    """
    if raw is None or isinstance(raw, (bool, np.bool_)):
        return None

    if isinstance(raw, (datetime, date, np.datetime64)):
        candidate: Any = raw
    elif isinstance(raw, (int, float, np.integer, np.floating)):
        return None
    else:
        text = str(raw).strip()
        if not text or NUMBER_PATTERN.match(text):
            return None
        if not any(ch.isdigit() for ch in text):
            return None
        candidate = text

    try:
        with warnings.catch_warnings():
            # dayfirst / format-inference chatter for ambiguous strings
            warnings.simplefilter("ignore")
            ts = pd.to_datetime(candidate, utc=True)
    except _DATE_PARSE_ERRORS:
        return None

    if ts is None or pd.isna(ts):
        return None
    return ts


def parse_num_series(series: pd.Series) -> pd.Series:
    """Apply parse_num to every cell, keeping the index."""
    return series.map(parse_num).astype(float)


def parse_date_series(series: pd.Series) -> pd.Series:
    """
    Column form of parse_date: one vectorized to_datetime call over the
    cells that could be dates; everything else becomes NaT.
    """
    text = series[series.notna()].astype(str).str.strip()
    candidates = text[
        (text != "")
        & ~text.str.fullmatch(NUMBER_PATTERN.pattern)
        & text.str.contains(r"\d")
    ]

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        parsed = pd.to_datetime(candidates, errors="coerce", utc=True, format="mixed")

    return pd.Series(parsed, index=candidates.index, dtype="datetime64[ns, UTC]").reindex(series.index)
