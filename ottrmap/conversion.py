"""Conversion of object columns to their lexical (string) forms."""
from __future__ import annotations

import datetime as _dt
import math
from typing import Any, Optional

import pandas as pd
from pandas.api import types as pdt

XSD_DATETIME_WITHOUT_TZ_FORMAT = "%Y-%m-%dT%H:%M:%S"
"""Date and time part of an xsd:dateTime; fractional seconds follow when non-zero."""


def _fraction(nanos: int) -> str:
    if nanos == 0:
        return ""
    if nanos % 1_000_000 == 0:
        return f".{nanos // 1_000_000:03d}"
    if nanos % 1_000 == 0:
        return f".{nanos // 1_000:06d}"
    return f".{nanos:09d}"


def _offset(value: _dt.datetime) -> str:
    delta = value.utcoffset()
    if delta is None:
        return ""
    total = int(delta.total_seconds())
    sign = "-" if total < 0 else "+"
    total = abs(total)
    return f"{sign}{total // 3600:02d}:{(total % 3600) // 60:02d}"


def _format_datetime(value: _dt.datetime) -> str:
    nanos = value.microsecond * 1000 + int(getattr(value, "nanosecond", 0))
    text = value.strftime(XSD_DATETIME_WITHOUT_TZ_FORMAT) + _fraction(nanos)
    return text + _offset(value)


def _dtype_kind(value: Any) -> Optional[str]:
    """The array-scalar kind code of ``value`` ('M', 'm', ...), if it has one."""
    dtype = getattr(value, "dtype", None)
    return getattr(dtype, "kind", None)


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if pdt.is_float(value) and value != value:
        return True
    return False


def _scalar_text(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    if pdt.is_bool(value):
        return "true" if value else "false"
    if pdt.is_list_like(value):
        raise TypeError(f"Values of type {type(value).__name__} are not supported")
    kind = _dtype_kind(value)
    if kind == "M":
        value = pd.Timestamp(value)
    if isinstance(value, _dt.datetime):
        return _format_datetime(value)
    if isinstance(value, (_dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, _dt.timedelta) or kind == "m":
        return pd.Timedelta(value).isoformat()
    if pdt.is_integer(value):
        return str(int(value))
    if pdt.is_float(value):
        return str(float(value))
    return str(value)


def _holds_only_strings(series: pd.Series) -> bool:
    return all(isinstance(v, str) or _is_missing(v) for v in series)


def convert_to_string(series: pd.Series) -> Optional[pd.Series]:
    """Return the lexical forms of ``series``, or None if it already holds strings."""
    dtype = series.dtype
    if isinstance(dtype, pd.CategoricalDtype):
        raise TypeError("Categorical columns are not supported")
    if isinstance(dtype, pd.StringDtype):
        return None
    if dtype == object and _holds_only_strings(series):
        return None
    values = [_scalar_text(v) for v in series]
    return pd.Series(values, index=series.index, name=series.name, dtype=object)