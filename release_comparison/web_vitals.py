"""Web Vitals extraction from browsertime JSON summaries.

Two summary layouts are produced by sitespeed.io:

    {"statistics": {"googleWebVitals": {...}}}   # browsertime.summary-total.json
    {"googleWebVitals": {...}}                   # browsertime.pageSummary.json

Each metric inside googleWebVitals is either a number or an object carrying
a numeric "median" field.
"""

import json
import math
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import METRIC_JSON_KEYS, METRIC_NAMES, METRIC_UNITS


WebVitals = Dict[str, Optional[float]]


class SummaryLoadError(Exception):
    """Raised when a JSON summary cannot be read or parsed."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"Could not load {path}: {message}")
        self.path = path


def load_summary(path) -> Any:
    """Load a JSON summary file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON document

    Raises:
        SummaryLoadError: If the file is missing, unreadable or not valid JSON
    """
    summary_path = Path(path)
    try:
        with open(summary_path, "r", encoding="utf-8") as f:
            return json.load(f)
    # ValueError covers JSONDecodeError, UnicodeDecodeError and the
    # integer digit limit of the json module
    except (OSError, ValueError) as e:
        raise SummaryLoadError(summary_path, str(e)) from e


def load_summary_or_empty(path, warnings: Optional[List[str]] = None) -> Any:
    """Load a JSON summary, degrading to an empty document on failure.

    Used by batch reporting, where one unreadable release must not abort
    the whole report.
    """
    try:
        return load_summary(path)
    except SummaryLoadError as e:
        message = str(e)
        print(f"⚠️ {message}", file=sys.stderr)
        if warnings is not None:
            warnings.append(message)
        return {}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_vitals_node(doc: Any) -> Dict[str, Any]:
    """Return the googleWebVitals object of a summary.

    The nested layout (statistics.googleWebVitals) wins over the flat one.
    Anything else resolves to an empty dict.
    """
    if not isinstance(doc, dict):
        return {}

    statistics = doc.get("statistics")
    if isinstance(statistics, dict):
        nested = statistics.get("googleWebVitals")
        if isinstance(nested, dict):
            return nested

    flat = doc.get("googleWebVitals")
    if isinstance(flat, dict):
        return flat

    return {}


def _to_float(value: Any) -> Optional[float]:
    if not _is_number(value):
        return None
    try:
        number = float(value)
    except OverflowError:
        # JSON integers have no size limit, floats do
        return None
    return number if math.isfinite(number) else None


def _metric_value(node: Dict[str, Any], key: str) -> Optional[float]:
    field = node.get(key)
    if isinstance(field, dict):
        return _to_float(field.get("median"))
    return _to_float(field)


def extract_metrics(doc: Any) -> WebVitals:
    """Extract the five Web Vitals from a parsed summary.

    A metric that is absent, null, of the wrong type or not a finite float
    becomes None.
    A reported 0 stays 0.

    Args:
        doc: Parsed JSON document

    Returns:
        Mapping of metric name (TTFB, FCP, LCP, TBT, CLS) to value or None
    """
    node = resolve_vitals_node(doc)
    return {name: _metric_value(node, METRIC_JSON_KEYS[name]) for name in METRIC_NAMES}


def empty_metrics() -> WebVitals:
    return {name: None for name in METRIC_NAMES}


def metric_unit(metric: str) -> str:
    return METRIC_UNITS.get(metric, "")
