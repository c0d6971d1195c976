#!/usr/bin/env python3
"""
Test suite for web_vitals.py

Tests both summary layouts, zero handling and load failures.
"""
import json

import pytest

from release_comparison.web_vitals import (
    SummaryLoadError,
    empty_metrics,
    extract_metrics,
    load_summary,
    load_summary_or_empty,
    metric_unit,
    resolve_vitals_node,
)


NESTED_SUMMARY = {
    "statistics": {
        "googleWebVitals": {
            "ttfb": {"median": 412, "mean": 430},
            "firstContentfulPaint": {"median": 1650},
            "largestContentfulPaint": {"median": 2400},
            "totalBlockingTime": {"median": 120},
            "cumulativeLayoutShift": {"median": 0.052},
        }
    }
}

FLAT_SUMMARY = {
    "googleWebVitals": {
        "ttfb": 390,
        "firstContentfulPaint": 1500,
        "largestContentfulPaint": 2600,
        "totalBlockingTime": 80,
        "cumulativeLayoutShift": 0.01,
    }
}


class TestExtractMetrics:
    """Test extract_metrics function."""

    def test_nested_layout_with_medians(self):
        metrics = extract_metrics(NESTED_SUMMARY)

        assert metrics == {
            "TTFB": 412.0,
            "FCP": 1650.0,
            "LCP": 2400.0,
            "TBT": 120.0,
            "CLS": 0.052,
        }

    def test_flat_layout_with_plain_numbers(self):
        metrics = extract_metrics(FLAT_SUMMARY)

        assert metrics["TTFB"] == 390.0
        assert metrics["LCP"] == 2600.0
        assert metrics["CLS"] == 0.01

    def test_canonical_metric_order(self):
        assert list(extract_metrics(FLAT_SUMMARY)) == ["TTFB", "FCP", "LCP", "TBT", "CLS"]

    def test_nested_layout_wins(self):
        doc = dict(NESTED_SUMMARY)
        doc["googleWebVitals"] = FLAT_SUMMARY["googleWebVitals"]

        assert extract_metrics(doc)["LCP"] == 2400.0

    def test_statistics_without_vitals_falls_back_to_flat(self):
        doc = {"statistics": {"timings": {}}, **FLAT_SUMMARY}
        assert extract_metrics(doc)["FCP"] == 1500.0

    def test_zero_values_are_kept(self):
        """A reported 0 must not be treated as missing."""
        doc = {"googleWebVitals": {
            "totalBlockingTime": {"median": 0},
            "cumulativeLayoutShift": 0,
        }}
        metrics = extract_metrics(doc)

        assert metrics["TBT"] == 0.0
        assert metrics["CLS"] == 0.0
        assert metrics["TTFB"] is None

    def test_missing_and_malformed_fields(self):
        doc = {"googleWebVitals": {
            "ttfb": {"mean": 400},
            "firstContentfulPaint": {"median": None},
            "largestContentfulPaint": "2500",
            "totalBlockingTime": True,
            "cumulativeLayoutShift": [0.1],
        }}

        assert extract_metrics(doc) == empty_metrics()

    @pytest.mark.parametrize("doc", [{}, [], None, "text", 42, {"googleWebVitals": []}])
    def test_wrong_shape_never_raises(self, doc):
        assert extract_metrics(doc) == empty_metrics()

    def test_resolve_vitals_node(self):
        assert resolve_vitals_node(NESTED_SUMMARY) is NESTED_SUMMARY["statistics"]["googleWebVitals"]
        assert resolve_vitals_node(FLAT_SUMMARY) is FLAT_SUMMARY["googleWebVitals"]
        assert resolve_vitals_node({"statistics": None}) == {}

    def test_units(self):
        assert metric_unit("LCP") == "ms"
        assert metric_unit("CLS") == ""
        assert metric_unit("unknown") == ""


class TestLoadSummary:
    """Test strict and soft summary loading."""

    def test_load_valid_file(self, tmp_path):
        path = tmp_path / "summary.json"
        path.write_text(json.dumps(FLAT_SUMMARY))

        assert load_summary(path) == FLAT_SUMMARY

    def test_missing_file_raises(self, tmp_path):
        path = tmp_path / "missing.json"

        with pytest.raises(SummaryLoadError) as exc_info:
            load_summary(path)

        assert exc_info.value.path == path
        assert "missing.json" in str(exc_info.value)

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(SummaryLoadError, match="broken.json"):
            load_summary(path)

    def test_soft_load_degrades_to_empty(self, tmp_path, capsys):
        warnings = []
        doc = load_summary_or_empty(tmp_path / "missing.json", warnings)

        assert doc == {}
        assert extract_metrics(doc) == empty_metrics()
        assert len(warnings) == 1
        assert "missing.json" in warnings[0]
        assert "missing.json" in capsys.readouterr().err

    def test_soft_load_valid_file(self, tmp_path):
        path = tmp_path / "summary.json"
        path.write_text(json.dumps(NESTED_SUMMARY))

        assert load_summary_or_empty(path) == NESTED_SUMMARY


class TestOversizedNumbers:
    """Numbers JSON can carry but a float cannot."""

    HUGE = "1" + "0" * 400

    def test_integer_too_large_for_float(self):
        doc = json.loads('{"googleWebVitals": {"ttfb": ' + self.HUGE + ', '
                         '"largestContentfulPaint": {"median": ' + self.HUGE + '}, '
                         '"firstContentfulPaint": 1500}}')
        metrics = extract_metrics(doc)

        assert metrics["TTFB"] is None
        assert metrics["LCP"] is None
        assert metrics["FCP"] == 1500.0

    def test_non_finite_values(self):
        doc = json.loads('{"googleWebVitals": {"ttfb": NaN, "totalBlockingTime": {"median": Infinity}}}')
        metrics = extract_metrics(doc)

        assert metrics["TTFB"] is None
        assert metrics["TBT"] is None

    def test_soft_load_of_huge_integer_never_raises(self, tmp_path):
        """Depending on the interpreter the file fails to parse or parses to None."""
        path = tmp_path / "summary.json"
        path.write_text('{"googleWebVitals": {"ttfb": 1' + "0" * 5000 + "}}")

        metrics = extract_metrics(load_summary_or_empty(path))

        assert metrics["TTFB"] is None
