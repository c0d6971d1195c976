#!/usr/bin/env python3
"""
Test suite for report_config.py
"""
import json

import pytest

from release_comparison.report_config import (
    DEFAULT_SECTIONS,
    ReportConfig,
    ReportLink,
    Section,
    discover_sections,
    load_report_config,
    resolve_sections,
)


def write_config(tmp_path, data):
    path = tmp_path / "report.json"
    path.write_text(json.dumps(data))
    return path


def touch_page(root, release, domain, page):
    path = root / release / "pages" / domain / page / "data" / "browsertime.pageSummary.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{}")


class TestLoadReportConfig:
    """Test load_report_config function."""

    def test_none_gives_defaults(self):
        config = load_report_config(None)

        assert config == ReportConfig()
        assert config.sections == ()
        assert config.report_links == ()

    def test_full_config(self, tmp_path):
        path = write_config(tmp_path, {
            "title": "Homerun - Release Performance Comparison",
            "environment": {"platform": "Mobile (avg)", "network": "4G (average)", "runs": 10},
            "sections": [
                {"name": "GLOBAL", "file": "data/browsertime.summary-total.json"},
                {"name": "PDP", "url": "https://www.example.com/p/1",
                 "file": "pages/www_example_com/PDP/data/browsertime.pageSummary.json"},
            ],
            "report_links": [
                {"label": "release-30", "url": "https://example.org/release-30/", "date": "01.10.2025"},
            ],
        })

        config = load_report_config(str(path))

        assert config.title == "Homerun - Release Performance Comparison"
        assert config.environment == (
            ("Platform", "Mobile (avg)"),
            ("Network", "4G (average)"),
            ("Executed Tests/Page", "10"),
        )
        assert config.sections[0] == Section(name="GLOBAL", url="", file="data/browsertime.summary-total.json")
        assert config.sections[1].url == "https://www.example.com/p/1"
        assert config.report_links == (
            ("Release reports", (ReportLink("release-30", "https://example.org/release-30/", "01.10.2025"),)),
        )

    def test_grouped_report_links(self, tmp_path):
        path = write_config(tmp_path, {"report_links": {
            "Homerun": [{"label": "release-29", "url": "https://example.org/h29/"}],
            "Baristina": [{"label": "release-29", "url": "https://example.org/b29/"}],
        }})

        config = load_report_config(str(path))

        assert [group for group, _ in config.report_links] == ["Homerun", "Baristina"]
        assert config.report_links[1][1][0].url == "https://example.org/b29/"
        assert config.report_links[1][1][0].date == ""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Could not load report config"):
            load_report_config(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text("{")

        with pytest.raises(ValueError, match="Could not load report config"):
            load_report_config(str(path))

    @pytest.mark.parametrize("data, message", [
        ([], "must be a JSON object"),
        ({"sections": {}}, "'sections' must be a list"),
        ({"sections": [{"name": "PDP"}]}, r"sections\[0\] requires 'name' and 'file'"),
        ({"sections": ["PDP"]}, r"sections\[0\] must be an object"),
        ({"sections": [{"name": 1, "file": "x.json"}]}, r"sections\[0\].name must be a string"),
        ({"environment": []}, "'environment' must be an object"),
        ({"report_links": "x"}, "'report_links' must be a list or an object"),
        ({"report_links": [{"label": "a"}]}, r"report_links\[0\] requires 'label' and 'url'"),
        ({"title": 3}, "title must be a string"),
    ])
    def test_wrong_shapes(self, tmp_path, data, message):
        path = write_config(tmp_path, data)

        with pytest.raises(ValueError, match=message):
            load_report_config(str(path))


class TestSections:
    """Test section discovery and resolution."""

    def test_discover_sections(self, tmp_path):
        touch_page(tmp_path, "release-1", "www_example_com", "PLP")
        touch_page(tmp_path, "release-2", "www_example_com", "HOME_PAGE")
        touch_page(tmp_path, "release-2", "www_example_com", "PLP")

        sections = discover_sections(tmp_path, ["release-1", "release-2"])

        assert sections[0] == DEFAULT_SECTIONS[0]
        assert [s.name for s in sections[1:]] == ["HOME PAGE", "PLP"]
        assert sections[2].file == "pages/www_example_com/PLP/data/browsertime.pageSummary.json"

    def test_discover_without_pages(self, tmp_path):
        (tmp_path / "release-1").mkdir()
        assert discover_sections(tmp_path, ["release-1"]) == list(DEFAULT_SECTIONS)

    def test_configured_sections_win(self, tmp_path):
        touch_page(tmp_path, "release-1", "www_example_com", "PLP")
        config = ReportConfig(sections=(Section("PDP", "", "pages/x/PDP/data/browsertime.pageSummary.json"),))

        assert resolve_sections(config, tmp_path, ["release-1"]) == list(config.sections)

    def test_empty_config_discovers(self, tmp_path):
        touch_page(tmp_path, "release-1", "www_example_com", "PLP")

        sections = resolve_sections(ReportConfig(), tmp_path, ["release-1"])

        assert [s.name for s in sections] == [DEFAULT_SECTIONS[0].name, "PLP"]
