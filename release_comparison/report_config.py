"""Report configuration: dashboard title, page sections and link panels.

Example configuration file:

{
  "title": "Homerun - Release Performance Comparison",
  "environment": {"platform": "Mobile (avg)", "network": "4G (average)", "runs": 10},
  "sections": [
    {"name": "GLOBAL Website Performance", "url": "", "file": "data/browsertime.summary-total.json"},
    {"name": "HOMEPAGE", "url": "https://www.example.com/",
     "file": "pages/www_example_com/HOMEPAGE/data/browsertime.pageSummary.json"}
  ],
  "report_links": [
    {"label": "release-30", "url": "https://example.github.io/homerun/release-30/", "date": "01.10.2025"}
  ]
}
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constants import (
    DEFAULT_REPORT_TITLE,
    GLOBAL_SECTION_NAME,
    SUMMARY_TOTAL_FILE,
    PAGES_DIR,
    PAGE_SUMMARY_FILENAME,
)


@dataclass(frozen=True)
class Section:
    """One logical page of the dashboard."""
    name: str
    url: str
    file: str


@dataclass(frozen=True)
class ReportLink:
    """Link to a published per-release sitespeed.io report."""
    label: str
    url: str
    date: str = ""


@dataclass(frozen=True)
class ReportConfig:
    """Everything the dashboard needs besides the measurements.

    Attributes:
        title: Page header
        sections: Sections to render, in order. Empty means auto-discover
        environment: Test environment banner entries (label -> value)
        report_links: Grouped link panels (group title -> links)
    """
    title: str = DEFAULT_REPORT_TITLE
    sections: Tuple[Section, ...] = ()
    environment: Tuple[Tuple[str, str], ...] = ()
    report_links: Tuple[Tuple[str, Tuple[ReportLink, ...]], ...] = ()


DEFAULT_SECTIONS = (
    Section(name=GLOBAL_SECTION_NAME, url="", file=SUMMARY_TOTAL_FILE),
)

_ENVIRONMENT_LABELS = (
    ("platform", "Platform"),
    ("network", "Network"),
    ("runs", "Executed Tests/Page"),
)


def _page_label(page_dir: str) -> str:
    return page_dir.replace("_", " ")


def discover_sections(base_dir, releases: Sequence[str]) -> List[Section]:
    """Build sections from the page summaries found on disk.

    The site-wide summary always comes first, followed by one section per
    pages/<domain>/<page>/data/browsertime.pageSummary.json present in any
    release, sorted by relative path.

    Args:
        base_dir: Directory containing the release-<N> directories
        releases: Ordered release directory names

    Returns:
        List of sections
    """
    root = Path(base_dir)
    found: Dict[str, Section] = {}

    for release in releases:
        pages_root = root / release / PAGES_DIR
        if not pages_root.is_dir():
            continue
        for summary in pages_root.glob(f"*/*/data/{PAGE_SUMMARY_FILENAME}"):
            relative = summary.relative_to(root / release).as_posix()
            if relative in found:
                continue
            page_dir = summary.parent.parent.name
            found[relative] = Section(name=_page_label(page_dir), url="", file=relative)

    return list(DEFAULT_SECTIONS) + [found[key] for key in sorted(found)]


def _require_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{where} must be a string")
    return value


def _parse_sections(raw: Any) -> Tuple[Section, ...]:
    if not isinstance(raw, list):
        raise ValueError("'sections' must be a list")

    sections = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"sections[{i}] must be an object")
        if "name" not in item or "file" not in item:
            raise ValueError(f"sections[{i}] requires 'name' and 'file'")
        sections.append(Section(
            name=_require_str(item["name"], f"sections[{i}].name"),
            url=_require_str(item.get("url", ""), f"sections[{i}].url"),
            file=_require_str(item["file"], f"sections[{i}].file"),
        ))
    return tuple(sections)


def _parse_environment(raw: Any) -> Tuple[Tuple[str, str], ...]:
    if not isinstance(raw, dict):
        raise ValueError("'environment' must be an object")

    entries = []
    for key, label in _ENVIRONMENT_LABELS:
        if raw.get(key) is not None:
            entries.append((label, str(raw[key])))
    return tuple(entries)


def _parse_links(raw: Any, where: str) -> Tuple[ReportLink, ...]:
    if not isinstance(raw, list):
        raise ValueError(f"{where} must be a list")

    links = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or "label" not in item or "url" not in item:
            raise ValueError(f"{where}[{i}] requires 'label' and 'url'")
        links.append(ReportLink(
            label=_require_str(item["label"], f"{where}[{i}].label"),
            url=_require_str(item["url"], f"{where}[{i}].url"),
            date=_require_str(item.get("date", ""), f"{where}[{i}].date"),
        ))
    return tuple(links)


def _parse_report_links(raw: Any) -> Tuple[Tuple[str, Tuple[ReportLink, ...]], ...]:
    # A plain list is one untitled group, an object maps group titles to lists
    if isinstance(raw, list):
        return (("Release reports", _parse_links(raw, "report_links")),)
    if isinstance(raw, dict):
        return tuple(
            (str(group), _parse_links(links, f"report_links.{group}"))
            for group, links in raw.items()
        )
    raise ValueError("'report_links' must be a list or an object")


def load_report_config(path: Optional[str]) -> ReportConfig:
    """Load a report configuration file.

    Args:
        path: Path to a JSON configuration file, or None for defaults

    Returns:
        ReportConfig

    Raises:
        ValueError: If the file cannot be read or has the wrong shape
    """
    if path is None:
        return ReportConfig()

    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Could not load report config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Report config {config_path} must be a JSON object")

    return ReportConfig(
        title=_require_str(data.get("title", DEFAULT_REPORT_TITLE), "title"),
        sections=_parse_sections(data["sections"]) if "sections" in data else (),
        environment=_parse_environment(data["environment"]) if "environment" in data else (),
        report_links=_parse_report_links(data["report_links"]) if "report_links" in data else (),
    )


def resolve_sections(config: ReportConfig, base_dir, releases: Sequence[str]) -> List[Section]:
    """Configured sections, or auto-discovered ones when none are configured."""
    if config.sections:
        return list(config.sections)
    return discover_sections(base_dir, releases)
