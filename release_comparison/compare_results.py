#!/usr/bin/env python3
"""Command line entry points for Web Vitals comparison reports.

Batch mode compares every release-<N> directory under a base directory:

    vitaldiff-releases comparison-report.html homerun/

Pairwise mode compares two browsertime summaries:

    vitaldiff-compare before.json after.json [comparison-report.html]
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .comparison_html_template import render_pair_report
from .constants import (
    DEFAULT_PAIR_OUTPUT,
    EXIT_SUCCESS,
    EXIT_FAILURE,
    EXIT_PARSE_ERROR,
)
from .perf_score import calculate_perf_score
from .release_comparison import (
    PairComparison,
    SectionResult,
    build_section_results,
    compare_metrics,
    discover_releases,
    release_number,
)
from .release_html_template import fmt_delta, fmt_pct, fmt_value, render_release_report
from .report_config import load_report_config, resolve_sections
from .web_vitals import SummaryLoadError, extract_metrics, load_summary


def generate_release_report(output_file, base_dir, config_path: Optional[str] = None) -> List[SectionResult]:
    """Build and write the multi-release dashboard.

    Args:
        output_file: HTML file to write
        base_dir: Directory containing release-<N> directories
        config_path: Optional report configuration file

    Returns:
        The section results that were rendered

    Raises:
        FileNotFoundError: If base_dir does not exist
        ValueError: If the configuration is invalid
        LookupError: If base_dir holds no release-<N> directory
    """
    config = load_report_config(config_path)
    releases = discover_releases(base_dir)
    if not releases:
        raise LookupError(f"No release-<N> directories found in {base_dir}")

    sections = resolve_sections(config, base_dir, releases)
    results = build_section_results(base_dir, releases, sections)

    html = render_release_report(results, config)
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")

    return results


def print_release_summary(results: List[SectionResult]) -> None:
    for section in results:
        score = "n/a" if section.latest_score is None else str(section.latest_score)
        delta = section.score_delta
        delta_text = "" if delta is None else f" ({'+' if delta > 0 else ''}{delta})"
        print(f"  {section.name}: score {score}{delta_text}")


def main_releases(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        description="Generate an HTML dashboard comparing Web Vitals across release-<N> directories."
    )
    p.add_argument("output", help="Output HTML file path, e.g. comparison-report.html")
    p.add_argument("base_dir", help="Directory containing release-<N> result directories")
    p.add_argument("--config", default=None, help="Report configuration JSON (title, sections, links)")

    args = p.parse_args(argv)

    print(f"📊 Comparing releases in {args.base_dir}...")
    try:
        results = generate_release_report(args.output, args.base_dir, args.config)
    except FileNotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_PARSE_ERROR
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_PARSE_ERROR
    except LookupError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        print(f"❌ Could not write {args.output}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print_release_summary(results)
    print(f"✅ Report saved: {args.output}")
    return EXIT_SUCCESS


def default_label(path: str, fallback: str) -> str:
    """Use the release-<N> component of a path as its label, if any."""
    for part in reversed(Path(path).parts):
        if release_number(part) is not None:
            return part
    return fallback


def print_console(results: List[PairComparison], before_label: str, after_label: str) -> None:
    print("\n📊 Performance Comparison\n")
    print(f"{'Metric':<22} {before_label:<12} {after_label:<12} {'Δ':<13} Δ%")
    print("-" * 71)
    for r in results:
        print(
            f"{r.metric:<22} {fmt_value(r.before, r.unit):<12} {fmt_value(r.after, r.unit):<12} "
            f"{fmt_delta(r.delta, r.unit):<13} {fmt_pct(r.pct_delta)}"
        )


def main_compare(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        description="Compare Web Vitals between two browsertime JSON summaries."
    )
    p.add_argument("before", help="Baseline summary JSON")
    p.add_argument("after", help="Summary JSON to compare against the baseline")
    p.add_argument("output", nargs="?", default=DEFAULT_PAIR_OUTPUT,
                   help=f"Output HTML file path (default: {DEFAULT_PAIR_OUTPUT})")
    p.add_argument("--before-label", default=None, help="Column label for the baseline")
    p.add_argument("--after-label", default=None, help="Column label for the compared summary")

    args = p.parse_args(argv)

    before_path = Path(args.before).resolve()
    after_path = Path(args.after).resolve()

    try:
        before_doc = load_summary(before_path)
        after_doc = load_summary(after_path)
    except SummaryLoadError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_PARSE_ERROR

    before_label = args.before_label or default_label(args.before, "before")
    after_label = args.after_label or default_label(args.after, "after")

    before_metrics = extract_metrics(before_doc)
    after_metrics = extract_metrics(after_doc)
    results = compare_metrics(before_metrics, after_metrics)

    print_console(results, before_label, after_label)

    html = render_pair_report(
        results,
        before_label=before_label,
        after_label=after_label,
        before_score=calculate_perf_score(before_metrics),
        after_score=calculate_perf_score(after_metrics),
    )
    output_path = Path(args.output)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
    except OSError as e:
        print(f"❌ Could not write {output_path}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(f"\n✅ HTML report saved to {args.output}")
    return EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main_releases())
