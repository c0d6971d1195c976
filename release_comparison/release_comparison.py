"""Release-over-release comparison of Web Vitals.

Releases are compared in the order given: every release is compared with
the entry immediately before it, whatever the numeric gap between them.
"""

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .constants import METRIC_NAMES, RELEASE_PREFIX, PCT_CONVERSION_FACTOR
from .perf_score import calculate_perf_score
from .report_config import Section
from .web_vitals import WebVitals, extract_metrics, load_summary_or_empty, metric_unit


RELEASE_PATTERN = re.compile(rf"^{re.escape(RELEASE_PREFIX)}(\d+)$")


@dataclass
class ComparisonRecord:
    """One metric of one release compared with the previous release.

    Attributes:
        metric: Metric name (TTFB, FCP, LCP, TBT, CLS)
        value: Value in this release
        unit: "ms" or "" for unitless metrics
        delta: value - previous value, None without a usable previous value
        pct_delta: delta as percentage of the previous value, None when
            delta is None or the previous value is 0
    """
    metric: str
    value: float
    unit: str
    delta: Optional[float] = None
    pct_delta: Optional[float] = None


@dataclass
class PairComparison:
    """One metric compared between two summaries."""
    metric: str
    before: float
    after: float
    delta: float
    pct_delta: Optional[float]
    unit: str


@dataclass
class SectionResult:
    """Comparison data behind one dashboard section."""
    name: str
    url: str
    releases: List[str]
    metrics_by_release: Dict[str, WebVitals]
    records: Dict[str, List[ComparisonRecord]]
    latest_score: Optional[int]
    previous_score: Optional[int]
    warnings: List[str] = field(default_factory=list)

    @property
    def score_delta(self) -> Optional[int]:
        if self.latest_score is None or self.previous_score is None:
            return None
        return self.latest_score - self.previous_score

    def record_for(self, release: str, metric: str) -> Optional[ComparisonRecord]:
        for record in self.records.get(release, []):
            if record.metric == metric:
                return record
        return None

    def latest_record(self, metric: str) -> Optional[ComparisonRecord]:
        if not self.releases:
            return None
        return self.record_for(self.releases[-1], metric)


def _pct_delta(delta: float, previous: float) -> Optional[float]:
    if previous == 0:
        return None
    return (delta / previous) * PCT_CONVERSION_FACTOR


def compare_releases(metrics_by_release: Mapping[str, Mapping[str, Optional[float]]]) -> Dict[str, List[ComparisonRecord]]:
    """Compare each release with the release before it.

    Args:
        metrics_by_release: Ordered mapping of release name to metrics

    Returns:
        Mapping of release name to its comparison records. A metric that is
        None in a release has no record for that release.
    """
    results: Dict[str, List[ComparisonRecord]] = {}
    previous: Optional[Mapping[str, Optional[float]]] = None

    for release, metrics in metrics_by_release.items():
        records = []
        for metric, value in metrics.items():
            if value is None:
                continue

            delta = None
            pct = None
            if previous is not None and previous.get(metric) is not None:
                delta = value - previous[metric]
                pct = _pct_delta(delta, previous[metric])

            records.append(ComparisonRecord(
                metric=metric,
                value=value,
                unit=metric_unit(metric),
                delta=delta,
                pct_delta=pct,
            ))

        results[release] = records
        previous = metrics

    return results


def compare_metrics(
    before: Mapping[str, Optional[float]],
    after: Mapping[str, Optional[float]],
) -> List[PairComparison]:
    """Compare two metric sets; metrics missing on either side are skipped."""
    results = []
    for metric in METRIC_NAMES:
        b = before.get(metric)
        a = after.get(metric)
        if b is None or a is None:
            continue
        delta = a - b
        results.append(PairComparison(
            metric=metric,
            before=b,
            after=a,
            delta=delta,
            pct_delta=_pct_delta(delta, b),
            unit=metric_unit(metric),
        ))
    return results


def release_number(name: str) -> Optional[int]:
    """Numeric suffix of a release-<N> name, or None for other names."""
    match = RELEASE_PATTERN.match(name)
    if not match:
        return None
    return int(match.group(1))


def sort_releases(names: Sequence[str]) -> List[str]:
    """Keep release-<N> names and sort them by N, ascending."""
    numbered = [(release_number(n), n) for n in names]
    return [name for number, name in sorted(
        (item for item in numbered if item[0] is not None),
        key=lambda item: (item[0], item[1]),
    )]


def discover_releases(base_dir) -> List[str]:
    """Find release-<N> directories under base_dir, sorted by N.

    Raises:
        FileNotFoundError: If base_dir is not a directory
    """
    root = Path(base_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Base directory not found: {base_dir}")

    candidates = []
    for child in root.iterdir():
        if not child.name.startswith(RELEASE_PREFIX) or not child.is_dir():
            continue
        if release_number(child.name) is None:
            print(f"⚠️ Ignoring '{child.name}': release suffix is not an integer", file=sys.stderr)
            continue
        candidates.append(child.name)

    return sort_releases(candidates)


def build_section_result(base_dir, releases: Sequence[str], section: Section) -> SectionResult:
    """Load, compare and score one section across all releases.

    An unreadable summary degrades that release to all-None metrics.
    """
    root = Path(base_dir)
    warnings: List[str] = []
    metrics_by_release: Dict[str, WebVitals] = {}

    for release in releases:
        doc = load_summary_or_empty(root / release / section.file, warnings)
        metrics_by_release[release] = extract_metrics(doc)

    records = compare_releases(metrics_by_release)

    latest_score = None
    previous_score = None
    if releases:
        latest_score = calculate_perf_score(metrics_by_release[releases[-1]])
    if len(releases) > 1:
        previous_score = calculate_perf_score(metrics_by_release[releases[-2]])

    return SectionResult(
        name=section.name,
        url=section.url,
        releases=list(releases),
        metrics_by_release=metrics_by_release,
        records=records,
        latest_score=latest_score,
        previous_score=previous_score,
        warnings=warnings,
    )


def build_section_results(base_dir, releases: Sequence[str], sections: Sequence[Section]) -> List[SectionResult]:
    return [build_section_result(base_dir, releases, section) for section in sections]
