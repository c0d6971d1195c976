"""Performance score for a set of Web Vitals.

Every metric value is mapped onto a 0-100 score by a log-normal curve
anchored at two reference points: the median reference scores 50 and
scores fall towards 0 as the value grows past the poor reference. The
aggregate score is the weighted mean of the per-metric scores that are
available.
"""

import math
from typing import Dict, Mapping, Optional, Tuple

import numpy as np

from .constants import (
    SCORE_REFERENCES,
    SCORE_WEIGHTS,
    SCORE_MIN,
    SCORE_MAX,
    ERF_A1,
    ERF_A2,
    ERF_A3,
    ERF_A4,
    ERF_A5,
    ERF_P,
    SCORE_POOR_BELOW,
    SCORE_GOOD_FROM,
    CLS_GOOD_MAX,
    CLS_NEEDS_IMPROVEMENT_MAX,
    BUCKET_GOOD,
    BUCKET_NEEDS_IMPROVEMENT,
    BUCKET_POOR,
    BUCKET_UNKNOWN,
    PCT_CONVERSION_FACTOR,
)


def erf_approx(x):
    """
    Abramowitz-Stegun approximation of the error function (formula 7.1.26).

    erf(x) = sign(x) * (1 - (a1*t + a2*t^2 + a3*t^3 + a4*t^4 + a5*t^5) * exp(-x^2))
    with t = 1 / (1 + p*|x|)

    Args:
        x: Scalar or array-like

    Returns:
        float for scalar input, np.ndarray otherwise
    """
    arr = np.asarray(x, dtype=float)
    sign = np.where(arr >= 0, 1.0, -1.0)
    ax = np.abs(arr)

    t = 1.0 / (1.0 + ERF_P * ax)
    poly = ((((ERF_A5 * t + ERF_A4) * t + ERF_A3) * t + ERF_A2) * t + ERF_A1) * t
    y = 1.0 - poly * np.exp(-ax * ax)

    result = sign * y
    if result.ndim == 0:
        return float(result)
    return result


def normal_cdf(z):
    """Standard normal CDF built on erf_approx."""
    return 0.5 * (1.0 + erf_approx(np.asarray(z, dtype=float) / math.sqrt(2.0)))


def _round_half_up(x: float) -> int:
    # Half-up rather than Python's banker's rounding: 49.5 -> 50
    return int(math.floor(x + 0.5))


def _clamp_score(score: int) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, score))


def log_normal_score(value: Optional[float], median: float, poor: float) -> Optional[int]:
    """
    Score a raw metric value on a log-normal curve (smaller is better).

        mu    = ln(median)
        sigma = ln(2) / (ln(poor) - ln(median))
        z     = (ln(value) - mu) / sigma
        score = round((1 - Phi(z)) * 100)

    Args:
        value: Raw metric value, or None when unavailable
        median: Reference value that scores 50
        poor: Reference value beyond which the metric is considered poor

    Returns:
        Integer score in [0, 100], or None if value is None or NaN

    Raises:
        ValueError: If the reference points do not describe a valid curve
    """
    if median <= 0:
        raise ValueError(f"median reference must be positive, got {median}")
    if poor <= median:
        raise ValueError(f"poor reference must be greater than median ({median}), got {poor}")

    if value is None or math.isnan(value):
        return None

    # ln(value) -> -inf, Phi -> 0
    if value <= 0:
        return SCORE_MAX

    mu = math.log(median)
    sigma = math.log(2.0) / (math.log(poor) - mu)
    z = (math.log(value) - mu) / sigma
    phi = float(normal_cdf(z))

    return _clamp_score(_round_half_up((1.0 - phi) * PCT_CONVERSION_FACTOR))


def metric_scores(
    vitals: Mapping[str, Optional[float]],
    references: Mapping[str, Tuple[float, float]] = SCORE_REFERENCES,
) -> Dict[str, Optional[int]]:
    """Score every metric that has a reference curve."""
    scores: Dict[str, Optional[int]] = {}
    for metric, (median, poor) in references.items():
        scores[metric] = log_normal_score(vitals.get(metric), median, poor)
    return scores


def calculate_perf_score(
    vitals: Mapping[str, Optional[float]],
    weights: Mapping[str, float] = SCORE_WEIGHTS,
    references: Mapping[str, Tuple[float, float]] = SCORE_REFERENCES,
) -> Optional[int]:
    """
    Weighted aggregate performance score.

    Missing metrics are dropped and the remaining weights are renormalised,
    so a release with only LCP measured is scored on LCP alone.

    Args:
        vitals: Mapping of metric name to value (None when unavailable)
        weights: Weight per metric
        references: (median, poor) reference points per metric

    Returns:
        Integer score in [0, 100], or None when no weighted metric is available
    """
    scores = metric_scores(vitals, references)

    present = [m for m in weights if scores.get(m) is not None and weights[m] > 0]
    if not present:
        return None

    values = np.array([scores[m] for m in present], dtype=float)
    w = np.array([weights[m] for m in present], dtype=float)
    weighted = float(np.average(values, weights=w))

    return _clamp_score(_round_half_up(weighted))


def score_bucket(score: Optional[int]) -> str:
    """Classify an aggregate or per-metric score."""
    if score is None:
        return BUCKET_UNKNOWN
    if score < SCORE_POOR_BELOW:
        return BUCKET_POOR
    if score < SCORE_GOOD_FROM:
        return BUCKET_NEEDS_IMPROVEMENT
    return BUCKET_GOOD


def metric_bucket(
    metric: str,
    value: Optional[float],
    references: Mapping[str, Tuple[float, float]] = SCORE_REFERENCES,
) -> str:
    """Classify a raw metric value for cell highlighting.

    CLS uses the Web Vitals thresholds on the raw value, timing metrics
    use their log-normal score.
    """
    if value is None:
        return BUCKET_UNKNOWN

    if metric == "CLS":
        if value <= CLS_GOOD_MAX:
            return BUCKET_GOOD
        if value <= CLS_NEEDS_IMPROVEMENT_MAX:
            return BUCKET_NEEDS_IMPROVEMENT
        return BUCKET_POOR

    if metric not in references:
        return BUCKET_UNKNOWN

    median, poor = references[metric]
    return score_bucket(log_normal_score(value, median, poor))
