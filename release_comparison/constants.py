"""
Release Web Vitals Comparison - Constants Configuration

This module centralizes all configuration constants used throughout the tool.
Each constant is documented with its purpose and acceptable value ranges.
"""

# ==============================================================================
# METRIC DEFINITIONS
# ==============================================================================

# Canonical metric order used for extraction, tables and charts
METRIC_NAMES = ("TTFB", "FCP", "LCP", "TBT", "CLS")

# Key of each metric inside the googleWebVitals object of a browsertime summary
METRIC_JSON_KEYS = {
    "TTFB": "ttfb",
    "FCP": "firstContentfulPaint",
    "LCP": "largestContentfulPaint",
    "TBT": "totalBlockingTime",
    "CLS": "cumulativeLayoutShift",
}

# Display unit per metric. CLS is a dimensionless layout-shift score
UNIT_MS = "ms"
UNIT_NONE = ""
METRIC_UNITS = {
    "TTFB": UNIT_MS,
    "FCP": UNIT_MS,
    "LCP": UNIT_MS,
    "TBT": UNIT_MS,
    "CLS": UNIT_NONE,
}

# Long names shown in the metric glossary panel of the dashboard
METRIC_DESCRIPTIONS = {
    "FCP": (
        "First Contentful Paint",
        "measures the time from navigation to the time when the browser renders "
        "the first bit of content from the DOM.",
    ),
    "TBT": (
        "Total Blocking Time",
        "the blocking time of a given long task is its duration in excess of 50 ms. "
        "The total blocking time for a page is the sum of the blocking time for each "
        "long task that happens after first contentful paint.",
    ),
    "LCP": (
        "Largest Contentful Paint",
        "reports the render time of the largest content element visible in the viewport.",
    ),
    "CLS": (
        "Cumulative Layout Shift",
        "the sum of all individual layout shift scores for unexpected layout shifts. "
        "Quantifies how often users experience unexpected layout shifts.",
    ),
    "TTFB": (
        "Time To First Byte",
        "the time it takes for the network and the server to generate and start sending "
        "the HTML (responseStart - navigationStart).",
    ),
}


# ==============================================================================
# PERFORMANCE SCORE - LOG-NORMAL CURVE
# ==============================================================================

# (median reference, poor reference) per metric.
# The median reference is the value that scores exactly 50.
# Smaller metric values score higher.
SCORE_REFERENCES = {
    "FCP": (1800.0, 3000.0),
    "LCP": (2500.0, 4000.0),
    "TBT": (300.0, 600.0),
    "CLS": (0.1, 0.25),
    "TTFB": (800.0, 1800.0),
}

# Weight of each metric in the aggregate score (sums to 1.0)
SCORE_WEIGHTS = {
    "FCP": 0.10,
    "LCP": 0.25,
    "TBT": 0.30,
    "CLS": 0.15,
    "TTFB": 0.20,
}

# Score bounds
SCORE_MIN = 0
SCORE_MAX = 100

# Abramowitz-Stegun 7.1.26 coefficients for the error function approximation
# Maximum absolute error is 1.5e-7
ERF_A1 = 0.254829592
ERF_A2 = -0.284496736
ERF_A3 = 1.421413741
ERF_A4 = -1.453152027
ERF_A5 = 1.061405429
ERF_P = 0.3275911


# ==============================================================================
# SCORE BUCKETS
# ==============================================================================

# Scores below this are "poor" (red)
SCORE_POOR_BELOW = 50

# Scores below this (and >= SCORE_POOR_BELOW) "need improvement" (orange)
# Scores >= this are "good" (green)
SCORE_GOOD_FROM = 90

# CLS is bucketed on its raw value (Web Vitals thresholds)
CLS_GOOD_MAX = 0.1
CLS_NEEDS_IMPROVEMENT_MAX = 0.25

BUCKET_GOOD = "good"
BUCKET_NEEDS_IMPROVEMENT = "needs-improvement"
BUCKET_POOR = "poor"
BUCKET_UNKNOWN = "unknown"


# ==============================================================================
# MATHEMATICAL CONSTANTS
# ==============================================================================

# Conversion factor from fraction to percentage
PCT_CONVERSION_FACTOR = 100


# ==============================================================================
# RELEASE DISCOVERY AND SUMMARY FILES
# ==============================================================================

# Release directories are named "<prefix><integer>", e.g. release-29
RELEASE_PREFIX = "release-"

# Site-wide browsertime summary, relative to a release directory
SUMMARY_TOTAL_FILE = "data/browsertime.summary-total.json"

# Per-page summaries live under pages/<domain>/<page>/data/
PAGES_DIR = "pages"
PAGE_SUMMARY_FILENAME = "browsertime.pageSummary.json"
SUMMARY_TOTAL_FILENAME = "browsertime.summary-total.json"

# Label of the site-wide section
GLOBAL_SECTION_NAME = "GLOBAL Website Performance"

# JSON files kept by the post-run cleanup; every other *.json is deleted
KEPT_SUMMARY_FILES = frozenset({PAGE_SUMMARY_FILENAME, SUMMARY_TOTAL_FILENAME})

# Compressed HAR archives are always deleted by the post-run cleanup
HAR_ARCHIVE_SUFFIX = ".har.gz"


# ==============================================================================
# SITESPEED.IO WORKFLOW
# ==============================================================================

# Executable name of the browser-performance tool
SITESPEED_EXECUTABLE = "sitespeed.io"

# Default timeout for one sitespeed.io run, in seconds
SITESPEED_TIMEOUT_SECONDS = 3600

# Interval at which the runner checks for cancellation, in seconds
PROCESS_POLL_INTERVAL_SECONDS = 0.5

# Grace period between terminate() and kill(), in seconds
PROCESS_TERMINATE_GRACE_SECONDS = 10

# Return code reported when the executable cannot be found
COMMAND_NOT_FOUND_RETURNCODE = 127


# ==============================================================================
# UI/HTML REPORT CONSTANTS
# ==============================================================================

DEFAULT_REPORT_TITLE = "Release Performance Comparison"
DEFAULT_PAIR_OUTPUT = "comparison-report.html"

# Chart.js CDN URL, pinned to the version the SRI hash below belongs to
CHARTJS_CDN_URL = "https://cdn.jsdelivr.net/npm/chart.js@4.4.1/dist/chart.umd.min.js"

# Chart.js CDN SRI hash for integrity verification
CHARTJS_CDN_SRI = "sha384-5PiDZVYBsJ4dB1mKiMnRYqHdkf7VUYauvBZ0LCJWi7YwJKHbPH8JLH0P1WXwTQ6p"

# Bucket colors (text, background)
COLOR_GOOD = "#10b981"
COLOR_GOOD_BG = "#bbf7d0"
COLOR_NEEDS_IMPROVEMENT = "#f16626"
COLOR_NEEDS_IMPROVEMENT_BG = "#ffd3a6"
COLOR_POOR = "#ef4444"
COLOR_POOR_BG = "#fecaca"
COLOR_NEUTRAL = "#9ca3af"
COLOR_NEUTRAL_BG = "#374151"

# Chart colors
CHART_COLOR_RELEASE = "#3b82f6"  # Blue - release bars
CHART_COLOR_BEFORE = "#3b82f6"   # Blue - pairwise "before"
CHART_COLOR_AFTER = "#10b981"    # Green - pairwise "after"

# Dark theme colors
DARK_BG_PRIMARY = "#1f2937"
DARK_BG_SECONDARY = "#111827"
DARK_BORDER = "#374151"
DARK_TEXT_PRIMARY = "#f9fafb"
DARK_TEXT_SECONDARY = "#9ca3af"


# ==============================================================================
# EXIT CODES
# ==============================================================================

# Exit code for successful execution
EXIT_SUCCESS = 0

# Exit code for workflow failures or an empty release set
EXIT_FAILURE = 1

# Exit code for unreadable inputs and invalid configuration
EXIT_PARSE_ERROR = 2
