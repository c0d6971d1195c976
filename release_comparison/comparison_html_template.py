"""HTML template for the pairwise before/after comparison page."""

from datetime import datetime
from html import escape
from typing import TYPE_CHECKING, List, Optional

from .constants import (
    CHARTJS_CDN_URL,
    CHARTJS_CDN_SRI,
    CHART_COLOR_BEFORE,
    CHART_COLOR_AFTER,
    DARK_BORDER,
    DARK_TEXT_PRIMARY,
)
from .release_html_template import (
    base_styles,
    delta_arrow,
    fmt_delta,
    fmt_pct,
    fmt_value,
    render_score_badge,
    render_score_legend,
    script_json,
)

if TYPE_CHECKING:
    from .release_comparison import PairComparison


def _render_rows(results: List['PairComparison']) -> str:
    rows = []
    for r in results:
        arrow, color = delta_arrow(r.delta)
        rows.append(f"""
        <tr>
          <td>{escape(r.metric)}</td>
          <td>{escape(fmt_value(r.before, r.unit))}</td>
          <td>{escape(fmt_value(r.after, r.unit))}</td>
          <td class="delta-cell" style="color:{color};">{escape(fmt_delta(r.delta, r.unit))} {arrow}</td>
          <td class="delta-cell" style="color:{color};">{escape(fmt_pct(r.pct_delta))}</td>
        </tr>""")
    return "\n".join(rows)


def _chart_label(r: 'PairComparison') -> str:
    return f"{r.metric} ({r.unit})" if r.unit else r.metric


def _render_charts(results: List['PairComparison'], before_label: str, after_label: str) -> str:
    canvases = "".join(
        f"""
      <div class="panel chart-panel">
        <h3>{escape(r.metric)}</h3>
        <canvas id="beforeAfter_{i}"></canvas>
      </div>"""
        for i, r in enumerate(results)
    )

    scripts = "\n".join(
        f"""
      new Chart(document.getElementById('beforeAfter_{i}'), {{
        type: 'bar',
        data: {{
          labels: {script_json([before_label, after_label])},
          datasets: [{{
            label: {script_json(_chart_label(r))},
            data: {script_json([r.before, r.after])},
            backgroundColor: ['{CHART_COLOR_BEFORE}', '{CHART_COLOR_AFTER}']
          }}]
        }},
        options: {{
          responsive: true,
          plugins: {{ legend: {{ display: false }} }},
          scales: {{
            x: {{ ticks: {{ color: '{DARK_TEXT_PRIMARY}' }}, grid: {{ color: '{DARK_BORDER}' }} }},
            y: {{ ticks: {{ color: '{DARK_TEXT_PRIMARY}' }}, grid: {{ color: '{DARK_BORDER}' }} }}
          }}
        }}
      }});"""
        for i, r in enumerate(results)
    )

    return f"""
    <div class="panel">
      <h2>{escape(before_label)} vs {escape(after_label)} per Metric</h2>
      <div class="chart-grid">{canvases}</div>
    </div>
    <script>{scripts}</script>"""


def render_pair_report(
    results: List['PairComparison'],
    before_label: str,
    after_label: str,
    before_score: Optional[int],
    after_score: Optional[int],
    generated_at: Optional[str] = None,
) -> str:
    """Render the before/after comparison page.

    Args:
        results: Per-metric comparisons (metrics present on both sides)
        before_label: Column label for the baseline summary
        after_label: Column label for the compared summary
        before_score: Aggregate performance score of the baseline
        after_score: Aggregate performance score of the compared summary
        generated_at: Timestamp for the footer, defaults to now

    Returns:
        Complete HTML document
    """
    timestamp = generated_at or datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    score_delta = None
    if before_score is not None and after_score is not None:
        score_delta = after_score - before_score

    if results:
        table_html = f"""
      <table>
        <thead>
          <tr><th>Metric</th><th>{escape(before_label)}</th><th>{escape(after_label)}</th><th>Δ</th><th>Δ%</th></tr>
        </thead>
        <tbody>{_render_rows(results)}</tbody>
      </table>"""
        charts_html = _render_charts(results, before_label, after_label)
    else:
        table_html = '<p class="muted">No metric is available in both summaries.</p>'
        charts_html = ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Sitespeed.io Comparison Report</title>
  <script src="{CHARTJS_CDN_URL}" integrity="{CHARTJS_CDN_SRI}" crossorigin="anonymous"></script>
  <style>{base_styles()}</style>
</head>
<body>
  <header><h1>📊 Release Performance Comparison</h1></header>
  <div class="container">
    <div class="panel">
      <div class="score-container">
        <div class="score-row">
          <div>
            <p class="muted">{escape(before_label)}</p>
            {render_score_badge(before_score, show_delta=False)}
          </div>
          <div>
            <p class="muted">{escape(after_label)}</p>
            {render_score_badge(after_score, score_delta)}
          </div>
        </div>
        {render_score_legend()}
      </div>
      <h2>Metrics Table</h2>
      {table_html}
    </div>
    {charts_html}
  </div>
  <div class="footer">Generated on {escape(timestamp)}</div>
</body>
</html>"""
