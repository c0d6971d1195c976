"""HTML template for the multi-release Web Vitals dashboard.

One panel per section: aggregate score badge for the latest release, a
metrics table (one column per release plus delta columns against the
previous release) and one bar chart per metric.
"""

import json
from datetime import datetime
from html import escape
from typing import TYPE_CHECKING, List, Optional

from .constants import (
    METRIC_NAMES,
    METRIC_DESCRIPTIONS,
    UNIT_MS,
    CHARTJS_CDN_URL,
    CHARTJS_CDN_SRI,
    CHART_COLOR_RELEASE,
    BUCKET_GOOD,
    BUCKET_NEEDS_IMPROVEMENT,
    BUCKET_POOR,
    COLOR_GOOD,
    COLOR_GOOD_BG,
    COLOR_NEEDS_IMPROVEMENT,
    COLOR_NEEDS_IMPROVEMENT_BG,
    COLOR_POOR,
    COLOR_POOR_BG,
    COLOR_NEUTRAL,
    COLOR_NEUTRAL_BG,
    DARK_BG_PRIMARY,
    DARK_BG_SECONDARY,
    DARK_BORDER,
    DARK_TEXT_PRIMARY,
    DARK_TEXT_SECONDARY,
)
from .perf_score import metric_bucket, score_bucket

if TYPE_CHECKING:
    from .release_comparison import SectionResult
    from .report_config import ReportConfig


BUCKET_COLORS = {
    BUCKET_GOOD: (COLOR_GOOD, COLOR_GOOD_BG),
    BUCKET_NEEDS_IMPROVEMENT: (COLOR_NEEDS_IMPROVEMENT, COLOR_NEEDS_IMPROVEMENT_BG),
    BUCKET_POOR: (COLOR_POOR, COLOR_POOR_BG),
}


def script_json(value) -> str:
    """JSON literal safe to embed inside a <script> element."""
    return json.dumps(value).replace("</", "<\\/")


def fmt_value(value: Optional[float], unit: str) -> str:
    """Format a metric value: "1234 ms" for timings, three decimals otherwise."""
    if value is None:
        return "-"
    if unit == UNIT_MS:
        return f"{value:.0f} ms"
    return f"{value:.3f}"


def fmt_delta(delta: Optional[float], unit: str) -> str:
    if delta is None:
        return "-"
    sign = "+" if delta > 0 else ""
    return f"{sign}{fmt_value(delta, unit)}"


def fmt_pct(pct: Optional[float]) -> str:
    if pct is None:
        return "N/A"
    sign = "+" if pct > 0 else ""
    return f"{sign}{pct:.2f}%"


def delta_arrow(delta: Optional[float]) -> tuple:
    """Arrow and color for a metric delta. Lower values are better."""
    if delta is None or delta == 0:
        return "→", COLOR_NEUTRAL
    if delta < 0:
        return "↓", COLOR_GOOD
    return "↑", COLOR_POOR


def score_arrow(delta: Optional[int]) -> tuple:
    """Arrow and color for a score delta. Higher scores are better."""
    if delta is None or delta == 0:
        return "→", COLOR_NEUTRAL
    if delta > 0:
        return "↑", COLOR_GOOD
    return "↓", COLOR_POOR


def bucket_colors(bucket: str) -> tuple:
    return BUCKET_COLORS.get(bucket, (COLOR_NEUTRAL, COLOR_NEUTRAL_BG))


def render_score_badge(score: Optional[int], score_delta: Optional[int] = None, show_delta: bool = True) -> str:
    color, bg = bucket_colors(score_bucket(score))
    label = "n/a" if score is None else str(score)

    delta_html = ""
    if show_delta:
        arrow, delta_color = score_arrow(score_delta)
        if score_delta is None:
            delta_text = "–"
        else:
            sign = "+" if score_delta > 0 else ""
            delta_text = f"{sign}{score_delta} {arrow}"
        delta_html = f'<p class="score-delta" style="color:{delta_color};">{delta_text}</p>'

    return f"""
      <div class="score-row">
        <p class="score" style="border-color:{color}; background:{bg}; color:{color};">{label}</p>
        {delta_html}
      </div>"""


def render_score_legend() -> str:
    return """
      <div class="score-legend">
        <p>🔴 0-49</p>
        <p>🟠 50-89</p>
        <p>🟢 90-100</p>
      </div>"""


def _chart_id(section_index: int, metric_index: int) -> str:
    return f"section_{section_index}_chart_{metric_index}"


def _render_metric_row(section: 'SectionResult', metric: str) -> str:
    releases = section.releases
    cells = []
    for idx, release in enumerate(releases):
        record = section.record_for(release, metric)
        text = escape(fmt_value(record.value, record.unit)) if record else "-"

        # Only the latest release is highlighted
        if idx == len(releases) - 1 and record is not None:
            color, _ = bucket_colors(metric_bucket(metric, record.value))
            text = f'<span class="cell-highlight" style="color:{color};">{text}</span>'
        cells.append(f"<td>{text}</td>")

    latest = section.latest_record(metric)
    delta = latest.delta if latest else None
    arrow, color = delta_arrow(delta)
    delta_text = fmt_delta(delta, latest.unit) if latest else "-"
    pct_text = fmt_pct(latest.pct_delta) if latest and latest.delta is not None else "N/A"

    return f"""
        <tr>
          <td>{escape(metric)}</td>
          {''.join(cells)}
          <td class="delta-cell" style="color:{color};">{escape(delta_text)} {arrow}</td>
          <td class="delta-cell" style="color:{color};">{escape(pct_text)}</td>
        </tr>"""


def _render_chart_script(section: 'SectionResult', section_index: int) -> str:
    scripts = []
    for metric_index, metric in enumerate(METRIC_NAMES):
        values = []
        for release in section.releases:
            record = section.record_for(release, metric)
            values.append(record.value if record else None)

        scripts.append(f"""
      new Chart(document.getElementById('{_chart_id(section_index, metric_index)}'), {{
        type: 'bar',
        data: {{
          labels: {script_json(section.releases)},
          datasets: [{{
            label: {script_json(metric)},
            data: {script_json(values)},
            backgroundColor: '{CHART_COLOR_RELEASE}'
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
      }});""")
    return "\n".join(scripts)


def render_section(section: 'SectionResult', section_index: int) -> str:
    """Render one dashboard section panel with its chart script."""
    header_cells = "".join(f"<th>{escape(r)}</th>" for r in section.releases)
    rows = "\n".join(_render_metric_row(section, metric) for metric in METRIC_NAMES)

    canvases = "".join(
        f"""
        <div class="panel chart-panel"><h3>{escape(metric)}</h3><canvas id="{_chart_id(section_index, i)}"></canvas></div>"""
        for i, metric in enumerate(METRIC_NAMES)
    )

    if section.url:
        title_html = f'<a href="{escape(section.url)}" target="_blank" rel="noopener">{escape(section.name)}</a>'
    else:
        title_html = escape(section.name)

    warning_html = ""
    if section.warnings:
        items = "\n".join(f"<li>{escape(w)}</li>" for w in section.warnings)
        warning_html = f"""
        <details class="warning-banner">
          <summary>⚠️ {len(section.warnings)} summary file(s) could not be loaded</summary>
          <ul>{items}</ul>
        </details>"""

    return f"""
    <div class="panel section-panel">
      <div class="score-container">
        {render_score_badge(section.latest_score, section.score_delta)}
        {render_score_legend()}
      </div>
      <h2>{title_html}</h2>
      {warning_html}
      <table>
        <thead>
          <tr><th>Metric</th>{header_cells}<th>Δ</th><th>Δ%</th></tr>
        </thead>
        <tbody>{rows}</tbody>
      </table>
      <div class="chart-grid">{canvases}</div>
    </div>
    <script>{_render_chart_script(section, section_index)}</script>"""


def render_environment(config: 'ReportConfig') -> str:
    if not config.environment:
        return ""
    entries = "".join(
        f"""
        <div class="environment-entry">
          <span class="muted">{escape(label)}:&nbsp;</span>
          <span class="strong">{escape(value)}</span>
        </div>"""
        for label, value in config.environment
    )
    return f'<div class="environment-config">{entries}</div>'


def render_report_links(config: 'ReportConfig') -> str:
    if not config.report_links:
        return ""

    groups = []
    for group_title, links in config.report_links:
        items = "".join(
            f"""
            <a href="{escape(link.url)}" target="_blank" rel="noopener"><b>{escape(link.label)}</b>"""
            f"""{f' ({escape(link.date)})' if link.date else ''}</a>"""
            for link in links
        )
        groups.append(f"""
        <div>
          <h2>{escape(group_title)}</h2>
          <div class="link-list">{items}</div>
        </div>""")

    return f'<div class="panel panel-links">{"".join(groups)}</div>'


def render_metric_glossary() -> str:
    items = "".join(
        f"<p><b>{escape(metric)} ({escape(name)}): </b>{escape(text)}</p>"
        for metric, (name, text) in METRIC_DESCRIPTIONS.items()
    )
    return f"""
    <div class="panel">
      <h2>Metric Details</h2>
      {items}
    </div>"""


def base_styles() -> str:
    return f"""
    body {{ font-family: "Inter", sans-serif; margin: 0; background: {DARK_BG_PRIMARY}; color: {DARK_TEXT_PRIMARY}; }}
    header {{ background: {DARK_BG_SECONDARY}; padding: 1rem; text-align: center; border-bottom: 1px solid {DARK_BORDER}; }}
    h1 {{ margin: 0 0 0.5rem 0; font-size: 1.75rem; font-weight: 600; }}
    a {{ color: {DARK_TEXT_PRIMARY}; text-decoration: none; }}
    .container {{ padding: 2rem; display: grid; gap: 2rem; max-width: 1400px; margin: auto; }}
    .panel {{ background: {DARK_BG_SECONDARY}; border: 1px solid {DARK_BORDER}; border-radius: 10px; padding: 1rem; }}
    .panel-links {{ display: grid; grid-template-columns: 1fr 1fr; gap: 1rem; }}
    .link-list a {{ display: block; margin-bottom: 1rem; }}
    .score-container {{ display: flex; justify-content: center; align-items: center; flex-direction: column; gap: 26px; }}
    .score-row {{ display: flex; align-items: center; gap: 16px; }}
    .score {{ margin: 0; padding: 20px; min-width: 40px; text-align: center; font-size: 32px; font-weight: 600; border: 4px solid; border-radius: 50%; }}
    .score-delta {{ font-weight: bold; margin: 0; }}
    .score-legend {{ display: flex; gap: 36px; }}
    .score-legend p {{ margin: 0; }}
    .environment-config {{ display: flex; gap: 30px; justify-content: center; }}
    .muted {{ color: {DARK_TEXT_SECONDARY}; }}
    .strong {{ font-weight: 600; }}
    table {{ width: 100%; border-collapse: collapse; margin-top: 1rem; }}
    thead {{ background: {DARK_BORDER}; }}
    th, td {{ padding: 8px; text-align: center; }}
    td:first-child {{ text-align: left; font-weight: 500; }}
    tr:nth-child(even) {{ background: {DARK_BG_PRIMARY}; }}
    tr:nth-child(odd) {{ background: {DARK_BG_SECONDARY}; }}
    .cell-highlight {{ display: inline-block; padding: 4px 8px; border-radius: 6px; font-weight: bold; }}
    .delta-cell {{ font-weight: bold; }}
    .chart-grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr)); gap: 1rem; }}
    .warning-banner {{ color: {COLOR_NEEDS_IMPROVEMENT}; margin: 0.5rem 0; }}
    .footer {{ text-align: center; margin: 2rem 0; font-size: 0.875rem; color: {DARK_TEXT_SECONDARY}; }}
    """


def render_release_report(
    sections: List['SectionResult'],
    config: 'ReportConfig',
    generated_at: Optional[str] = None,
) -> str:
    """Render the complete multi-release dashboard.

    Args:
        sections: Section results in display order
        config: Report configuration (title, environment, link panels)
        generated_at: Timestamp for the footer, defaults to now

    Returns:
        Complete HTML document
    """
    timestamp = generated_at or datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    sections_html = "\n".join(render_section(s, i) for i, s in enumerate(sections))

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(config.title)}</title>
  <script src="{CHARTJS_CDN_URL}" integrity="{CHARTJS_CDN_SRI}" crossorigin="anonymous"></script>
  <style>{base_styles()}</style>
</head>
<body>
  <header>
    <h1>📊 {escape(config.title)}</h1>
    {render_environment(config)}
  </header>
  <div class="container">
    {sections_html}
    {render_report_links(config)}
    {render_metric_glossary()}
  </div>
  <div class="footer">Generated on {escape(timestamp)}</div>
</body>
</html>"""
