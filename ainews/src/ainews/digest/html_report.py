import datetime
import html
from typing import List, Optional, Sequence

from ..analysis.heuristic import (
    MAX_INTERESTINGNESS,
    MAX_USEFULNESS,
    TIER_EXCELLENT,
    TIER_GOOD,
    TIER_NORMAL,
)
from ..models.news import ScoredTopic
from ..models.report import ReportStatistics
from .stats import calculate_statistics, group_by_tier, sort_topics

TIER_LABELS = {
    TIER_EXCELLENT: "优秀",
    TIER_GOOD: "良好",
    TIER_NORMAL: "普通",
}

TIER_SECTIONS = (
    (TIER_EXCELLENT, "🏆 优秀话题"),
    (TIER_GOOD, "👍 良好话题"),
    (TIER_NORMAL, "📋 其他话题"),
)

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="zh-CN">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>AI行业资讯分析报告 - {timestamp}</title>
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", "PingFang SC", "Hiragino Sans GB",
                   "Microsoft YaHei", "Helvetica Neue", Helvetica, Arial, sans-serif;
      line-height: 1.6;
      color: #333;
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      min-height: 100vh;
      padding: 20px;
    }}
    .container {{
      max-width: 1200px;
      margin: 0 auto;
      background: white;
      border-radius: 16px;
      box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3);
      overflow: hidden;
    }}
    .header {{
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      color: white;
      padding: 40px;
      text-align: center;
    }}
    .header h1 {{ font-size: 2.5em; margin-bottom: 10px; font-weight: 700; }}
    .report-date {{ font-size: 1.1em; opacity: 0.95; }}
    .content {{ padding: 40px; }}
    .summary {{
      background: linear-gradient(135deg, #f5f7fa 0%, #c3cfe2 100%);
      border-radius: 12px;
      padding: 30px;
      margin-bottom: 40px;
    }}
    .summary h2 {{ color: #667eea; margin-bottom: 20px; font-size: 1.8em; }}
    .summary-stats {{
      display: grid;
      grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
      gap: 20px;
      margin-top: 20px;
    }}
    .stat-item {{ background: white; padding: 20px; border-radius: 8px; text-align: center; }}
    .stat-number {{ font-size: 2em; font-weight: bold; color: #667eea; }}
    .stat-label {{ color: #666; margin-top: 5px; }}
    .section-title {{
      font-size: 2em;
      margin: 40px 0 20px 0;
      padding-bottom: 10px;
      border-bottom: 3px solid #667eea;
    }}
    .topic-card {{
      border-radius: 12px;
      padding: 30px;
      margin: 30px 0;
      box-shadow: 0 4px 20px rgba(0, 0, 0, 0.15);
    }}
    .topic-card.excellent {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; }}
    .topic-card.good {{ background: linear-gradient(135deg, #f093fb 0%, #f5576c 100%); color: white; }}
    .topic-card.normal {{ background: linear-gradient(135deg, #e0eafc 0%, #cfdef3 100%); }}
    .topic-header {{
      display: flex;
      justify-content: space-between;
      align-items: center;
      margin-bottom: 20px;
      flex-wrap: wrap;
      gap: 15px;
    }}
    .topic-title {{ font-size: 1.8em; font-weight: bold; flex: 1; min-width: 300px; }}
    .score-badge {{ padding: 10px 25px; border-radius: 30px; font-weight: bold; font-size: 1.2em; }}
    .topic-card.excellent .score-badge {{ background: white; color: #667eea; }}
    .topic-card.good .score-badge {{ background: white; color: #f5576c; }}
    .topic-card.normal .score-badge {{ background: #667eea; color: white; }}
    .topic-meta {{ display: flex; gap: 20px; margin-bottom: 20px; flex-wrap: wrap; opacity: 0.9; }}
    .section {{ margin: 25px 0; }}
    .section h3 {{ font-size: 1.4em; margin-bottom: 15px; padding-bottom: 10px; }}
    .topic-card.excellent h3, .topic-card.good h3 {{ border-bottom: 2px solid rgba(255, 255, 255, 0.3); }}
    .topic-card.normal h3 {{ color: #667eea; border-bottom: 2px solid #667eea; }}
    .timeline {{ list-style: none; }}
    .timeline li {{ position: relative; padding-left: 30px; margin-bottom: 12px; }}
    .timeline li:before {{ content: "▸"; position: absolute; left: 0; font-weight: bold; }}
    .timeline a {{ color: inherit; }}
    .product-details, .analysis {{ line-height: 1.8; }}
    .product-details {{ background: rgba(255, 255, 255, 0.1); padding: 20px; border-radius: 8px; margin-top: 10px; }}
    .score-breakdown {{ display: flex; gap: 30px; margin-top: 15px; flex-wrap: wrap; }}
    .score-item {{ flex: 1; min-width: 200px; }}
    .score-label {{ font-size: 0.9em; opacity: 0.85; margin-bottom: 5px; }}
    .score-bar-container {{ background: rgba(255, 255, 255, 0.2); height: 10px; border-radius: 5px; overflow: hidden; }}
    .topic-card.normal .score-bar-container {{ background: rgba(102, 126, 234, 0.1); }}
    .score-bar {{ height: 100%; background: white; border-radius: 5px; }}
    .topic-card.normal .score-bar {{ background: linear-gradient(90deg, #667eea 0%, #764ba2 100%); }}
    .badge {{ display: inline-block; padding: 5px 15px; border-radius: 20px; font-size: 0.85em; font-weight: 600; }}
    .badge-excellent {{ background: #667eea; color: white; }}
    .badge-good {{ background: #f5576c; color: white; }}
    .badge-normal {{ background: #c3cfe2; color: #333; }}
    .footer {{ background: #f5f5f5; padding: 30px; text-align: center; color: #666; border-top: 1px solid #e0e0e0; }}
    @media (max-width: 768px) {{
      .header h1 {{ font-size: 1.8em; }}
      .topic-title {{ font-size: 1.4em; min-width: 100%; }}
      .content {{ padding: 20px; }}
      .summary-stats {{ grid-template-columns: 1fr; }}
    }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>🤖 AI行业资讯分析报告</h1>
      <p class="report-date">生成时间: {timestamp}</p>
    </div>
    <div class="content">
{summary}
{topics}
    </div>
    <div class="footer">
      <p>本报告由 AI News Analyzer 自动生成 | 数据来源: 多个AI行业权威媒体</p>
    </div>
  </div>
</body>
</html>
"""


def escape_html(text: Optional[str]) -> str:
    """Escape & < > " ' for safe embedding in element text and attributes."""
    return html.escape(text or "", quote=True)


def _render_summary(stats: ReportStatistics) -> str:
    items = [
        (stats.total, "总话题数"),
        (stats.excellent, "优秀话题 (&gt;80分)"),
        (stats.good, "良好话题 (60-80分)"),
        (stats.normal, "普通话题 (&lt;60分)"),
        (f"{stats.avg_score:.1f}", "平均评分"),
    ]
    lines = [
        '      <div class="summary">',
        "        <h2>📊 报告摘要</h2>",
        f"        <p>本次分析共涵盖 <strong>{stats.total}</strong> 个AI行业热点话题</p>",
        '        <div class="summary-stats">',
    ]
    for value, label in items:
        lines.append(
            f'          <div class="stat-item"><div class="stat-number">{value}</div>'
            f'<div class="stat-label">{label}</div></div>'
        )
    lines.append("        </div>")
    lines.append("      </div>")
    return "\n".join(lines)


def _render_score_breakdown(topic: ScoredTopic) -> List[str]:
    i_width = topic.interestingness / MAX_INTERESTINGNESS * 100
    u_width = topic.usefulness / MAX_USEFULNESS * 100
    return [
        '        <div class="score-breakdown">',
        '          <div class="score-item">',
        f'            <div class="score-label">有趣度 ({topic.interestingness}/{MAX_INTERESTINGNESS})</div>',
        f'            <div class="score-bar-container"><div class="score-bar" style="width: {i_width:.1f}%"></div></div>',
        "          </div>",
        '          <div class="score-item">',
        f'            <div class="score-label">有用度 ({topic.usefulness}/{MAX_USEFULNESS})</div>',
        f'            <div class="score-bar-container"><div class="score-bar" style="width: {u_width:.1f}%"></div></div>',
        "          </div>",
        "        </div>",
    ]


def render_topic_card(topic: ScoredTopic, tier: str, *, timestamp: str) -> str:
    lines = [f'      <div class="topic-card {tier}">']
    lines.append('        <div class="topic-header">')
    lines.append(f'          <div class="topic-title">{escape_html(topic.title)}</div>')
    lines.append(f'          <div class="score-badge">评分: {topic.total_score}/100</div>')
    lines.append("        </div>")

    lines.append('        <div class="topic-meta">')
    lines.append(f'          <span><span class="badge badge-{tier}">{TIER_LABELS[tier]}</span></span>')
    lines.append(f"          <span>📅 {escape_html(topic.date or timestamp)}</span>")
    if topic.source:
        lines.append(f"          <span>🔗 {escape_html(topic.source)}</span>")
    lines.append("        </div>")

    lines.extend(_render_score_breakdown(topic))

    lines.append('        <div class="section">')
    lines.append("          <h3>📈 事件脉络</h3>")
    lines.append('          <ul class="timeline">')
    if topic.timeline:
        for entry in topic.timeline:
            lines.append(f"            <li>{escape_html(entry)}</li>")
    else:
        lines.append("            <li>暂无详细时间线</li>")
    lines.append("          </ul>")
    lines.append("        </div>")

    lines.append('        <div class="section">')
    lines.append("          <h3>💡 产品创意详情</h3>")
    details = escape_html(topic.product_details) if topic.product_details else "暂无详细产品信息"
    lines.append(f'          <div class="product-details">{details}</div>')
    lines.append("        </div>")

    lines.append('        <div class="section">')
    lines.append("          <h3>🎯 综合分析</h3>")
    analysis = escape_html(topic.analysis) if topic.analysis else "暂无分析内容"
    lines.append(f'          <div class="analysis">{analysis}</div>')
    lines.append("        </div>")

    if topic.sources:
        lines.append('        <div class="section">')
        lines.append("          <h3>🔗 相关链接</h3>")
        lines.append('          <ul class="timeline">')
        for link in topic.sources:
            lines.append(
                f'            <li><a href="{escape_html(link.url)}" target="_blank" rel="noopener">'
                f"{escape_html(link.title)}</a></li>"
            )
        lines.append("          </ul>")
        lines.append("        </div>")

    lines.append("      </div>")
    return "\n".join(lines)


def render_report(topics: Sequence[ScoredTopic], generated_at: Optional[datetime.datetime] = None) -> str:
    """
    Render scored topics into a standalone HTML document, highest score first,
    one section per non-empty tier.
    """
    timestamp = (generated_at or datetime.datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    ordered = sort_topics(topics)
    stats = calculate_statistics(ordered)
    groups = group_by_tier(ordered)

    sections = []
    for tier, heading in TIER_SECTIONS:
        tier_topics = groups[tier]
        if not tier_topics:
            continue
        sections.append(f'      <h2 class="section-title">{heading}</h2>')
        for topic in tier_topics:
            sections.append(render_topic_card(topic, tier, timestamp=timestamp))

    return HTML_TEMPLATE.format(
        timestamp=timestamp,
        summary=_render_summary(stats),
        topics="\n".join(sections),
    )
