import datetime
import unittest
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "ainews" / "src"
sys.path.insert(0, str(SRC))

from ainews.digest.html_report import escape_html, render_report
from ainews.digest.stats import calculate_statistics, group_by_tier, sort_topics, top_topics
from ainews.models.news import ScoredTopic, SourceLink


def _topic(title, interestingness, usefulness, **extra):
    fields = {
        "title": title,
        "source": "测试来源",
        "date": "2026-01-25",
        "url": f"https://example.com/{interestingness}-{usefulness}",
        "interestingness": interestingness,
        "usefulness": usefulness,
        "total_score": interestingness + usefulness,
    }
    fields.update(extra)
    return ScoredTopic(**fields)


class TestStatistics(unittest.TestCase):
    def test_tier_counts_and_average(self):
        topics = [_topic("a", 78, 17), _topic("b", 50, 10), _topic("c", 30, 10)]
        stats = calculate_statistics(topics)

        self.assertEqual(stats.total, 3)
        self.assertEqual(stats.excellent, 1)
        self.assertEqual(stats.good, 1)
        self.assertEqual(stats.normal, 1)
        self.assertAlmostEqual(stats.avg_score, 65.0)
        self.assertEqual(stats.model_dump(by_alias=True)["avgScore"], 65.0)

    def test_empty_set(self):
        stats = calculate_statistics([])
        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.avg_score, 0.0)

    def test_sort_is_stable(self):
        first = _topic("first", 50, 10)
        second = _topic("second", 40, 20)
        best = _topic("best", 70, 20)
        ordered = sort_topics([first, second, best])
        self.assertEqual([t.title for t in ordered], ["best", "first", "second"])

    def test_groups_and_top(self):
        topics = [_topic(str(n), n, 0) for n in (10, 80, 60, 20, 70, 75)]
        groups = group_by_tier([_topic("x", 80, 1)] + topics)
        self.assertEqual([t.title for t in groups["excellent"]], ["x"])
        self.assertEqual(len(groups["good"]) + len(groups["normal"]), len(topics))
        self.assertEqual([t.total_score for t in top_topics(topics)], [80, 75, 70, 60, 20])

    def test_total_must_be_sum(self):
        with self.assertRaises(ValueError):
            ScoredTopic(title="t", interestingness=50, usefulness=10, total_score=70)


class TestHtmlReport(unittest.TestCase):
    def test_escape(self):
        self.assertEqual(escape_html("<a href=\"x\">'&'</a>"),
                         "&lt;a href=&quot;x&quot;&gt;&#x27;&amp;&#x27;&lt;/a&gt;")
        self.assertEqual(escape_html(None), "")

    def test_untrusted_text_is_escaped(self):
        topic = _topic(
            "<script>alert(1)</script>", 70, 15,
            analysis="<b>bold</b>",
            sources=[SourceLink(title="x", url='https://example.com/"><script>')],
        )
        html_text = render_report([topic], generated_at=datetime.datetime(2026, 1, 25, 9, 0))

        self.assertNotIn("<script>", html_text)
        self.assertIn("&lt;script&gt;alert(1)&lt;/script&gt;", html_text)
        self.assertIn("&lt;b&gt;bold&lt;/b&gt;", html_text)
        self.assertIn('href="https://example.com/&quot;&gt;&lt;script&gt;"', html_text)

    def test_sections_and_order(self):
        topics = [_topic("普通新闻", 30, 10), _topic("头条新闻", 78, 17), _topic("良好新闻", 50, 10)]
        html_text = render_report(topics, generated_at=datetime.datetime(2026, 1, 25, 9, 30, 5))

        self.assertIn("2026-01-25 09:30:05", html_text)
        self.assertIn("🏆 优秀话题", html_text)
        self.assertIn("👍 良好话题", html_text)
        self.assertIn("📋 其他话题", html_text)
        self.assertLess(html_text.index("头条新闻"), html_text.index("良好新闻"))
        self.assertLess(html_text.index("良好新闻"), html_text.index("普通新闻"))
        self.assertIn("评分: 95/100", html_text)
        self.assertIn("65.0", html_text)

    def test_empty_tiers_are_omitted(self):
        html_text = render_report([_topic("only", 50, 10)])
        self.assertNotIn("🏆 优秀话题", html_text)
        self.assertIn("👍 良好话题", html_text)

    def test_placeholders(self):
        html_text = render_report([_topic("bare", 40, 5)])

        self.assertIn("暂无详细时间线", html_text)
        self.assertIn("暂无详细产品信息", html_text)
        self.assertIn("暂无分析内容", html_text)
        self.assertNotIn("🔗 相关链接", html_text)

    def test_score_bars(self):
        html_text = render_report([_topic("bars", 40, 5)])
        self.assertIn("width: 50.0%", html_text)
        self.assertIn("width: 25.0%", html_text)


if __name__ == "__main__":
    unittest.main()
