import json
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch
import sys

import requests

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "ainews" / "src"
sys.path.insert(0, str(SRC))

from ainews.analysis import heuristic
from ainews.analysis.claude import ClaudeAnalyzer
from ainews.analysis.factory import build_analyzer
from ainews.analysis.base import HeuristicAnalyzer
from ainews.analysis.parsing import extract_json_object, parse_analysis_response
from ainews.analysis.prompts import build_user_prompt
from ainews.analysis.zhipu import ZhipuAnalyzer
from ainews.config import AppConfig
from ainews.errors import AnalyzerError, ConfigError, ParseError, RequestTimeoutError

ITEM_DATA = {
    "title": "OpenAI发布突破性模型",
    "description": "开源工具应用",
    "source": "机器之心",
    "ctime": "2026-01-25 10:00",
    "url": "https://example.com/openai",
}

REPLY = {
    "interestingness": 75,
    "usefulness": 17,
    "totalScore": 12,
    "timeline": ["2026-01-24: 预告", "2026-01-25: 发布"],
    "productDetails": "新模型支持多模态输入",
    "analysis": "重大进展",
    "sources": [{"title": "官方博客", "url": "https://openai.com/blog"}],
}


def _item():
    from ainews.models.news import RawNewsItem
    return RawNewsItem.model_validate(ITEM_DATA)


def _response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


class TestResponseParsing(unittest.TestCase):
    def test_plain_json(self):
        topic = parse_analysis_response(json.dumps(REPLY, ensure_ascii=False), _item())

        self.assertEqual(topic.interestingness, 75)
        self.assertEqual(topic.usefulness, 17)
        self.assertEqual(topic.total_score, 92)
        self.assertEqual(topic.timeline, REPLY["timeline"])
        self.assertEqual(topic.product_details, "新模型支持多模态输入")
        self.assertEqual(topic.sources[0].url, "https://openai.com/blog")
        self.assertEqual(topic.title, ITEM_DATA["title"])
        self.assertEqual(topic.date, ITEM_DATA["ctime"])

    def test_fenced_json(self):
        text = "```json\n" + json.dumps(REPLY, ensure_ascii=False) + "\n```"
        topic = parse_analysis_response(text, _item())
        self.assertEqual(topic.total_score, 92)

    def test_json_wrapped_in_prose(self):
        text = "分析如下：\n" + json.dumps(REPLY, ensure_ascii=False) + "\n以上。"
        topic = parse_analysis_response(text, _item())
        self.assertEqual(topic.interestingness, 75)

    def test_braces_inside_strings(self):
        data = dict(REPLY, analysis="包含 } 与 { 的文本")
        text = "结果: " + json.dumps(data, ensure_ascii=False)
        self.assertEqual(extract_json_object(text)["analysis"], "包含 } 与 { 的文本")

    def test_missing_fields_get_defaults(self):
        topic = parse_analysis_response("{}", _item())

        self.assertEqual(topic.interestingness, 50)
        self.assertEqual(topic.usefulness, 10)
        self.assertEqual(topic.total_score, 60)
        self.assertEqual(topic.timeline, [])
        self.assertEqual(topic.product_details, ITEM_DATA["description"])
        self.assertEqual(topic.analysis, "")
        self.assertEqual(len(topic.sources), 1)
        self.assertEqual(topic.sources[0].url, ITEM_DATA["url"])

    def test_zero_scores_are_kept(self):
        topic = parse_analysis_response('{"interestingness": 0, "usefulness": 0}', _item())
        self.assertEqual(topic.total_score, 0)

    def test_out_of_range_scores_are_clamped(self):
        topic = parse_analysis_response('{"interestingness": 120, "usefulness": -3}', _item())
        self.assertEqual(topic.interestingness, 80)
        self.assertEqual(topic.usefulness, 0)
        self.assertEqual(topic.total_score, 80)

    def test_numeric_strings_are_accepted(self):
        topic = parse_analysis_response('{"interestingness": "65", "usefulness": 12.7}', _item())
        self.assertEqual(topic.interestingness, 65)
        self.assertEqual(topic.usefulness, 12)

    def test_sources_without_url_fall_back_to_original_link(self):
        topic = parse_analysis_response('{"sources": [{"title": "无链接"}]}', _item())
        self.assertEqual(topic.sources[0].title, "查看原文")
        self.assertEqual(topic.sources[0].url, ITEM_DATA["url"])

    def test_garbage_raises_parse_error(self):
        for text in ["", "no json here", "{broken", "[1, 2, 3]", '{"interestingness": "high"}',
                     '{"timeline": "not a list"}']:
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    parse_analysis_response(text, _item())


class TestPrompt(unittest.TestCase):
    def test_user_prompt_contains_item_fields(self):
        prompt = build_user_prompt(_item())
        for value in ITEM_DATA.values():
            self.assertIn(value, prompt)


class TestZhipuAnalyzer(unittest.TestCase):
    def setUp(self):
        self.analyzer = ZhipuAnalyzer("zk-test", timeout=5.0)

    @patch("ainews.analysis.zhipu.requests.post")
    def test_successful_analysis(self, mock_post):
        mock_post.return_value = _response({
            "choices": [{"message": {"content": json.dumps(REPLY, ensure_ascii=False)}}]
        })

        topic = self.analyzer.analyze(_item())

        self.assertEqual(topic.total_score, 92)
        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer zk-test")
        self.assertEqual(kwargs["json"]["model"], "glm-4-flash")
        self.assertEqual(kwargs["json"]["temperature"], 0.3)
        self.assertEqual(kwargs["json"]["max_tokens"], 2000)
        self.assertEqual(kwargs["json"]["top_p"], 0.7)
        self.assertEqual(kwargs["timeout"], 5.0)
        self.assertEqual(kwargs["json"]["messages"][0]["role"], "system")

    @patch("ainews.analysis.zhipu.requests.post")
    def test_timeout_falls_back_to_heuristic(self, mock_post):
        mock_post.side_effect = requests.Timeout("slow")

        topic = self.analyzer.analyze(_item())

        self.assertEqual(topic, heuristic.score(_item()))
        self.assertEqual(topic.total_score, 98)

    @patch("ainews.analysis.zhipu.requests.post")
    def test_error_envelope_falls_back(self, mock_post):
        mock_post.return_value = _response({"error": {"message": "quota exceeded"}}, status_code=429)
        topic = self.analyzer.analyze(_item())
        self.assertEqual(topic.total_score, 98)

    @patch("ainews.analysis.zhipu.requests.post")
    def test_unparseable_content_falls_back(self, mock_post):
        mock_post.return_value = _response({"choices": [{"message": {"content": "抱歉，无法分析"}}]})
        topic = self.analyzer.analyze(_item())
        self.assertEqual(topic.total_score, 98)

    @patch("ainews.analysis.zhipu.requests.post")
    def test_complete_maps_errors(self, mock_post):
        mock_post.side_effect = requests.Timeout("slow")
        with self.assertRaises(RequestTimeoutError):
            self.analyzer.complete("s", "u")

        mock_post.side_effect = None
        mock_post.return_value = _response({"choices": []})
        with self.assertRaises(AnalyzerError):
            self.analyzer.complete("s", "u")

        mock_post.return_value = MagicMock(status_code=200)
        mock_post.return_value.json.side_effect = ValueError("not json")
        with self.assertRaises(ParseError):
            self.analyzer.complete("s", "u")


class TestClaudeAnalyzer(unittest.TestCase):
    @patch("ainews.analysis.claude.requests.post")
    def test_successful_analysis(self, mock_post):
        mock_post.return_value = _response({
            "content": [{"type": "text", "text": "```json\n" + json.dumps(REPLY) + "\n```"}]
        })

        topic = ClaudeAnalyzer("sk-test").analyze(_item())

        self.assertEqual(topic.total_score, 92)
        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs["headers"]["x-api-key"], "sk-test")
        self.assertEqual(kwargs["headers"]["anthropic-version"], "2023-06-01")
        self.assertEqual(kwargs["json"]["messages"][0]["role"], "user")
        self.assertIn("system", kwargs["json"])

    @patch("ainews.analysis.claude.requests.post")
    def test_error_falls_back(self, mock_post):
        mock_post.return_value = _response(
            {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}},
            status_code=529,
        )
        topic = ClaudeAnalyzer("sk-test").analyze(_item())
        self.assertEqual(topic.total_score, 98)

    @patch("ainews.analysis.claude.requests.post")
    def test_missing_text_block_raises(self, mock_post):
        mock_post.return_value = _response({"content": []})
        with self.assertRaises(AnalyzerError):
            ClaudeAnalyzer("sk-test").complete("s", "u")


class TestBuildAnalyzer(unittest.TestCase):
    def test_heuristic_by_default(self):
        analyzer = build_analyzer(AppConfig(api_key="k"), env={})
        self.assertIsInstance(analyzer, HeuristicAnalyzer)

    def test_llm_backend_with_key(self):
        config = AppConfig(api_key="k", analyzer="zhipu", llm_timeout=15000, llm_model="glm-4-plus")
        analyzer = build_analyzer(config, env={"ZHIPU_API_KEY": "zk-live"})

        self.assertIsInstance(analyzer, ZhipuAnalyzer)
        self.assertEqual(analyzer.api_key, "zk-live")
        self.assertEqual(analyzer.model, "glm-4-plus")
        self.assertEqual(analyzer.timeout, 15.0)

    def test_llm_backend_without_key(self):
        config = AppConfig(api_key="k", analyzer="claude")
        with self.assertRaises(ConfigError):
            build_analyzer(config, env={})


if __name__ == "__main__":
    unittest.main()
