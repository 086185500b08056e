from ..models.news import RawNewsItem

SYSTEM_PROMPT = """你是一个专业的 AI 行业资讯分析师。你的任务是：

1. 分析提供的 AI 新闻话题
2. 评估其"有趣度"（0-80分）和"有用度"（0-20分）
3. 生成事件脉络时间线
4. 提取产品/技术创新的详细细节
5. 提供综合分析说明

评分标准：
- 有趣度（80分）：
  * 70-80: 突破性创新 - 颠覆性技术或重大突破
  * 60-69: 重大进展 - 显著的技术提升或里程碑
  * 50-59: 显著更新 - 重要功能或改进
  * 30-49: 常规新闻 - 一般性的行业动态

- 有用度（20分）：
  * 18-20: 高度可执行 - 提供具体可行的洞察
  * 15-17: 有价值 - 提供有意义的行业见解
  * 10-14: 信息丰富 - 包含有用的背景信息
  * 5-9: 有限效用 - 信息量较少

请严格按照用户要求的 JSON 格式返回分析结果，不要添加任何其他内容。"""

USER_PROMPT_TEMPLATE = """请分析以下 AI 新闻话题：

标题：{title}
描述：{description}
来源：{source}
日期：{date}
链接：{url}

请返回以下 JSON 格式的分析结果（必须是纯JSON，不要添加其他解释）：
{{
  "interestingness": 数字 (0-80),
  "usefulness": 数字 (0-20),
  "totalScore": 数字 (interestingness + usefulness),
  "timeline": ["事件1", "事件2", ...],
  "productDetails": "产品/技术详情描述",
  "analysis": "综合分析说明为什么这个话题重要",
  "sources": [{{"title": "来源标题", "url": "链接"}}]
}}"""


def build_user_prompt(item: RawNewsItem) -> str:
    return USER_PROMPT_TEMPLATE.format(
        title=item.title,
        description=item.description,
        source=item.source,
        date=item.published,
        url=item.url,
    )
