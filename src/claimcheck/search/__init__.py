from claimcheck.search.answer import AnswerEngineSource
from claimcheck.search.base import Answer, AnswerEngine, ResearchSource
from claimcheck.search.claude import ClaudeAnswerEngine
from claimcheck.search.newsapi import NewsAPISource
from claimcheck.search.perplexity import PerplexityAnswerEngine

__all__ = [
    "Answer",
    "AnswerEngine",
    "AnswerEngineSource",
    "ClaudeAnswerEngine",
    "NewsAPISource",
    "PerplexityAnswerEngine",
    "ResearchSource",
]
