"""
AI Code Reviewer

LLM 기반 GitHub Pull Request 자동 코드 리뷰
"""

__version__ = "1.0.0"

from .github.client import HostError, RateLimitExceeded
from .github.parser import DiffParseError
from .llm.backends import ModelError
from .llm.response import ResponseFormatError
from .review.orchestrator import ReviewOrchestrator, ReviewRunResult, RunState

__all__ = [
    "ReviewOrchestrator",
    "ReviewRunResult",
    "RunState",
    "HostError",
    "RateLimitExceeded",
    "DiffParseError",
    "ModelError",
    "ResponseFormatError",
]
