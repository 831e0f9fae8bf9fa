"""
Data Models

AI Code Reviewer 시스템의 핵심 데이터 모델들
"""

from .pr_diff import DiffLine, DiffChunk, DiffFile, DEV_NULL
from .review import (
    PullRequestEvent,
    PullRequestContext,
    RepositoryContext,
    ReviewContext,
    FileReviewUnit,
    ReviewComment,
    FileReviewOutcome,
    ModelComment,
    ModelReviewResponse,
    PullRequestEventRequest,
)

__all__ = [
    "DiffLine",
    "DiffChunk",
    "DiffFile",
    "DEV_NULL",
    "PullRequestEvent",
    "PullRequestContext",
    "RepositoryContext",
    "ReviewContext",
    "FileReviewUnit",
    "ReviewComment",
    "FileReviewOutcome",
    "ModelComment",
    "ModelReviewResponse",
    "PullRequestEventRequest",
]
