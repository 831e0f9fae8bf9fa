"""
GitHub Integration Layer

This module provides GitHub API integration for PR diff retrieval,
incremental diff resolution, file content access and review submission.
"""

from .client import GitHubClient, HostError, RateLimitExceeded
from .parser import UnifiedDiffParser, DiffParseError
from .resolver import DiffResolver

__all__ = [
    'GitHubClient',
    'HostError',
    'RateLimitExceeded',
    'UnifiedDiffParser',
    'DiffParseError',
    'DiffResolver',
]
