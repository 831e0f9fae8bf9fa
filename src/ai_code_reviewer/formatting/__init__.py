"""
Output Formatting

Formats review comments for submission to GitHub.
"""

from .github import GitHubCommentFormatter

__all__ = ['GitHubCommentFormatter']
