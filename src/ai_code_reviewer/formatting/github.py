"""
GitHub Comment Formatter

Formats review comments into GitHub review-comment payloads and checks
them against the diff's anchor lines.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Sequence, Tuple

from ..models.pr_diff import DiffFile
from ..models.review import ReviewComment


logger = logging.getLogger(__name__)


class GitHubCommentFormatter:
    """
    Formats ReviewComments for the GitHub create-review API.

    Bodies above GitHub's comment size limit are truncated at a line break.
    """

    def __init__(self, max_comment_length: int = 65536):
        """
        Initialize GitHub comment formatter.

        Args:
            max_comment_length: GitHub's comment body limit
        """
        self.max_comment_length = max_comment_length

    def format_for_github(self, comments: Sequence[ReviewComment]) -> List[Dict]:
        """
        Convert comments to `{path, line, side, body}` payloads.

        Args:
            comments: Review comments in submission order

        Returns:
            List of payload dicts ready for GitHub API
        """
        payloads = []
        for comment in comments:
            payloads.append({
                'path': comment.file_path,
                'line': comment.line_number,
                'side': comment.side,
                'body': self._truncate_comment(comment.body),
            })
        return payloads

    def place(self, comment: ReviewComment, diff_file: DiffFile) -> ReviewComment:
        """
        Pick the diff side a comment is attached to.

        New-file lines win; a number that only exists as a deleted line is
        attached to the LEFT side.
        """
        if comment.line_number not in diff_file.anchor_lines() and \
                comment.line_number in diff_file.left_anchor_lines():
            return replace(comment, side='LEFT')
        return replace(comment, side='RIGHT')

    def split_by_anchor(
        self,
        comments: Sequence[ReviewComment],
        diff_file: DiffFile
    ) -> Tuple[List[ReviewComment], List[ReviewComment]]:
        """
        Partition comments into those on a line present in the file's diff
        and those that GitHub cannot anchor.

        Anchored comments come back with their side set.

        Returns:
            Tuple of (anchored, unanchored)
        """
        right, left = diff_file.anchor_lines(), diff_file.left_anchor_lines()
        anchored, unanchored = [], []
        for comment in comments:
            if comment.line_number in right or comment.line_number in left:
                anchored.append(self.place(comment, diff_file))
            else:
                unanchored.append(comment)
        return anchored, unanchored

    def _truncate_comment(self, comment: str) -> str:
        """Truncate comment if too long."""
        if len(comment) <= self.max_comment_length:
            return comment

        # Leave room for truncation message
        truncate_at = self.max_comment_length - 200
        truncated = comment[:truncate_at]

        # Try to truncate at a natural break point
        last_newline = truncated.rfind('\n')
        if last_newline > truncate_at - 500:
            truncated = truncated[:last_newline]

        return truncated + "\n\n---\n*⚠️ Comment truncated due to length limit.*"
