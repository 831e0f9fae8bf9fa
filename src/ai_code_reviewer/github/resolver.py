"""
Diff Resolver

Decides which diff to review for a pull request event: the full PR diff
when a PR is opened, an incremental diff when new commits are pushed.
"""

import logging
from typing import Optional

from ..models.review import PullRequestEvent
from .client import GitHubClient


logger = logging.getLogger(__name__)


class DiffResolver:
    """
    Resolves the unified diff for a pull request event.

    Incremental strategies for ``synchronize`` events:

    - ``previous_head``: diff from the previous push's head to the new head.
      The previous head is the push's ``before`` SHA when the event carries
      one, otherwise the second-to-last commit of the PR. Falls back to the
      full PR diff when the PR has fewer than two commits.
    - ``base``: diff from the PR's base commit to the current head. Lines
      reviewed on earlier pushes may be reviewed again.
    """

    def __init__(self, github_client: GitHubClient, incremental_strategy: str = "previous_head"):
        if incremental_strategy not in ('previous_head', 'base'):
            raise ValueError(f"Unknown incremental strategy: {incremental_strategy}")
        self.github_client = github_client
        self.incremental_strategy = incremental_strategy

    def resolve(self, event: PullRequestEvent, pr_data: Optional[dict] = None) -> Optional[str]:
        """
        Resolve the diff to review for an event.

        Args:
            event: Triggering pull request event
            pr_data: Already fetched PR data, to avoid a second request

        Returns:
            Unified diff text, or None for unsupported actions

        Raises:
            HostError: When GitHub cannot be reached or the PR is missing
        """
        if event.action in ('opened', 'reopened'):
            return self.github_client.get_pull_request_diff(event.owner, event.repo, event.pull_number)

        if event.action == 'synchronize':
            if pr_data is None:
                pr_data = self.github_client.get_pull_request(event.owner, event.repo, event.pull_number)
            return self._resolve_incremental(event, pr_data)

        logger.info(f"Unsupported event: {event.action}")
        return None

    def resolve_diff(self, owner: str, repo: str, pull_number: int, action: str) -> Optional[str]:
        return self.resolve(PullRequestEvent(owner=owner, repo=repo, pull_number=pull_number, action=action))

    def _resolve_incremental(self, event: PullRequestEvent, pr_data: dict) -> str:
        head_sha = event.after_sha or pr_data['head']['sha']

        if self.incremental_strategy == 'base':
            base_sha = pr_data['base']['sha']
            logger.info(f"Incremental diff against PR base {base_sha[:7]}")
            return self.github_client.compare_commits_diff(event.owner, event.repo, base_sha, head_sha)

        previous_sha = event.before_sha or self._previous_commit(event)
        if previous_sha is None:
            logger.info("Previous push head unavailable, falling back to full diff")
            return self.github_client.get_pull_request_diff(event.owner, event.repo, event.pull_number)

        logger.info(f"Incremental diff {previous_sha[:7]}...{head_sha[:7]}")
        return self.github_client.compare_commits_diff(event.owner, event.repo, previous_sha, head_sha)

    def _previous_commit(self, event: PullRequestEvent) -> Optional[str]:
        """SHA of the second-to-last PR commit, or None with fewer than two commits."""
        commits = self.github_client.list_pull_request_commits(event.owner, event.repo, event.pull_number)
        if len(commits) < 2:
            logger.info(f"PR has {len(commits)} commit(s), no previous head")
            return None
        return commits[-2]['sha']
