"""
Context Assembler

Builds the review context for a run: filters the parsed diff by exclusion
patterns, fetches full file contents at the PR head, and collects PR and
repository metadata shared by every per-file prompt.
"""

import asyncio
import fnmatch
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..github.client import GitHubClient, HostError
from ..models.pr_diff import DiffFile
from ..models.review import (
    FileReviewUnit,
    PullRequestContext,
    RepositoryContext,
    ReviewContext,
)


logger = logging.getLogger(__name__)

README_PATH = "README.md"


def matches_any(path: str, patterns: Sequence[str]) -> bool:
    """
    Check a repository path against shell-style exclusion globs.

    Patterns are matched one path segment at a time: ``*``, ``?`` and
    ``[...]`` never cross a ``/``, and a ``**`` segment matches zero or more
    directories. As with minimatch, wildcards skip names starting with a
    dot unless the pattern segment itself starts with one.
    """
    parts = path.split('/')
    for pattern in patterns:
        pattern = pattern.strip()
        if pattern and _match_segments(parts, pattern.split('/')):
            return True
    return False


def _match_segments(parts: List[str], pattern_parts: List[str]) -> bool:
    if not pattern_parts:
        return not parts

    head = pattern_parts[0]
    if head == '**':
        if _match_segments(parts, pattern_parts[1:]):
            return True
        return bool(parts) and not parts[0].startswith('.') and _match_segments(parts[1:], pattern_parts)

    if not parts:
        return False
    if parts[0].startswith('.') and not head.startswith('.'):
        return False
    return fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], pattern_parts[1:])


class ContextAssembler:
    """
    Assembles the review context and per-file review units.

    File contents are fetched concurrently; README and manifest are fetched
    once and are best-effort.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        manifest_paths: Optional[List[str]] = None,
        max_file_bytes: Optional[int] = None,
        max_concurrent_fetches: int = 8,
        max_repo_context_chars: int = 4000
    ):
        """
        Initialize context assembler.

        Args:
            github_client: Shared GitHub client
            manifest_paths: Candidate manifest files, first one found wins
            max_file_bytes: Files above this size are not reviewed
            max_concurrent_fetches: Upper bound on in-flight content fetches
            max_repo_context_chars: Truncation limit for README and manifest
        """
        self.github_client = github_client
        self.manifest_paths = manifest_paths if manifest_paths is not None else ["package.json"]
        self.max_file_bytes = max_file_bytes
        self.max_concurrent_fetches = max_concurrent_fetches
        self.max_repo_context_chars = max_repo_context_chars

    async def assemble(
        self,
        pr_data: Dict,
        parsed_files: List[DiffFile],
        exclude_patterns: Sequence[str] = ()
    ) -> Tuple[ReviewContext, List[FileReviewUnit]]:
        """
        Build the review context and the list of files to review.

        Args:
            pr_data: Pull request data from the GitHub API
            parsed_files: Files from the resolved diff
            exclude_patterns: Glob patterns of paths to skip

        Returns:
            Tuple of (ReviewContext, FileReviewUnits in diff order)
        """
        owner, repo = pr_data['base']['repo']['full_name'].split('/', 1)
        head_sha = pr_data['head']['sha']

        candidates = self.filter_files(parsed_files, exclude_patterns)
        logger.info(f"Reviewing {len(candidates)} of {len(parsed_files)} changed files")

        semaphore = asyncio.Semaphore(self.max_concurrent_fetches)

        async def fetch(diff_file: DiffFile) -> Optional[FileReviewUnit]:
            async with semaphore:
                content = await asyncio.to_thread(
                    self._fetch_file_content, owner, repo, diff_file.path, head_sha
                )
            if content is None:
                logger.info(f"No content for {diff_file.path}, skipping")
                return None
            return FileReviewUnit(file=diff_file, content=content)

        results = await asyncio.gather(*(fetch(f) for f in candidates))
        units = [unit for unit in results if unit is not None]

        pr_context = PullRequestContext(
            title=pr_data.get('title') or '',
            description=pr_data.get('body') or '',
            changed_files=tuple(f.path for f in parsed_files if f.has_target),
            head_sha=head_sha,
            base_ref=pr_data['base'].get('ref', ''),
        )
        repo_context = await asyncio.to_thread(
            self.fetch_repository_context, owner, repo, pr_context.base_ref or head_sha
        )

        return ReviewContext(pr=pr_context, repository=repo_context), units

    def filter_files(self, parsed_files: List[DiffFile], exclude_patterns: Sequence[str]) -> List[DiffFile]:
        """Drop files without a target path, without chunks, or matching an exclusion glob."""
        kept = []
        for diff_file in parsed_files:
            if not diff_file.has_target:
                logger.debug(f"Skipping removed file {diff_file.old_path}")
                continue
            if not diff_file.is_reviewable:
                logger.debug(f"Skipping {diff_file.path}: no content changes")
                continue
            if matches_any(diff_file.path, exclude_patterns):
                logger.debug(f"Skipping excluded file {diff_file.path}")
                continue
            kept.append(diff_file)
        return kept

    def fetch_repository_context(self, owner: str, repo: str, ref: str) -> RepositoryContext:
        """Fetch README and the first available manifest; missing files become empty strings."""
        readme = self._fetch_file_content(owner, repo, README_PATH, ref) or ''

        manifest, manifest_path = '', ''
        for candidate in self.manifest_paths:
            content = self._fetch_file_content(owner, repo, candidate, ref)
            if content:
                manifest, manifest_path = content, candidate
                break

        return RepositoryContext(
            readme=self._truncate(readme),
            manifest=self._truncate(manifest),
            manifest_path=manifest_path,
        )

    def _fetch_file_content(self, owner: str, repo: str, path: str, ref: str) -> Optional[str]:
        try:
            return self.github_client.get_file_content(owner, repo, path, ref, max_bytes=self.max_file_bytes)
        except HostError as e:
            logger.warning(f"Error fetching file content for {path}: {e}")
            return None

    def _truncate(self, text: str) -> str:
        if self.max_repo_context_chars and len(text) > self.max_repo_context_chars:
            return text[:self.max_repo_context_chars] + "\n... (truncated)"
        return text
