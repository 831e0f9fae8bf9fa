"""
Review Orchestrator

Sequences a complete review run: resolve and parse the diff, assemble
context, review each file with the model one call at a time, and submit
all comments as a single GitHub review.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..config import AppConfig
from ..formatting.github import GitHubCommentFormatter
from ..github.client import GitHubClient, HostError
from ..github.parser import UnifiedDiffParser
from ..github.resolver import DiffResolver
from ..llm.backends import ModelError
from ..llm.client import ModelClient
from ..llm.prompts import PromptBuilder
from ..llm.response import ResponseParser
from ..models.review import (
    FileReviewOutcome,
    FileReviewUnit,
    PullRequestEvent,
    ReviewComment,
    ReviewContext,
)
from .context import ContextAssembler
from .throttle import SerialExecutor


logger = logging.getLogger(__name__)


class RunState(str, Enum):
    START = "start"
    CONTEXT_READY = "context_ready"
    REVIEWING = "reviewing"
    SUBMITTING = "submitting"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ReviewRunResult:
    """Result of one review run."""
    review_id: str
    repository: str
    pull_number: int
    state: RunState = RunState.START
    comments: List[ReviewComment] = field(default_factory=list)
    file_outcomes: List[FileReviewOutcome] = field(default_factory=list)
    submitted: bool = False
    error: Optional[str] = None
    processing_time: float = 0.0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        return self.state in (RunState.DONE, RunState.SKIPPED)

    @property
    def file_errors(self) -> Dict[str, str]:
        return {o.file_path: o.error for o in self.file_outcomes if o.failed}


class ReviewOrchestrator:
    """
    Runs the review pipeline for pull request events.

    Model calls go through a SerialExecutor with a limit of one, so files
    are reviewed strictly in diff order with a single call in flight.
    A model failure for one file leaves that file without comments and the
    run continues. The run fails on GitHub errors, or when the model call
    failed for every reviewed file.
    """

    def __init__(
        self,
        config: AppConfig,
        github_client: Optional[GitHubClient] = None,
        model_client: Optional[ModelClient] = None
    ):
        """
        Initialize review orchestrator.

        Args:
            config: Application configuration for this run
            github_client: Optional pre-built GitHub client
            model_client: Optional pre-built model client
        """
        self.config = config

        logger.info("Initializing review components...")

        self.github_client = github_client or GitHubClient(
            config.github.token,
            base_url=config.github.api_base_url,
            timeout=config.github.timeout_seconds,
        )
        self.model_client = model_client or ModelClient(config.model)

        self.diff_resolver = DiffResolver(
            self.github_client,
            incremental_strategy=config.review.incremental_strategy,
        )
        self.diff_parser = UnifiedDiffParser()
        self.context_assembler = ContextAssembler(
            self.github_client,
            manifest_paths=config.review.manifest_paths,
            max_file_bytes=config.github.max_file_bytes,
            max_concurrent_fetches=config.github.max_concurrent_fetches,
            max_repo_context_chars=config.review.max_repo_context_chars,
        )
        self.prompt_builder = PromptBuilder(config.review.custom_instructions)
        self.response_parser = ResponseParser()
        self.formatter = GitHubCommentFormatter()
        self.model_executor = SerialExecutor(limit=1)

    async def run(self, event: PullRequestEvent) -> ReviewRunResult:
        """
        Run a complete review for an event.

        Args:
            event: Triggering pull request event

        Returns:
            ReviewRunResult; ``state`` is DONE, SKIPPED or FAILED
        """
        start_time = datetime.now()
        result = ReviewRunResult(
            review_id=f"{event.repository}_{event.pull_number}_{int(start_time.timestamp())}",
            repository=event.repository,
            pull_number=event.pull_number,
            created_at=start_time,
        )

        logger.info(f"Starting review {result.review_id} (action={event.action})")

        try:
            await self._run(event, result)
        except HostError as e:
            logger.error(f"Review {result.review_id} failed: {e}")
            result.error = str(e)
            self._transition(result, RunState.FAILED)
        except Exception as e:
            logger.exception(f"Review {result.review_id} failed unexpectedly")
            result.error = f"Unexpected error: {e}"
            self._transition(result, RunState.FAILED)

        result.processing_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Review {result.review_id} finished: {result.state.value} ({result.processing_time:.2f}s)")
        return result

    async def _run(self, event: PullRequestEvent, result: ReviewRunResult) -> None:
        pr_data = None
        if event.is_supported:
            pr_data = self.github_client.get_pull_request(event.owner, event.repo, event.pull_number)

        raw_diff = self.diff_resolver.resolve(event, pr_data)
        if raw_diff is None:
            self._transition(result, RunState.SKIPPED)
            return

        parsed_files = self.diff_parser.parse(raw_diff)
        review_context, units = await self.context_assembler.assemble(
            pr_data, parsed_files, self.config.review.exclude_patterns
        )
        self._transition(result, RunState.CONTEXT_READY)

        if not units:
            logger.info("No reviewable files in diff")
            self._transition(result, RunState.SKIPPED)
            return

        self._transition(result, RunState.REVIEWING)
        for index, unit in enumerate(units):
            logger.info(f"Reviewing file {index + 1}/{len(units)}: {unit.path}")
            outcome = await self.review_file(review_context, unit)
            logger.info(f"Left {len(outcome.comments)} comments on {unit.path}")
            result.file_outcomes.append(outcome)
            result.comments.extend(outcome.comments)

        if result.file_outcomes and all(o.failed for o in result.file_outcomes):
            result.error = f"Model review failed for all {len(result.file_outcomes)} files"
            logger.error(result.error)
            self._transition(result, RunState.FAILED)
            return

        if not result.comments:
            logger.info("No review comments to submit")
            self._transition(result, RunState.DONE)
            return

        self._transition(result, RunState.SUBMITTING)
        self.submit(event, review_context, result.comments)
        result.submitted = not self.config.review.dry_run
        self._transition(result, RunState.DONE)

    async def review_file(self, review_context: ReviewContext, unit: FileReviewUnit) -> FileReviewOutcome:
        """
        Review one file. Model and response-format failures are reported on
        the outcome rather than raised.
        """
        outcome = FileReviewOutcome(file_path=unit.path)
        prompt = self.prompt_builder.build(review_context.pr, review_context.repository, unit.file, unit.content)

        try:
            response_text = await self.model_executor.run(self.model_client.invoke, prompt)
        except ModelError as e:
            logger.error(f"Model call failed for {unit.path}: {e}")
            outcome.error = str(e)
            return outcome

        parsed = self.response_parser.parse_result(response_text, unit.path)
        if parsed.error is not None:
            logger.warning(f"Failed to parse AI response for {unit.path}: {parsed.error}")
            return outcome

        anchored, unanchored = self.formatter.split_by_anchor(parsed.comments, unit.file)
        for comment in unanchored:
            logger.warning(f"Comment on {unit.path}:{comment.line_number} is not on a diff line")
        if self.config.review.drop_unanchored_comments:
            comments = anchored
        else:
            comments = [self.formatter.place(c, unit.file) for c in parsed.comments]

        limit = self.config.review.max_comments_per_file
        if limit and len(comments) > limit:
            logger.info(f"Keeping first {limit} of {len(comments)} comments on {unit.path}")
            comments = comments[:limit]

        outcome.comments = comments
        return outcome

    def submit(self, event: PullRequestEvent, review_context: ReviewContext, comments: List[ReviewComment]) -> None:
        """Post all comments as one review; raises HostError on failure."""
        payloads = self.formatter.format_for_github(comments)

        if self.config.review.dry_run:
            for payload in payloads:
                logger.info(f"[dry-run] {payload['path']}:{payload['line']}: {payload['body']}")
            return

        self.github_client.create_review(
            event.owner,
            event.repo,
            event.pull_number,
            payloads,
            commit_id=review_context.pr.head_sha,
            event="COMMENT",
        )
        logger.info(f"Submitted {len(payloads)} review comments")

    @staticmethod
    def _transition(result: ReviewRunResult, state: RunState) -> None:
        logger.debug(f"{result.review_id}: {result.state.value} -> {state.value}")
        result.state = state
