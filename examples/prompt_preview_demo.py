#!/usr/bin/env python3
"""
Prompt Preview Demo

Fetches a pull request diff, parses it, assembles the review context and
prints the prompt each file would be reviewed with. No model is called and
nothing is posted.

Usage:
    python examples/prompt_preview_demo.py <owner> <repo> <pr_number>

Example:
    GITHUB_TOKEN=... python examples/prompt_preview_demo.py octo demo 42
"""

import asyncio
import logging
import os
import sys

from ai_code_reviewer.config import AppConfig
from ai_code_reviewer.github import DiffResolver, GitHubClient, HostError, UnifiedDiffParser
from ai_code_reviewer.llm import PromptBuilder
from ai_code_reviewer.models import PullRequestEvent
from ai_code_reviewer.review import ContextAssembler


def setup_logging():
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


async def preview(config: AppConfig, event: PullRequestEvent) -> None:
    client = GitHubClient(config.github.token, base_url=config.github.api_base_url)

    pr_data = client.get_pull_request(event.owner, event.repo, event.pull_number)
    raw_diff = DiffResolver(client).resolve(event, pr_data)
    parsed_files = UnifiedDiffParser().parse(raw_diff)

    print(f"\n📋 {pr_data.get('title', 'N/A')}")
    print(f"   Files in diff: {len(parsed_files)}")
    for diff_file in parsed_files:
        print(f"   - {diff_file.path} ({diff_file.change_kind}, +{diff_file.additions}/-{diff_file.deletions})")

    assembler = ContextAssembler(
        client,
        manifest_paths=config.review.manifest_paths,
        max_file_bytes=config.github.max_file_bytes,
    )
    review_context, units = await assembler.assemble(pr_data, parsed_files, config.review.exclude_patterns)

    builder = PromptBuilder(config.review.custom_instructions)
    for unit in units:
        prompt = builder.build(review_context.pr, review_context.repository, unit.file, unit.content)
        print(f"\n===== {unit.path} ({len(prompt)} chars) =====")
        print(prompt)


def main():
    """Main demo function."""
    setup_logging()
    logger = logging.getLogger(__name__)

    if len(sys.argv) != 4:
        print("Usage: python prompt_preview_demo.py <owner> <repo> <pr_number>")
        sys.exit(1)

    owner, repo = sys.argv[1], sys.argv[2]
    try:
        pr_number = int(sys.argv[3])
    except ValueError:
        print("Error: PR number must be an integer")
        sys.exit(1)

    config = AppConfig.from_env()
    if not config.github.token:
        print("Error: GitHub token not found. Set GITHUB_TOKEN environment variable.")
        sys.exit(1)

    event = PullRequestEvent(owner=owner, repo=repo, pull_number=pr_number, action=os.getenv("PR_ACTION", "opened"))

    try:
        asyncio.run(preview(config, event))
    except HostError as e:
        logger.error(f"GitHub API error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
