"""
GitHub Action Entry Point

Reads configuration and the triggering pull_request event, runs one
review, and reports the outcome through the process exit status.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config import AppConfig, setup_logging
from .llm.backends import ModelError
from .models.review import PullRequestEvent, PullRequestEventRequest
from .review.orchestrator import ReviewOrchestrator


logger = logging.getLogger(__name__)


def load_event(event_path: str) -> PullRequestEvent:
    """Load a pull_request event from a GitHub event payload file."""
    with open(event_path, 'r', encoding='utf-8') as f:
        payload = json.load(f)

    if 'pull_request' not in payload:
        raise ValueError("This action can only be run on pull requests")

    return PullRequestEventRequest.from_payload(payload).to_event()


def set_failed(message: str) -> None:
    """Report a failure using the Actions workflow command syntax."""
    print(f"::error::{message}")


def set_warning(message: str) -> None:
    print(f"::warning::{message}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Review a pull request with an LLM")
    parser.add_argument('--config', help="YAML configuration file (default: environment variables)")
    parser.add_argument('--event', help="Event payload file (default: $GITHUB_EVENT_PATH)")
    parser.add_argument('--dry-run', action='store_true', help="Log comments instead of posting them")
    args = parser.parse_args(argv)

    try:
        config = AppConfig.from_yaml(args.config) if args.config else AppConfig.from_env()
        if args.dry_run:
            config.review.dry_run = True
        config.validate()
    except (ValueError, FileNotFoundError, TypeError) as e:
        set_failed(str(e))
        return 1

    setup_logging(config.logging)

    event_path = args.event or os.getenv('GITHUB_EVENT_PATH')
    if not event_path:
        set_failed("No event payload: pass --event or set GITHUB_EVENT_PATH")
        return 1

    try:
        event = load_event(event_path)
    except (OSError, ValueError, ValidationError) as e:
        set_failed(f"Unable to read pull request event: {e}")
        return 1

    logger.info(f"PR action {event.action}")
    try:
        orchestrator = ReviewOrchestrator(config)
    except ModelError as e:
        set_failed(str(e))
        return 1

    result = asyncio.run(orchestrator.run(event))

    for path, error in result.file_errors.items():
        set_warning(f"{path}: {error}")

    if not result.succeeded:
        set_failed(result.error or "An unexpected error occurred")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
