"""
Unit tests for the GitHub Action entry point.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from ai_code_reviewer import action
from ai_code_reviewer.models.review import FileReviewOutcome
from ai_code_reviewer.review.orchestrator import ReviewRunResult, RunState


@pytest.fixture
def action_env(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_API_MODEL", "gpt-4o")
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
    return monkeypatch


@pytest.fixture
def event_file(tmp_path):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({
        "action": "opened",
        "number": 3,
        "pull_request": {"number": 3},
        "repository": {"name": "demo", "owner": {"login": "octo"}},
    }), encoding='utf-8')
    return path


def run_result(state, error=None, file_outcomes=()):
    return ReviewRunResult(
        review_id="r", repository="octo/demo", pull_number=3, state=state, error=error,
        file_outcomes=list(file_outcomes),
    )


class TestAction:
    """Unit tests for the action entry point."""

    def test_load_event(self, event_file):
        event = action.load_event(str(event_file))

        assert event.repository == "octo/demo"
        assert event.pull_number == 3
        assert event.action == "opened"

    def test_load_event_rejects_non_pull_request(self, tmp_path):
        path = tmp_path / "push.json"
        path.write_text(json.dumps({"ref": "refs/heads/main"}), encoding='utf-8')

        with pytest.raises(ValueError):
            action.load_event(str(path))

    def test_successful_run(self, action_env, event_file):
        action_env.setenv("GITHUB_EVENT_PATH", str(event_file))

        with patch.object(action, 'ReviewOrchestrator') as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=run_result(RunState.DONE))
            exit_code = action.main([])

        assert exit_code == 0
        config = orchestrator_cls.call_args.args[0]
        assert config.github.token == "ghp_test"
        assert not config.review.dry_run

    def test_dry_run_flag(self, action_env, event_file):
        with patch.object(action, 'ReviewOrchestrator') as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=run_result(RunState.DONE))
            action.main(["--event", str(event_file), "--dry-run"])

        assert orchestrator_cls.call_args.args[0].review.dry_run

    def test_failed_run_sets_failure(self, action_env, event_file, capsys):
        with patch.object(action, 'ReviewOrchestrator') as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(
                return_value=run_result(RunState.FAILED, "GitHub API error: Not Found")
            )
            exit_code = action.main(["--event", str(event_file)])

        assert exit_code == 1
        assert "::error::GitHub API error: Not Found" in capsys.readouterr().out

    def test_file_errors_are_warnings(self, action_env, event_file, capsys):
        outcomes = [
            FileReviewOutcome(file_path="src/app.py", error="provider unavailable"),
            FileReviewOutcome(file_path="src/util.py"),
        ]
        with patch.object(action, 'ReviewOrchestrator') as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=run_result(RunState.DONE, file_outcomes=outcomes))
            exit_code = action.main(["--event", str(event_file)])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "::warning::src/app.py: provider unavailable" in out
        assert "::error::" not in out

    def test_every_file_failing_fails_action(self, action_env, event_file, capsys):
        outcomes = [
            FileReviewOutcome(file_path="src/app.py", error="timeout"),
            FileReviewOutcome(file_path="src/util.py", error="timeout"),
        ]
        result = run_result(RunState.FAILED, "Model review failed for all 2 files", outcomes)
        with patch.object(action, 'ReviewOrchestrator') as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=result)
            exit_code = action.main(["--event", str(event_file)])

        out = capsys.readouterr().out
        assert exit_code == 1
        assert out.count("::warning::") == 2
        assert "::error::Model review failed for all 2 files" in out

    def test_missing_configuration(self, monkeypatch, event_file, capsys):
        for name in ("GITHUB_TOKEN", "INPUT_GITHUB_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        assert action.main(["--event", str(event_file)]) == 1
        assert "GitHub token is required" in capsys.readouterr().out

    def test_missing_event_path(self, action_env, capsys):
        assert action.main([]) == 1
        assert "::error::" in capsys.readouterr().out
