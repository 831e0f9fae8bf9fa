"""
Unit tests for data models.
"""

import pytest
from pydantic import ValidationError

from ai_code_reviewer.models.pr_diff import DEV_NULL, DiffChunk, DiffFile, DiffLine
from ai_code_reviewer.models.review import (
    FileReviewOutcome,
    ModelReviewResponse,
    PullRequestEvent,
    PullRequestEventRequest,
    ReviewComment,
)


def webhook_payload(**overrides):
    payload = {
        "action": "synchronize",
        "number": 12,
        "before": "aaa111",
        "after": "bbb222",
        "pull_request": {"number": 12},
        "repository": {"name": "demo", "owner": {"login": "octo"}},
    }
    payload.update(overrides)
    return payload


class TestDiffModels:
    """Test diff data models."""

    def test_diff_line_kind_validation(self):
        with pytest.raises(ValueError):
            DiffLine(line_number=1, text="+x", kind="changed")

    def test_diff_line_is_change(self):
        assert DiffLine(1, "+x", "add").is_change
        assert DiffLine(1, "-x", "del").is_change
        assert not DiffLine(1, " x").is_change

    def test_chunk_validation(self):
        with pytest.raises(ValueError):
            DiffChunk(header="@@", old_start=-1, old_lines=1, new_start=1, new_lines=1)

    def test_file_counts_and_anchors(self):
        chunk = DiffChunk(
            header="@@ -3,2 +3,2 @@",
            old_start=3,
            old_lines=2,
            new_start=3,
            new_lines=2,
            changes=[DiffLine(3, " a"), DiffLine(4, "-b", "del"), DiffLine(4, "+c", "add")],
        )
        diff_file = DiffFile(path="x.py", change_kind="modified", chunks=[chunk])

        assert diff_file.additions == 1
        assert diff_file.deletions == 1
        assert diff_file.anchor_lines() == {3, 4}
        assert diff_file.left_anchor_lines() == {4}
        assert diff_file.is_reviewable
        assert diff_file.has_target

    def test_removed_file_has_no_target(self):
        diff_file = DiffFile(path=DEV_NULL, change_kind="removed", old_path="gone.py")

        assert not diff_file.has_target
        assert not diff_file.is_reviewable

    def test_invalid_change_kind(self):
        with pytest.raises(ValueError):
            DiffFile(path="x.py", change_kind="copied")


class TestReviewModels:
    """Test review data models."""

    def test_event_validation(self):
        with pytest.raises(ValueError):
            PullRequestEvent(owner="", repo="demo", pull_number=1, action="opened")
        with pytest.raises(ValueError):
            PullRequestEvent(owner="octo", repo="demo", pull_number=0, action="opened")

    @pytest.mark.parametrize("action, supported", [
        ("opened", True),
        ("reopened", True),
        ("synchronize", True),
        ("closed", False),
        ("edited", False),
    ])
    def test_event_supported_actions(self, action, supported):
        event = PullRequestEvent(owner="octo", repo="demo", pull_number=1, action=action)

        assert event.is_supported is supported
        assert event.repository == "octo/demo"

    def test_review_comment_requires_path(self):
        with pytest.raises(ValueError):
            ReviewComment(file_path="", line_number=1, body="x")

    def test_review_comment_side(self):
        assert ReviewComment(file_path="a.py", line_number=1, body="x").side == "RIGHT"
        with pytest.raises(ValueError):
            ReviewComment(file_path="a.py", line_number=1, body="x", side="BOTH")

    def test_file_outcome_failed(self):
        assert not FileReviewOutcome(file_path="a.py").failed
        assert FileReviewOutcome(file_path="a.py", error="timeout").failed

    def test_model_review_response(self):
        response = ModelReviewResponse.model_validate({
            "comments": [{"diffIndex": 1, "lineNumber": 5, "comment": "x"}],
        })

        assert response.comments[0].lineNumber == 5
        assert response.comments[0].diffIndex == 1

    def test_model_review_response_requires_comments(self):
        with pytest.raises(ValidationError):
            ModelReviewResponse.model_validate({"review": []})


class TestPullRequestEventRequest:
    """Test webhook payload validation."""

    def test_from_payload(self):
        event = PullRequestEventRequest.from_payload(webhook_payload()).to_event()

        assert event == PullRequestEvent(
            owner="octo",
            repo="demo",
            pull_number=12,
            action="synchronize",
            before_sha="aaa111",
            after_sha="bbb222",
        )

    def test_opened_payload_has_no_push_range(self):
        payload = webhook_payload(action="opened")
        del payload["before"]
        del payload["after"]

        event = PullRequestEventRequest.from_payload(payload).to_event()

        assert event.before_sha is None
        assert event.after_sha is None

    def test_missing_repository(self):
        with pytest.raises(ValidationError):
            PullRequestEventRequest.from_payload(webhook_payload(repository={}))

    def test_missing_number(self):
        with pytest.raises(ValidationError):
            PullRequestEventRequest.from_payload(webhook_payload(number=None, pull_request={}))
