"""
Review Data Models

코드 리뷰 실행 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator

from .pr_diff import DiffFile


SUPPORTED_ACTIONS = {'opened', 'reopened', 'synchronize'}


@dataclass(frozen=True)
class PullRequestEvent:
    """리뷰를 트리거한 PR 이벤트"""
    owner: str
    repo: str
    pull_number: int
    action: str
    before_sha: Optional[str] = None
    after_sha: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if not self.owner or not self.repo:
            raise ValueError("Owner and repo are required")
        if self.pull_number <= 0:
            raise ValueError("Pull number must be positive")

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def is_supported(self) -> bool:
        """리뷰 대상 이벤트인지 확인"""
        return self.action in SUPPORTED_ACTIONS


@dataclass(frozen=True)
class PullRequestContext:
    """PR 메타데이터"""
    title: str
    description: str
    changed_files: Tuple[str, ...]
    head_sha: str
    base_ref: str


@dataclass(frozen=True)
class RepositoryContext:
    """저장소 메타데이터 (README, manifest)"""
    readme: str = ""
    manifest: str = ""
    manifest_path: str = ""


@dataclass(frozen=True)
class ReviewContext:
    """한 번의 실행 동안 공유되는 리뷰 컨텍스트"""
    pr: PullRequestContext
    repository: RepositoryContext


@dataclass
class FileReviewUnit:
    """파일 단위 리뷰 입력"""
    file: DiffFile
    content: str

    @property
    def path(self) -> str:
        return self.file.path


@dataclass(frozen=True)
class ReviewComment:
    """개별 리뷰 코멘트"""
    file_path: str
    line_number: int
    body: str
    side: str = "RIGHT"  # 'RIGHT' (새 버전) or 'LEFT' (삭제된 라인)

    def __post_init__(self):
        """데이터 검증"""
        if not self.file_path:
            raise ValueError("File path cannot be empty")
        if self.side not in ('RIGHT', 'LEFT'):
            raise ValueError(f"Invalid side: {self.side}")


@dataclass
class FileReviewOutcome:
    """파일 하나의 리뷰 결과"""
    file_path: str
    comments: List[ReviewComment] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


# Pydantic models for external JSON validation
class ModelComment(BaseModel):
    """LLM 응답의 개별 코멘트"""
    diffIndex: Optional[int] = None
    lineNumber: int
    comment: str


class ModelReviewResponse(BaseModel):
    """LLM 응답 전체 형식"""
    comments: List[ModelComment]


class PullRequestEventRequest(BaseModel):
    """Webhook/Action 이벤트 페이로드의 필요한 부분"""
    action: str
    number: int = Field(gt=0)
    owner: str
    repo: str
    before: Optional[str] = None
    after: Optional[str] = None

    @field_validator('owner', 'repo')
    @classmethod
    def validate_non_empty(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()

    @classmethod
    def from_payload(cls, payload: dict) -> "PullRequestEventRequest":
        """GitHub pull_request 이벤트 페이로드에서 생성"""
        pull_request = payload.get('pull_request') or {}
        repository = payload.get('repository') or {}
        return cls(
            action=payload.get('action', ''),
            number=pull_request.get('number') or payload.get('number') or 0,
            owner=(repository.get('owner') or {}).get('login', ''),
            repo=repository.get('name', ''),
            before=payload.get('before'),
            after=payload.get('after'),
        )

    def to_event(self) -> PullRequestEvent:
        return PullRequestEvent(
            owner=self.owner,
            repo=self.repo,
            pull_number=self.number,
            action=self.action,
            before_sha=self.before,
            after_sha=self.after,
        )
