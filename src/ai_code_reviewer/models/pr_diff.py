"""
PR Diff Data Models

Unified diff 파싱 결과 데이터 모델들
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set


DEV_NULL = "/dev/null"

CHANGE_KINDS = {'added', 'modified', 'removed'}
LINE_KINDS = {'add', 'del', 'normal'}


@dataclass(frozen=True)
class DiffLine:
    """diff의 개별 라인"""
    line_number: int
    text: str
    kind: str = 'normal'  # 'add', 'del', 'normal'

    def __post_init__(self):
        """데이터 검증"""
        if self.kind not in LINE_KINDS:
            raise ValueError(f"Invalid line kind: {self.kind}")
        if self.line_number < 0:
            raise ValueError("Line number must be non-negative")

    @property
    def is_change(self) -> bool:
        """추가/삭제 라인 여부"""
        return self.kind != 'normal'


@dataclass
class DiffChunk:
    """`@@` 헤더로 구분되는 diff 청크"""
    header: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    changes: List[DiffLine] = field(default_factory=list)

    def __post_init__(self):
        """데이터 검증"""
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_lines < 0 or self.new_lines < 0:
            raise ValueError("Line counts must be non-negative")

    @property
    def added_lines(self) -> List[DiffLine]:
        return [c for c in self.changes if c.kind == 'add']

    @property
    def removed_lines(self) -> List[DiffLine]:
        return [c for c in self.changes if c.kind == 'del']


@dataclass
class DiffFile:
    """파일 단위 변경사항"""
    path: str
    change_kind: str  # 'added', 'modified', 'removed'
    chunks: List[DiffChunk] = field(default_factory=list)
    old_path: Optional[str] = None
    is_binary: bool = False

    def __post_init__(self):
        """데이터 검증"""
        if self.change_kind not in CHANGE_KINDS:
            raise ValueError(f"Invalid change_kind: {self.change_kind}")

    @property
    def is_reviewable(self) -> bool:
        """리뷰할 내용이 있는지 확인 (청크가 없는 rename 등은 제외)"""
        return bool(self.chunks)

    @property
    def has_target(self) -> bool:
        """새 버전의 경로가 존재하는지 확인"""
        return bool(self.path) and self.path != DEV_NULL

    @property
    def additions(self) -> int:
        return sum(len(chunk.added_lines) for chunk in self.chunks)

    @property
    def deletions(self) -> int:
        return sum(len(chunk.removed_lines) for chunk in self.chunks)

    def anchor_lines(self) -> Set[int]:
        """새 버전(RIGHT) 기준으로 코멘트를 달 수 있는 라인 번호 집합"""
        return {
            change.line_number
            for chunk in self.chunks
            for change in chunk.changes
            if change.kind != 'del'
        }

    def left_anchor_lines(self) -> Set[int]:
        """삭제된 라인(LEFT)의 이전 버전 라인 번호 집합"""
        return {
            change.line_number
            for chunk in self.chunks
            for change in chunk.changes
            if change.kind == 'del'
        }
