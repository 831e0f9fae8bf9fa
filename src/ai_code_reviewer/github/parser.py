"""
Unified Diff Parser

Parses unified diff text (as returned by the GitHub diff media type or
`git diff`) into structured per-file chunks with line anchors.
Independent of the host that produced the diff.
"""

import re
import logging
from typing import List, Optional, Tuple

from ..models.pr_diff import DiffFile, DiffChunk, DiffLine, DEV_NULL


logger = logging.getLogger(__name__)

CHUNK_HEADER_PATTERN = re.compile(r'^@@+\s*-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s*@@+(.*)$')


class DiffParseError(ValueError):
    """Raised when a file section of a diff cannot be parsed."""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class _ChunkCounter:
    """Tracks how many old/new lines of the current chunk are still expected."""

    def __init__(self):
        self.old_remaining = 0
        self.new_remaining = 0

    @property
    def active(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0

    def start(self, header: str) -> bool:
        header_match = CHUNK_HEADER_PATTERN.match(header)
        if not header_match:
            self.old_remaining = self.new_remaining = 0
            return False
        self.old_remaining = int(header_match.group(2) or 1)
        self.new_remaining = int(header_match.group(4) or 1)
        return True

    def consume(self, line: str) -> None:
        if line.startswith('+'):
            self.new_remaining -= 1
        elif line.startswith('-'):
            self.old_remaining -= 1
        elif line.startswith('\\'):
            return
        else:
            self.old_remaining -= 1
            self.new_remaining -= 1


class UnifiedDiffParser:
    """
    Parser for unified diff text.

    Produces one DiffFile per file section. Line anchors follow the
    convention host review APIs expect: additions and context lines carry
    their new-file line number, deletions carry their old-file line number.
    """

    def __init__(self):
        """Initialize unified diff parser."""
        self.git_header_pattern = re.compile(r'^diff --git "?a/(.+?)"? "?b/(.+?)"?$')
        self.binary_file_pattern = re.compile(r'^Binary files? .* differ')

    def parse(self, raw_diff: Optional[str]) -> List[DiffFile]:
        """
        Parse unified diff text into DiffFile objects.

        Malformed file sections are logged and skipped; the rest of the
        diff is still returned.

        Args:
            raw_diff: Unified diff text

        Returns:
            List of DiffFile objects in diff order
        """
        if not raw_diff:
            return []

        files = []
        for section in self._split_sections(self._split_lines(raw_diff)):
            try:
                files.append(self._parse_section(section))
            except DiffParseError as e:
                logger.warning(f"Skipping unparseable diff section for {e.path or 'unknown file'}: {e}")

        logger.info(f"Parsed diff: {len(files)} files")
        return files

    @staticmethod
    def _split_lines(raw_diff: str) -> List[str]:
        """
        Split on LF only. Form feeds and Unicode line separators are line
        content in a diff, and a CRLF line keeps everything but its final CR.
        """
        lines = raw_diff.split('\n')
        if lines and lines[-1] == '':
            lines.pop()
        return [line[:-1] if line.endswith('\r') else line for line in lines]

    def _split_sections(self, lines: List[str]) -> List[List[str]]:
        """Split diff lines into per-file sections."""
        sections = []
        current = None
        counter = _ChunkCounter()

        for index, line in enumerate(lines):
            if line.startswith('diff --git '):
                # Chunk lines always start with a marker, so this ends a short chunk too
                counter = _ChunkCounter()
                current = [line]
                sections.append(current)
                continue

            if counter.active:
                current.append(line)
                counter.consume(line)
                continue

            starts_plain_file = (
                line.startswith('--- ')
                and index + 1 < len(lines)
                and lines[index + 1].startswith('+++ ')
                and (current is None or any(l.startswith('@@') for l in current))
            )

            if starts_plain_file:
                current = [line]
                sections.append(current)
                continue

            if current is None:
                # Preamble such as commit messages in patch output
                continue

            current.append(line)
            if line.startswith('@@'):
                counter.start(line)
        return sections

    def _parse_section(self, lines: List[str]) -> DiffFile:
        """Parse one file section."""
        old_path, new_path = self._paths_from_git_header(lines[0])
        change_kind = 'modified'
        is_binary = False
        chunks = []
        chunk = None
        counter = _ChunkCounter()
        old_line = new_line = 0

        for line in lines:
            if counter.active:
                if line.startswith('+'):
                    chunk.changes.append(DiffLine(line_number=new_line, text=line, kind='add'))
                    new_line += 1
                elif line.startswith('-'):
                    chunk.changes.append(DiffLine(line_number=old_line, text=line, kind='del'))
                    old_line += 1
                elif line.startswith(' ') or line == '':
                    chunk.changes.append(DiffLine(line_number=new_line, text=line or ' ', kind='normal'))
                    old_line += 1
                    new_line += 1
                elif not line.startswith('\\'):
                    raise DiffParseError(f"Unexpected line in chunk: {line[:80]!r}", path=new_path or old_path)
                counter.consume(line)
                continue

            if line.startswith('@@'):
                if not counter.start(line):
                    raise DiffParseError(f"Malformed chunk header: {line[:80]!r}", path=new_path or old_path)
                chunk, old_line, new_line = self._start_chunk(line)
                chunks.append(chunk)
            elif line.startswith('\\') or not line.strip():
                # "\ No newline at end of file" after a chunk, or padding
                continue
            elif chunks:
                raise DiffParseError(f"Unexpected line after chunk: {line[:80]!r}", path=new_path or old_path)
            elif line.startswith('new file mode'):
                change_kind = 'added'
            elif line.startswith('deleted file mode'):
                change_kind = 'removed'
            elif line.startswith('rename from '):
                old_path = line[len('rename from '):]
            elif line.startswith('rename to '):
                new_path = line[len('rename to '):]
            elif line.startswith('--- '):
                old_path = self._strip_prefix(line[4:], 'a/')
            elif line.startswith('+++ '):
                new_path = self._strip_prefix(line[4:], 'b/')
            elif self.binary_file_pattern.match(line):
                is_binary = True

        if not new_path and not old_path:
            raise DiffParseError("Missing file path in diff header")

        if old_path == DEV_NULL:
            change_kind = 'added'
        if new_path == DEV_NULL:
            change_kind = 'removed'
        if change_kind == 'removed':
            new_path = DEV_NULL

        return DiffFile(
            path=new_path or '',
            change_kind=change_kind,
            chunks=chunks,
            old_path=old_path,
            is_binary=is_binary,
        )

    @staticmethod
    def _start_chunk(line: str) -> Tuple[DiffChunk, int, int]:
        """Create a DiffChunk from a validated `@@` header line."""
        header_match = CHUNK_HEADER_PATTERN.match(line)
        old_start = int(header_match.group(1))
        new_start = int(header_match.group(3))

        chunk = DiffChunk(
            header=line,
            old_start=old_start,
            old_lines=int(header_match.group(2) or 1),
            new_start=new_start,
            new_lines=int(header_match.group(4) or 1),
        )
        return chunk, old_start, new_start

    def _paths_from_git_header(self, line: str) -> Tuple[Optional[str], Optional[str]]:
        """Extract old and new paths from a `diff --git` line."""
        header_match = self.git_header_pattern.match(line)
        if not header_match:
            return None, None
        return header_match.group(1), header_match.group(2)

    @staticmethod
    def _strip_prefix(path: str, prefix: str) -> str:
        path = path.split('\t')[0].strip().strip('"')
        if path == DEV_NULL:
            return path
        return path[len(prefix):] if path.startswith(prefix) else path
