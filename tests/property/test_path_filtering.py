"""
Property-based tests for exclusion-pattern filtering.
"""

from unittest.mock import Mock

from hypothesis import given, strategies as st

from ai_code_reviewer.github.client import GitHubClient
from ai_code_reviewer.models.pr_diff import DiffChunk, DiffFile, DiffLine
from ai_code_reviewer.review.context import ContextAssembler, matches_any


SEGMENT = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789_", min_size=1, max_size=8)
EXTENSION = st.sampled_from(["py", "ts", "md", "json", "lock", "go"])


@st.composite
def repo_paths(draw):
    directories = draw(st.lists(SEGMENT, max_size=3))
    name = f"{draw(SEGMENT)}.{draw(EXTENSION)}"
    return "/".join(directories + [name])


def changed_file(path):
    chunk = DiffChunk(
        header="@@ -1,1 +1,1 @@",
        old_start=1,
        old_lines=1,
        new_start=1,
        new_lines=1,
        changes=[DiffLine(1, "-a", 'del'), DiffLine(1, "+b", 'add')],
    )
    return DiffFile(path=path, change_kind='modified', chunks=[chunk])


class TestPathFiltering:
    """Property tests for path exclusion."""

    @given(path=repo_paths(), extension=EXTENSION)
    def test_extension_glob_stays_in_one_directory(self, path, extension):
        """
        Property: `*.ext` excludes only root-level files ending in `.ext`.
        """
        expected = '/' not in path and path.endswith(f".{extension}")
        assert matches_any(path, [f"*.{extension}"]) == expected

    @given(path=repo_paths(), extension=EXTENSION)
    def test_globstar_extension_matches_at_any_depth(self, path, extension):
        """
        Property: `**/*.ext` excludes a path exactly when its name ends in `.ext`.
        """
        assert matches_any(path, [f"**/*.{extension}"]) == path.endswith(f".{extension}")

    @given(path=repo_paths())
    def test_exact_path_always_matches(self, path):
        assert matches_any(path, [path])
        assert matches_any(path, [f"**/{path}"])

    @given(path=repo_paths())
    def test_no_patterns_never_match(self, path):
        assert not matches_any(path, [])
        assert not matches_any(path, ["", "  "])

    @given(
        paths=st.lists(repo_paths(), min_size=1, max_size=15, unique=True),
        patterns=st.lists(st.sampled_from(["*.md", "*.lock", "docs/**", "**/*.json", "src/*"]), max_size=3),
    )
    def test_filter_keeps_unmatched_files_in_order(self, paths, patterns):
        """
        Property: Filtering removes exactly the matching files and preserves diff order.

        Given: Changed files and exclusion patterns
        When: The assembler filters the diff
        Then: Kept files are the non-matching ones, in their original order
        """
        assembler = ContextAssembler(Mock(spec=GitHubClient))
        files = [changed_file(path) for path in paths]

        kept = assembler.filter_files(files, patterns)

        assert [f.path for f in kept] == [p for p in paths if not matches_any(p, patterns)]
