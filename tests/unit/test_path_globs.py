"""
Unit tests for exclusion glob matching.
"""

import pytest

from ai_code_reviewer.review.context import matches_any


class TestMatchesAny:
    """Unit tests for matches_any."""

    @pytest.mark.parametrize("path, pattern, expected", [
        ("src/app.py", "src/*.py", True),
        ("src/sub/app.py", "src/*.py", False),
        ("README.md", "*.md", True),
        ("docs/guide.md", "*.md", False),
        ("docs/guide.md", "**/*.md", True),
        ("README.md", "**/*.md", True),
        ("src/deep/er/mod.py", "src/**", True),
        ("lib/src/mod.py", "src/**", False),
        ("src/a/b/test_x.py", "src/**/test_*.py", True),
        ("src/test_x.py", "src/**/test_*.py", True),
        ("yarn.lock", "yarn.lock", True),
        ("web/yarn.lock", "yarn.lock", False),
        ("a1.txt", "a?.txt", True),
        ("a/1.txt", "a?.txt", False),
        ("v2.json", "v[0-9].json", True),
        ("vx.json", "v[0-9].json", False),
    ])
    def test_shell_glob_semantics(self, path, pattern, expected):
        assert matches_any(path, [pattern]) is expected

    @pytest.mark.parametrize("path, pattern, expected", [
        (".github/workflows/ci.yml", "**/*.yml", False),
        (".github/workflows/ci.yml", ".github/**", True),
        (".env", "*", False),
        (".env", ".env*", True),
    ])
    def test_wildcards_skip_dot_names(self, path, pattern, expected):
        assert matches_any(path, [pattern]) is expected

    def test_any_pattern_matches(self):
        assert matches_any("dist/app.js", ["*.md", "dist/**"])
        assert not matches_any("src/app.js", ["*.md", "dist/**"])
