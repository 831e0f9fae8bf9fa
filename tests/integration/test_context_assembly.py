"""
Integration tests for context assembly: diff filtering, concurrent content
fetches and repository metadata.
"""

import asyncio
import threading
import time
from unittest.mock import Mock

from ai_code_reviewer.github.client import GitHubClient, HostError
from ai_code_reviewer.github.parser import UnifiedDiffParser
from ai_code_reviewer.review.context import ContextAssembler


def fake_github(contents, delay=0.0):
    """GitHub client whose content fetches sleep and record peak concurrency."""
    github = Mock(spec=GitHubClient)
    lock = threading.Lock()
    github.active = 0
    github.peak = 0

    def get_file_content(owner, repo, path, ref, max_bytes=None):
        with lock:
            github.active += 1
            github.peak = max(github.peak, github.active)
        try:
            time.sleep(delay)
            value = contents.get(path)
            if isinstance(value, Exception):
                raise value
            return value
        finally:
            with lock:
                github.active -= 1

    github.get_file_content.side_effect = get_file_content
    return github


def many_file_diff(count):
    sections = []
    for index in range(count):
        path = f"pkg/mod{index}.py"
        sections.extend([
            f"diff --git a/{path} b/{path}",
            f"--- a/{path}",
            f"+++ b/{path}",
            "@@ -1,1 +1,1 @@",
            "-old",
            "+new",
        ])
    return "\n".join(sections) + "\n"


class TestContextAssembly:
    """Integration tests for ContextAssembler."""

    def test_units_and_pr_context(self, pr_data, mixed_diff):
        github = fake_github({"src/app.py": "app", "new.txt": "hello\nworld\n", "README.md": "# Demo"})
        assembler = ContextAssembler(github, manifest_paths=["package.json"])
        files = UnifiedDiffParser().parse(mixed_diff)

        context, units = asyncio.run(assembler.assemble(pr_data, files))

        assert [u.path for u in units] == ["src/app.py", "new.txt"]
        assert units[0].content == "app"
        assert context.pr.title == "Add greeting"
        assert context.pr.description == "Prints a greeting on start."
        assert context.pr.head_sha == "headsha1234567"
        assert context.pr.base_ref == "main"
        assert context.pr.changed_files == ("src/app.py", "new.txt", "b.txt")
        assert context.repository.readme == "# Demo"
        assert context.repository.manifest == ""

    def test_contents_fetched_at_head_sha(self, pr_data, two_file_diff):
        github = fake_github({"src/app.py": "a", "src/util.py": "u"})
        assembler = ContextAssembler(github, max_file_bytes=2048)

        asyncio.run(assembler.assemble(pr_data, UnifiedDiffParser().parse(two_file_diff)))

        github.get_file_content.assert_any_call("octo", "demo", "src/app.py", "headsha1234567", max_bytes=2048)
        github.get_file_content.assert_any_call("octo", "demo", "README.md", "main", max_bytes=2048)

    def test_missing_description_becomes_empty(self, pr_data, two_file_diff):
        pr_data['body'] = None
        github = fake_github({"src/app.py": "a", "src/util.py": "u"})

        context, _ = asyncio.run(ContextAssembler(github).assemble(pr_data, UnifiedDiffParser().parse(two_file_diff)))

        assert context.pr.description == ""

    def test_fetch_errors_skip_the_file(self, pr_data, two_file_diff):
        github = fake_github({
            "src/app.py": HostError("Server Error", status_code=500),
            "src/util.py": "u",
        })

        _, units = asyncio.run(ContextAssembler(github).assemble(pr_data, UnifiedDiffParser().parse(two_file_diff)))

        assert [u.path for u in units] == ["src/util.py"]

    def test_concurrent_fetches_are_bounded_and_ordered(self, pr_data):
        paths = [f"pkg/mod{index}.py" for index in range(10)]
        github = fake_github({path: path for path in paths}, delay=0.02)
        assembler = ContextAssembler(github, max_concurrent_fetches=3)

        _, units = asyncio.run(assembler.assemble(pr_data, UnifiedDiffParser().parse(many_file_diff(10))))

        assert [u.path for u in units] == paths
        assert [u.content for u in units] == paths
        assert 1 < github.peak <= 3

    def test_first_available_manifest_is_used(self):
        github = fake_github({"README.md": "readme", "pyproject.toml": "[project]", "go.mod": "module x"})
        assembler = ContextAssembler(github, manifest_paths=["package.json", "pyproject.toml", "go.mod"])

        repo_context = assembler.fetch_repository_context("octo", "demo", "main")

        assert repo_context.manifest == "[project]"
        assert repo_context.manifest_path == "pyproject.toml"

    def test_repository_context_is_truncated(self):
        github = fake_github({"README.md": "x" * 50})
        assembler = ContextAssembler(github, manifest_paths=[], max_repo_context_chars=10)

        repo_context = assembler.fetch_repository_context("octo", "demo", "main")

        assert repo_context.readme == "x" * 10 + "\n... (truncated)"
        assert repo_context.manifest_path == ""
