"""
Prompt Builder

Builds the per-file review prompt from diff chunks, full file content,
PR and repository context, and operator-supplied custom instructions.
"""

import logging
from typing import List

from ..models.pr_diff import DiffFile
from ..models.review import PullRequestContext, RepositoryContext


logger = logging.getLogger(__name__)


POLICY_INSTRUCTIONS = [
    "Focus on code quality, best practices, and potential issues.",
    "Only review the changed code in the diffs above, not unchanged code.",
    "Do not suggest adding comments to the code.",
    "Do not comment on style or formatting.",
    "Do not give positive comments or compliments, only provide feedback when there is something to improve.",
    "Use Github markdown format for the comments.",
]

OUTPUT_FORMAT = """Provide a code review in JSON format:
{
  "comments": [
    {
      "diffIndex": <diff_index>,
      "lineNumber": <line_number>,
      "comment": "<review comment>"
    }
  ]
}
If there is nothing to improve, return {"comments": []}."""


def parse_custom_instructions(custom_instructions: str) -> List[str]:
    """
    Split a comma-separated instruction string into trimmed fragments.

    Instructions that themselves contain commas are split as well.
    """
    if not custom_instructions:
        return []
    return [part.strip() for part in custom_instructions.split(',') if part.strip()]


class PromptBuilder:
    """
    Builds review prompts for a single file.

    ``build`` is a pure function of its arguments and the custom
    instructions given at construction, so identical inputs always produce
    byte-identical prompts.
    """

    def __init__(self, custom_instructions: str = ""):
        """
        Initialize prompt builder.

        Args:
            custom_instructions: Comma-separated extra review directives
        """
        self.custom_instructions = parse_custom_instructions(custom_instructions)

    def build(
        self,
        pr_context: PullRequestContext,
        repo_context: RepositoryContext,
        file: DiffFile,
        content: str
    ) -> str:
        """
        Build the complete review prompt for one file.

        Args:
            pr_context: PR title, description and changed files
            repo_context: README and manifest of the repository
            file: Parsed diff of the file under review
            content: Full file content at the PR head

        Returns:
            Prompt text
        """
        logger.debug(f"Building review prompt for {file.path}")

        sections = [
            f'Review the following code diffs in the file "{file.path}":',
            f"PR Title: {pr_context.title}\nPR Description: {pr_context.description}",
        ]

        other_files = [path for path in pr_context.changed_files if path != file.path]
        if other_files:
            sections.append("Other files changed in this PR:\n" + "\n".join(f"- {path}" for path in other_files))

        if repo_context.readme:
            sections.append(f"Repository README:\n---\n{repo_context.readme}\n---")

        if repo_context.manifest:
            sections.append(f"Project manifest ({repo_context.manifest_path}):\n---\n{repo_context.manifest}\n---")

        sections.append(f"Git diffs to review:\n---\n{self.format_diff(file)}\n---")
        sections.append(f"Full file content:\n---\n{content}\n---")
        sections.append(OUTPUT_FORMAT)
        sections.append(self._format_instructions())

        return "\n\n".join(sections)

    def format_diff(self, file: DiffFile) -> str:
        """Render chunks as `Diff <n>:` blocks of `<lineNumber> <text>` lines."""
        blocks = []
        for index, chunk in enumerate(file.chunks, 1):
            lines = [f"Diff {index}:", chunk.header]
            lines.extend(f"{change.line_number} {change.text}" for change in chunk.changes)
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    def _format_instructions(self) -> str:
        bullets = POLICY_INSTRUCTIONS + self.custom_instructions
        return "Specifically your instructions are:\n" + "\n".join(f"- {item}" for item in bullets)
