"""
Shared fixtures: sample diffs and GitHub API data.
"""

import pytest


APP_DIFF = "\n".join([
    "diff --git a/src/app.py b/src/app.py",
    "index 83db48f..bf269f4 100644",
    "--- a/src/app.py",
    "+++ b/src/app.py",
    "@@ -1,4 +1,6 @@",
    " import os",
    "+import sys",
    " ",
    " def main():",
    "-    pass",
    "+    print(\"hi\")",
    "+    return 0",
    "@@ -20,3 +22,3 @@ def helper():",
    "     x = 1",
    "-    y = 2",
    "+    y = 3",
    "     return x + y",
])

UTIL_DIFF = "\n".join([
    "diff --git a/src/util.py b/src/util.py",
    "index 1234567..89abcde 100644",
    "--- a/src/util.py",
    "+++ b/src/util.py",
    "@@ -10,2 +10,3 @@ def util():",
    "     value = compute()",
    "+    value = value or 0",
    "     return value",
])

DELETED_DIFF = "\n".join([
    "diff --git a/docs/old.md b/docs/old.md",
    "deleted file mode 100644",
    "index 1111111..0000000",
    "--- a/docs/old.md",
    "+++ /dev/null",
    "@@ -1,2 +0,0 @@",
    "-# Old",
    "-text",
])

ADDED_DIFF = "\n".join([
    "diff --git a/new.txt b/new.txt",
    "new file mode 100644",
    "index 0000000..2222222",
    "--- /dev/null",
    "+++ b/new.txt",
    "@@ -0,0 +1,2 @@",
    "+hello",
    "+world",
])

RENAME_DIFF = "\n".join([
    "diff --git a/a.txt b/b.txt",
    "similarity index 100%",
    "rename from a.txt",
    "rename to b.txt",
])


@pytest.fixture
def two_file_diff():
    """Two files, three chunks in total."""
    return APP_DIFF + "\n" + UTIL_DIFF + "\n"


@pytest.fixture
def mixed_diff():
    return "\n".join([APP_DIFF, DELETED_DIFF, ADDED_DIFF, RENAME_DIFF]) + "\n"


@pytest.fixture
def pr_data():
    return {
        'number': 7,
        'title': 'Add greeting',
        'body': 'Prints a greeting on start.',
        'head': {'sha': 'headsha1234567'},
        'base': {
            'sha': 'basesha7654321',
            'ref': 'main',
            'repo': {'full_name': 'octo/demo'},
        },
    }


@pytest.fixture
def util_diff():
    return UTIL_DIFF + "\n"
