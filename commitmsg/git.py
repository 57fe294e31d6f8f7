"""Git helpers for reading staged changes.

Contains:
- GitError / NoStagedChangesError: Git-related exceptions
- _run_git_command: Run a git command and return its output
- get_staged_diff: Get the staged diff of a repository, truncated if necessary
"""

import subprocess
from pathlib import Path
from typing import Optional

from commitmsg.exceptions import CommitMsgError


class GitError(CommitMsgError):
    """Custom exception for git-related errors."""

    pass


class NoStagedChangesError(GitError):
    """Raised when there are no staged changes."""

    pass


def _run_git_command(args: list[str], repo_root: Optional[Path] = None) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        repo_root: Repository to run in. Defaults to the current directory.

    Returns:
        The stdout of the git command.

    Raises:
        GitError: If the command fails.
    """
    command = ["git"]
    if repo_root is not None:
        command += ["-C", str(repo_root)]
    try:
        result = subprocess.run(
            command + args,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr.strip()}")
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH.")


def get_staged_diff(max_chars: int = 50000, repo_root: Optional[Path] = None) -> str:
    """Get the staged diff, truncating if necessary.

    Args:
        max_chars: Maximum characters for the diff output.
        repo_root: The repository to read from (optional).

    Returns:
        The staged diff string.

    Raises:
        NoStagedChangesError: If there are no staged changes.
        GitError: If git fails (e.g. not a repository).
    """
    diff = _run_git_command(["diff", "--staged"], repo_root)

    if not diff:
        raise NoStagedChangesError(
            "No staged changes found. Stage your changes first with: git add <files>"
        )

    if len(diff) > max_chars:
        diff = diff[:max_chars] + "\n...[truncated]\n"

    return diff
