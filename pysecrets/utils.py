"""Utility functions for pysecrets."""

import secrets
from pathlib import Path
from typing import Iterable

# =============================================================================
# Constants
# =============================================================================

# Number of random bytes in a staging directory name (hex encoded)
STAGING_NAME_BYTES: int = 5

# Lines of context around each change in unified diffs
DIFF_CONTEXT_LINES: int = 3


# =============================================================================
# Filesystem utilities
# =============================================================================


def iter_files(root: Path) -> list[Path]:
    """Return all regular files below ``root``, sorted by path.

    A missing ``root`` yields an empty list.

    Args:
        root: Directory to scan recursively

    Returns:
        Sorted list of file paths
    """
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file())


def random_name(num_bytes: int = STAGING_NAME_BYTES) -> str:
    """Return a random hex name for a staging directory.

    Examples:
        >>> len(random_name())
        10
    """
    return secrets.token_hex(num_bytes)


# =============================================================================
# Command-line utilities
# =============================================================================


def parse_args(tokens: Iterable[str]) -> tuple[dict[str, str], list[str]]:
    """Split raw command arguments into options and positional arguments.

    Any token starting with ``-`` is an option. ``--key=value`` stores
    ``value`` under ``--key``; a bare flag stores ``"true"``.

    Args:
        tokens: Raw arguments following the command name

    Returns:
        Tuple of (options, positional)

    Examples:
        >>> parse_args(["-d", "--env=prod", "a.env"])
        ({'-d': 'true', '--env': 'prod'}, ['a.env'])
    """
    options: dict[str, str] = {}
    positional: list[str] = []
    for token in tokens:
        if token.startswith("-"):
            key, _, value = token.partition("=")
            options[key] = value or "true"
        else:
            positional.append(token)
    return options, positional


def unique(items: Iterable[str]) -> list[str]:
    """Drop repeated items, keeping the first occurrence.

    Examples:
        >>> unique(["b", "a", "b"])
        ['b', 'a']
    """
    return list(dict.fromkeys(items))


def is_affirmative(answer: str) -> bool:
    """Return True if a confirmation answer means yes.

    Examples:
        >>> is_affirmative("  Yes ")
        True
        >>> is_affirmative("nope")
        False
        >>> is_affirmative("")
        False
    """
    return answer.strip().lower().startswith("y")
