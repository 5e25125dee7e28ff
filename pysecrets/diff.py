"""Line-based comparison of local files against staged remote copies."""

import difflib
import logging
from pathlib import Path
from typing import Optional

from .exceptions import DiffToolError
from .models import DiffStatus, FileDiff
from .utils import DIFF_CONTEXT_LINES, iter_files

logger = logging.getLogger(__name__)

NULL_LABEL = "/dev/null"
LOCAL_PREFIX = "local"
REMOTE_PREFIX = "remote"


def _read(path: Optional[Path]) -> bytes:
    if path is None:
        return b""
    try:
        return path.read_bytes()
    except OSError as e:
        raise DiffToolError(f"Cannot read {path}: {e}") from e


def diff_files(
    a: Optional[Path],
    b: Optional[Path],
    a_label: str,
    b_label: str,
) -> list[str]:
    """Compare two files and return unified diff lines.

    A side given as ``None`` is treated as an empty, absent file and is
    labelled ``/dev/null``.

    Args:
        a: Original file (lines shown with ``-``)
        b: New file (lines shown with ``+``)
        a_label: Name shown in the ``---`` header
        b_label: Name shown in the ``+++`` header

    Returns:
        Diff lines without trailing newlines; empty if contents are identical

    Raises:
        DiffToolError: If either file cannot be read
    """
    a_bytes = _read(a)
    b_bytes = _read(b)
    if a is not None and b is not None and a_bytes == b_bytes:
        return []

    a_label = a_label if a is not None else NULL_LABEL
    b_label = b_label if b is not None else NULL_LABEL

    try:
        a_text = a_bytes.decode("utf-8")
        b_text = b_bytes.decode("utf-8")
    except UnicodeDecodeError:
        return [f"Binary files {a_label} and {b_label} differ"]

    lines: list[str] = []
    for line in difflib.unified_diff(
        a_text.splitlines(keepends=True),
        b_text.splitlines(keepends=True),
        fromfile=a_label,
        tofile=b_label,
        n=DIFF_CONTEXT_LINES,
    ):
        if line.endswith("\n"):
            lines.append(line[:-1])
        else:
            lines.append(line)
            lines.append("\\ No newline at end of file")
    return lines


def compare_file(
    relative_path: str,
    local: Optional[Path],
    remote: Optional[Path],
    remote_first: bool = False,
) -> FileDiff:
    """Compare a local file with its staged remote copy.

    Either side may be ``None`` (or missing on disk), meaning the file only
    exists on the other side. By default the local file is the original
    (``-``) side; ``remote_first`` puts the remote copy there instead, so
    local edits show as additions.
    """
    if local is not None and not local.is_file():
        local = None
    if remote is not None and not remote.is_file():
        remote = None

    if local is None and remote is None:
        return FileDiff(
            relative_path=relative_path,
            status=DiffStatus.FAILED,
            reason="File exists neither locally nor in the bucket",
        )

    local_side = (local, f"{LOCAL_PREFIX}/{relative_path}")
    remote_side = (remote, f"{REMOTE_PREFIX}/{relative_path}")
    (a, a_label), (b, b_label) = (
        (remote_side, local_side) if remote_first else (local_side, remote_side)
    )
    lines = diff_files(a, b, a_label, b_label)
    if remote is None:
        status = DiffStatus.MISSING_REMOTE
    elif local is None:
        status = DiffStatus.MISSING_LOCAL
    elif lines:
        status = DiffStatus.CHANGED
    else:
        status = DiffStatus.IDENTICAL
    return FileDiff(relative_path=relative_path, status=status, lines=lines)


def _scan(root: Path) -> dict[str, Path]:
    try:
        return {p.relative_to(root).as_posix(): p for p in iter_files(root)}
    except OSError as e:
        raise DiffToolError(f"Cannot scan {root}: {e}") from e


def diff_trees(local_dir: Path, remote_dir: Path) -> list[FileDiff]:
    """Recursively compare a local directory with a staged remote snapshot.

    The snapshot is the original side, so local edits show as additions.

    Args:
        local_dir: Local root (may not exist yet)
        remote_dir: Staging directory holding the downloaded bucket contents

    Returns:
        One FileDiff per file found on either side, sorted by relative path

    Raises:
        DiffToolError: If either directory cannot be scanned
    """
    local_files = _scan(local_dir)
    remote_files = _scan(remote_dir)

    results: list[FileDiff] = []
    for relative_path in sorted(set(local_files) | set(remote_files)):
        try:
            results.append(
                compare_file(
                    relative_path,
                    local_files.get(relative_path),
                    remote_files.get(relative_path),
                    remote_first=True,
                )
            )
        except DiffToolError as e:
            logger.debug("Diff failed for %s: %s", relative_path, e)
            results.append(
                FileDiff(
                    relative_path=relative_path,
                    status=DiffStatus.FAILED,
                    reason=str(e),
                )
            )
    return results
