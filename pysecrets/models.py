"""Result types for transfers and diffs."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class TransferOutcome(str, Enum):
    """Outcome of copying a single file."""

    TRANSFERRED = "transferred"
    """File was copied"""

    SKIPPED = "skipped"
    """File was not attempted (e.g. outside the local root)"""

    FAILED = "failed"
    """Copy was attempted and failed"""


@dataclass
class FileTransfer:
    """Result of a single-file upload or download."""

    path: Path
    """Local path the operation was requested for"""

    outcome: TransferOutcome
    """What happened to the file"""

    reason: Optional[str] = None
    """Short error message for skipped or failed files"""


@dataclass
class TransferReport:
    """Aggregated results of a per-file transfer loop."""

    files: list[FileTransfer] = field(default_factory=list)

    def add(
        self, path: Path, outcome: TransferOutcome, reason: Optional[str] = None
    ) -> FileTransfer:
        entry = FileTransfer(path=path, outcome=outcome, reason=reason)
        self.files.append(entry)
        return entry

    def _count(self, outcome: TransferOutcome) -> int:
        return sum(1 for f in self.files if f.outcome == outcome)

    @property
    def transferred(self) -> int:
        return self._count(TransferOutcome.TRANSFERRED)

    @property
    def skipped(self) -> int:
        return self._count(TransferOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(TransferOutcome.FAILED)

    @property
    def ok(self) -> bool:
        """True if every file was transferred."""
        return all(f.outcome == TransferOutcome.TRANSFERRED for f in self.files)


class DiffStatus(str, Enum):
    """Comparison result for a single file."""

    IDENTICAL = "identical"
    """Local and remote content match"""

    CHANGED = "changed"
    """Local and remote content differ"""

    MISSING_REMOTE = "missing_remote"
    """File exists locally but not in the bucket"""

    MISSING_LOCAL = "missing_local"
    """File exists in the bucket but not locally"""

    SKIPPED = "skipped"
    """File was not compared (outside the local root)"""

    FAILED = "failed"
    """Staging or comparison failed; no difference could be detected"""

    @property
    def is_difference(self) -> bool:
        return self in (
            DiffStatus.CHANGED,
            DiffStatus.MISSING_REMOTE,
            DiffStatus.MISSING_LOCAL,
        )


@dataclass
class FileDiff:
    """Comparison of one local file against its staged remote copy."""

    relative_path: str
    """Path relative to the local root (forward slashes)"""

    status: DiffStatus
    """Comparison result"""

    lines: list[str] = field(default_factory=list)
    """Unified diff lines, empty unless something differs"""

    reason: Optional[str] = None
    """Short error message for skipped or failed files"""


@dataclass
class DiffReport:
    """Aggregated results of a diff run."""

    files: list[FileDiff] = field(default_factory=list)

    @property
    def has_differences(self) -> bool:
        return any(f.status.is_difference for f in self.files)

    @property
    def changed(self) -> list[FileDiff]:
        return [f for f in self.files if f.status == DiffStatus.CHANGED]

    @property
    def missing_remote(self) -> list[FileDiff]:
        return [f for f in self.files if f.status == DiffStatus.MISSING_REMOTE]

    @property
    def missing_local(self) -> list[FileDiff]:
        return [f for f in self.files if f.status == DiffStatus.MISSING_LOCAL]

    @property
    def failures(self) -> list[FileDiff]:
        return [
            f
            for f in self.files
            if f.status in (DiffStatus.SKIPPED, DiffStatus.FAILED)
        ]
