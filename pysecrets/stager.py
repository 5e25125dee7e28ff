"""Staging of remote snapshots for diffing against the local root."""

import contextlib
import logging
import shutil
from pathlib import Path
from typing import Optional, Sequence

from .config import SecretsSettings
from .diff import compare_file, diff_trees
from .exceptions import (
    DiffToolError,
    OutOfScopeError,
    RemoteNotFoundError,
    SecretsConfigError,
    TransferError,
)
from .mapper import PathLike
from .models import DiffReport, DiffStatus, FileDiff
from .output import OutputFormatter
from .transfer import TransferGateway
from .utils import random_name

logger = logging.getLogger(__name__)


class DiffStager:
    """Downloads remote state into a private staging area and diffs it.

    Staging areas live under ``settings.staging_root`` and are only removed
    by :meth:`cleanup`, which the CLI runs when the process exits.
    """

    def __init__(
        self,
        settings: SecretsSettings,
        gateway: TransferGateway,
        output: Optional[OutputFormatter] = None,
    ):
        self.settings = settings
        self.gateway = gateway
        self.mapper = gateway.mapper
        self.output = output or OutputFormatter()
        self.staging_areas: list[Path] = []

    def create_staging_area(self) -> Path:
        """Create a fresh, uniquely named staging directory."""
        root = self.settings.staging_root
        while True:
            path = root / random_name()
            try:
                root.mkdir(mode=0o700, parents=True, exist_ok=True)
                path.mkdir(mode=0o700)
            except FileExistsError:
                continue
            except OSError as e:
                raise SecretsConfigError(
                    f"Cannot create staging area under {root}: {e}"
                ) from e
            break
        self.staging_areas.append(path)
        logger.debug("Created staging area %s", path)
        return path

    def cleanup(self) -> None:
        """Remove staging areas created by this stager. Errors are ignored."""
        for path in self.staging_areas:
            shutil.rmtree(path, ignore_errors=True)
        self.staging_areas.clear()
        with contextlib.suppress(OSError):
            # Only succeeds once no other invocation is using the root
            self.settings.staging_root.rmdir()

    def run(self, selection: Sequence[PathLike] = ()) -> DiffReport:
        """Diff the selection (or everything) against the bucket.

        Prints a colorized diff as it goes, and "No changes" if nothing
        differs.

        Args:
            selection: Local files to compare; empty means the whole tree

        Returns:
            Report with one entry per compared file

        Raises:
            TransferError: If downloading the whole bucket fails
        """
        self.output.info("Preparing diffs...")
        staging_dir = self.create_staging_area()
        report = DiffReport()

        if not selection:
            self.gateway.download_all(staging_dir, silent=True)
            try:
                files = diff_trees(self.settings.local_root, staging_dir)
            except DiffToolError as e:
                logger.debug("Tree diff failed: %s", e)
                files = []
            for file_diff in files:
                self._render(file_diff)
                report.files.append(file_diff)
        else:
            for file in selection:
                file_diff = self.diff_file(file, staging_dir)
                self._render(file_diff)
                report.files.append(file_diff)

        if not report.has_differences:
            self.output.info("\nNo changes ✨\n")
        return report

    def diff_file(self, file: PathLike, staging_dir: Path) -> FileDiff:
        """Stage the remote copy of one local file and compare the two."""
        try:
            relative_path = self.mapper.relative_path(file)
            staged_path = self.mapper.staged_path(file, staging_dir)
        except OutOfScopeError as e:
            self._report_error(e)
            return FileDiff(
                relative_path=str(file), status=DiffStatus.SKIPPED, reason=str(e)
            )

        remote: Optional[Path] = staged_path
        try:
            self.gateway.download(file, staged_path, silent=True)
        except RemoteNotFoundError as e:
            logger.debug("Remote copy missing: %s", e)
            remote = None
        except TransferError as e:
            self._report_error(e)
            return FileDiff(
                relative_path=relative_path, status=DiffStatus.FAILED, reason=str(e)
            )

        try:
            file_diff = compare_file(relative_path, self.mapper.absolute(file), remote)
            if file_diff.status == DiffStatus.FAILED:
                self.output.warning(f"{relative_path}: {file_diff.reason}")
            return file_diff
        except DiffToolError as e:
            logger.debug("Diff failed for %s: %s", relative_path, e)
            return FileDiff(
                relative_path=relative_path, status=DiffStatus.FAILED, reason=str(e)
            )

    def _render(self, file_diff: FileDiff) -> None:
        if file_diff.status == DiffStatus.MISSING_REMOTE:
            self.output.print(f"Only in local: {file_diff.relative_path}", "bold")
        elif file_diff.status == DiffStatus.MISSING_LOCAL:
            self.output.print(f"Only in remote: {file_diff.relative_path}", "bold")
        if file_diff.lines:
            self.output.print_diff(file_diff.lines)

    def _report_error(self, error: Exception) -> None:
        self.output.warning(str(error))
        logger.debug("Diff staging error", exc_info=error)
