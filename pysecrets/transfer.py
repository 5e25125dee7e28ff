"""Copy operations between the local root and the Google Cloud Storage bucket."""

import logging
import os
from pathlib import Path
from typing import Any, Iterable, Optional

from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.auth.exceptions import DefaultCredentialsError
from google.cloud import storage

from .config import SecretsSettings
from .exceptions import (
    OutOfScopeError,
    RemoteNotFoundError,
    SecretsConfigError,
    TransferError,
)
from .mapper import PathLike, PathMapper
from .models import TransferOutcome, TransferReport
from .output import OutputFormatter
from .utils import iter_files

logger = logging.getLogger(__name__)


class TransferGateway:
    """Bulk and single-file copies between the local root and the bucket.

    Every copy announces itself with a ``Copying <src> -> <dst>`` line.
    Passing ``silent=True`` hides that line unless debugging is enabled.
    """

    def __init__(
        self,
        settings: SecretsSettings,
        output: Optional[OutputFormatter] = None,
        client: Any = None,
    ):
        """Initialize transfer gateway.

        Args:
            settings: Resolved settings (bucket, local root, debug flag)
            output: Output formatter for copy messages and warnings
            client: Storage client; a ``google.cloud.storage.Client`` is
                created on first use if not given
        """
        self.settings = settings
        self.output = output or OutputFormatter()
        self.mapper = PathMapper(settings.local_root, settings.require_bucket())
        self._client = client

    @property
    def client(self) -> Any:
        """Get or create the storage client."""
        if self._client is None:
            try:
                self._client = storage.Client(project=self.settings.project)
            except DefaultCredentialsError as e:
                raise SecretsConfigError(
                    "Google Cloud credentials not found. "
                    "Run 'gcloud auth application-default login'."
                ) from e
        return self._client

    @property
    def bucket(self) -> Any:
        return self.client.bucket(self.mapper.bucket)

    def _announce(self, source: str, destination: str, silent: bool) -> None:
        message = f"Copying {source} -> {destination}"
        logger.debug(message)
        if not silent or self.settings.debug:
            self.output.info(message)

    def _remote_url(self, object_name: str) -> str:
        return f"{self.settings.bucket_url}/{object_name}"

    # =========================
    # Single-file operations
    # =========================

    def download(
        self,
        local_path: PathLike,
        target_path: Optional[PathLike] = None,
        silent: bool = False,
    ) -> Path:
        """Download the object mapped from ``local_path``.

        Args:
            local_path: Local path under the local root identifying the object
            target_path: Where to write the object (defaults to ``local_path``)
            silent: Hide the copy message unless debugging

        Returns:
            Path where the object was written

        Raises:
            OutOfScopeError: If ``local_path`` is outside the local root
            RemoteNotFoundError: If the object does not exist
            TransferError: If the download fails
        """
        object_name = self.mapper.object_name(local_path)
        source = self._remote_url(object_name)
        target = Path(target_path) if target_path else self.mapper.absolute(local_path)
        self._announce(source, str(target), silent)
        self._download_object(object_name, target)
        return target

    def upload(self, local_path: PathLike, silent: bool = False) -> str:
        """Upload a local file to its mapped object.

        Returns:
            The ``gs://`` address that was written

        Raises:
            OutOfScopeError: If ``local_path`` is outside the local root
            TransferError: If the upload fails
        """
        source = self.mapper.absolute(local_path)
        object_name = self.mapper.object_name(source)
        destination = self._remote_url(object_name)
        self._announce(str(source), destination, silent)
        self._upload_object(source, object_name)
        return destination

    def _download_object(self, object_name: str, target: Path) -> None:
        source = self._remote_url(object_name)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            blob = self.bucket.blob(object_name)
            blob.download_to_filename(str(target))
        except NotFound as e:
            raise RemoteNotFoundError(
                f"No such object: {source}", source, str(target)
            ) from e
        except (GoogleAPICallError, OSError) as e:
            raise TransferError(
                f"Failed to download {source}: {e}", source, str(target)
            ) from e

    def _upload_object(self, source: Path, object_name: str) -> None:
        destination = self._remote_url(object_name)
        if not source.is_file():
            raise TransferError(
                f"Local file not found: {source}", str(source), destination
            )
        try:
            blob = self.bucket.blob(object_name)
            blob.upload_from_filename(str(source))
        except (GoogleAPICallError, OSError) as e:
            raise TransferError(
                f"Failed to upload {source}: {e}", str(source), destination
            ) from e

    # =========================
    # Bulk operations
    # =========================

    def download_all(
        self, target_dir: Optional[Path] = None, silent: bool = False
    ) -> int:
        """Download every object in the bucket into ``target_dir``.

        Args:
            target_dir: Destination directory (defaults to the local root)
            silent: Hide copy messages unless debugging

        Returns:
            Number of objects downloaded

        Raises:
            TransferError: If listing the bucket or any download fails
        """
        target_dir = target_dir or self.mapper.local_root
        bucket_name = self.mapper.bucket
        try:
            blobs = list(self.client.list_blobs(bucket_name))
        except GoogleAPICallError as e:
            raise TransferError(
                f"Failed to list {self.settings.bucket_url}: {e}",
                self.settings.bucket_url,
                str(target_dir),
            ) from e

        count = 0
        for blob in blobs:
            if blob.name.endswith("/"):
                continue
            try:
                target = self.mapper.path_under(target_dir, blob.name)
            except OutOfScopeError:
                logger.warning("Ignoring object with unsafe name: %s", blob.name)
                continue
            self._announce(self._remote_url(blob.name), str(target), silent)
            self._download_object(blob.name, target)
            count += 1
        return count

    def upload_all(self, silent: bool = False) -> int:
        """Upload every file under the local root to the bucket.

        Returns:
            Number of files uploaded

        Raises:
            TransferError: If the local root is missing or any upload fails
        """
        root = self.mapper.local_root
        if not root.is_dir():
            raise TransferError(
                f"Local directory does not exist: {root}",
                str(root),
                self.settings.bucket_url,
            )

        count = 0
        for path in iter_files(root):
            object_name = self.mapper.object_name(path)
            self._announce(str(path), self._remote_url(object_name), silent)
            self._upload_object(path, object_name)
            count += 1
        return count

    # =========================
    # Selection loops
    # =========================

    def download_selection(
        self, files: Iterable[PathLike], silent: bool = False
    ) -> TransferReport:
        """Download each selected file in order, continuing past failures."""
        report = TransferReport()
        for file in files:
            path = Path(os.fspath(file))
            try:
                self.download(path, silent=silent)
            except OutOfScopeError as e:
                self._report_error(e)
                report.add(path, TransferOutcome.SKIPPED, str(e))
            except TransferError as e:
                self._report_error(e)
                report.add(path, TransferOutcome.FAILED, str(e))
            else:
                report.add(path, TransferOutcome.TRANSFERRED)
        return report

    def upload_selection(
        self, files: Iterable[PathLike], silent: bool = False
    ) -> TransferReport:
        """Upload each selected file in order, continuing past failures."""
        report = TransferReport()
        for file in files:
            path = Path(os.fspath(file))
            try:
                self.upload(path, silent=silent)
            except OutOfScopeError as e:
                self._report_error(e)
                report.add(path, TransferOutcome.SKIPPED, str(e))
            except TransferError as e:
                self._report_error(e)
                report.add(path, TransferOutcome.FAILED, str(e))
            else:
                report.add(path, TransferOutcome.TRANSFERRED)
        return report

    def _report_error(self, error: Exception) -> None:
        self.output.warning(str(error))
        logger.debug("Transfer error", exc_info=error)
