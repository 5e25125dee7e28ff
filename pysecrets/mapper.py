"""Mapping between local secret files and objects in the bucket."""

import os
from pathlib import Path, PurePosixPath
from typing import Union

from .config import GCS_SCHEME
from .exceptions import OutOfScopeError

PathLike = Union[str, os.PathLike]


class PathMapper:
    """Maps paths under the local root to object keys in the bucket.

    The mapping is a plain relative-path substitution: ``<local_root>/a/b.env``
    corresponds to ``gs://<bucket>/a/b.env``.
    """

    def __init__(self, local_root: Path, bucket: str):
        """Initialize path mapper.

        Args:
            local_root: Absolute path of the local secrets directory
            bucket: Bucket name (without scheme)
        """
        self.local_root = Path(os.path.abspath(local_root))
        self.bucket = bucket

    def absolute(self, path: PathLike) -> Path:
        """Return the absolute, normalized form of a local path.

        Relative paths resolve against the current working directory.
        Symlinks are not followed.
        """
        return Path(os.path.abspath(os.path.expanduser(os.fspath(path))))

    def relative_path(self, path: PathLike) -> str:
        """Return the path relative to the local root, using forward slashes.

        Raises:
            OutOfScopeError: If the path is not strictly inside the local root
        """
        full_path = self.absolute(path)
        try:
            relative = os.path.relpath(full_path, self.local_root)
        except ValueError as e:
            # Different drives on Windows
            raise OutOfScopeError(full_path, self.local_root) from e

        relative_posix = Path(relative).as_posix()
        first = relative_posix.split("/", 1)[0]
        if first in ("..", ".") or os.path.isabs(relative):
            raise OutOfScopeError(full_path, self.local_root)
        return relative_posix

    def object_name(self, path: PathLike) -> str:
        """Return the object key for a local path."""
        return self.relative_path(path)

    def remote_path(self, path: PathLike) -> str:
        """Return the ``gs://bucket/key`` address for a local path.

        Examples:
            >>> mapper = PathMapper(Path("/srv/secrets"), "dev-secrets")
            >>> mapper.remote_path("/srv/secrets/api/.env")
            'gs://dev-secrets/api/.env'
        """
        return f"{GCS_SCHEME}{self.bucket}/{self.object_name(path)}"

    def staged_path(self, path: PathLike, staging_dir: Path) -> Path:
        """Return where a local file's remote copy is staged inside ``staging_dir``."""
        return self.path_under(staging_dir, self.relative_path(path))

    def path_under(self, directory: Path, object_name: str) -> Path:
        """Join an object key onto a directory, refusing keys that escape it."""
        parts = PurePosixPath(object_name).parts
        if not parts or any(part in ("..", "/") for part in parts):
            raise OutOfScopeError(object_name, directory)
        return Path(directory, *parts)
