"""Configuration loading for pysecrets.

Settings are resolved from (in order of precedence) command-line options,
environment variables, the INI config file and built-in defaults.
"""

import configparser
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import SecretsConfigError

logger = logging.getLogger(__name__)

GCS_SCHEME = "gs://"
CONFIG_SECTION = "pysecrets"
DEFAULT_LOCAL_ROOT = "./secrets"
DEFAULT_STAGING_DIR_NAME = "pysecrets"

ENV_CONFIG = "PYSECRETS_CONFIG"
ENV_BUCKET = "PYSECRETS_BUCKET"
ENV_LOCAL_ROOT = "PYSECRETS_LOCAL_ROOT"
ENV_STAGING_DIR = "PYSECRETS_STAGING_DIR"
ENV_PROJECT = "PYSECRETS_PROJECT"


def normalize_bucket_name(value: str) -> str:
    """Strip an optional ``gs://`` prefix and trailing slashes from a bucket name.

    Examples:
        >>> normalize_bucket_name("gs://dev-secrets/")
        'dev-secrets'
        >>> normalize_bucket_name("dev-secrets")
        'dev-secrets'
    """
    value = value.strip()
    if value.startswith(GCS_SCHEME):
        value = value[len(GCS_SCHEME) :]
    return value.strip("/")


@dataclass(frozen=True)
class SecretsSettings:
    """Resolved settings for a single invocation.

    Passed explicitly to every component instead of relying on global state.
    """

    local_root: Path
    """Absolute path of the local secrets directory"""

    bucket: Optional[str]
    """Bucket name without scheme"""

    staging_root: Path
    """Directory under which per-invocation staging areas are created"""

    project: Optional[str] = None
    """Google Cloud project used by the storage client"""

    debug: bool = False
    """Verbose logging; disables silent transfers"""

    def require_bucket(self) -> str:
        """Return the bucket name, or raise if none is configured."""
        if not self.bucket:
            raise SecretsConfigError(
                "No bucket configured. Use --bucket or set "
                f"{ENV_BUCKET} environment variable."
            )
        return self.bucket

    @property
    def bucket_url(self) -> str:
        return f"{GCS_SCHEME}{self.require_bucket()}"


class Config:
    """Reads pysecrets settings from the environment and the config file."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path
        self._values: Optional[dict[str, str]] = None

    def get_config_path(self) -> Path:
        """Path of the INI config file (may not exist)."""
        if self._config_path is not None:
            return self._config_path
        env_path = os.environ.get(ENV_CONFIG)
        if env_path:
            return Path(env_path).expanduser()
        return Path.home() / ".config" / "pysecrets" / "config.ini"

    def _load_file(self) -> dict[str, str]:
        if self._values is not None:
            return self._values

        self._values = {}
        path = self.get_config_path()
        if not path.is_file():
            return self._values

        parser = configparser.ConfigParser()
        try:
            parser.read(path, encoding="utf-8")
        except configparser.Error as e:
            raise SecretsConfigError(f"Invalid config file {path}: {e}") from e

        if parser.has_section(CONFIG_SECTION):
            self._values = dict(parser.items(CONFIG_SECTION))
        logger.debug("Loaded config file %s", path)
        return self._values

    def _get(self, env_var: str, key: str) -> Optional[str]:
        value = os.environ.get(env_var)
        if value:
            return value
        return self._load_file().get(key) or None

    @property
    def bucket(self) -> Optional[str]:
        value = self._get(ENV_BUCKET, "bucket")
        return normalize_bucket_name(value) if value else None

    @property
    def local_root(self) -> Path:
        return Path(self._get(ENV_LOCAL_ROOT, "local_root") or DEFAULT_LOCAL_ROOT)

    @property
    def staging_root(self) -> Path:
        value = self._get(ENV_STAGING_DIR, "staging_dir")
        if value:
            return Path(value)
        return Path(tempfile.gettempdir()) / DEFAULT_STAGING_DIR_NAME

    @property
    def project(self) -> Optional[str]:
        return self._get(ENV_PROJECT, "project")

    def resolve(
        self,
        bucket: Optional[str] = None,
        local_root: Optional[str] = None,
        project: Optional[str] = None,
        debug: bool = False,
    ) -> SecretsSettings:
        """Build settings, letting explicit arguments override configured values.

        Args:
            bucket: Bucket name from the command line
            local_root: Local root from the command line
            project: Google Cloud project from the command line
            debug: Whether debugging is enabled

        Returns:
            Resolved settings with absolute paths
        """
        root = Path(local_root) if local_root else self.local_root
        return SecretsSettings(
            local_root=Path(os.path.abspath(root.expanduser())),
            bucket=normalize_bucket_name(bucket) if bucket else self.bucket,
            staging_root=Path(os.path.abspath(self.staging_root.expanduser())),
            project=project or self.project,
            debug=debug,
        )


config = Config()
