"""Tests for the transfer gateway."""

from unittest.mock import patch

import pytest
from google.auth.exceptions import DefaultCredentialsError

from pysecrets.config import SecretsSettings
from pysecrets.exceptions import (
    OutOfScopeError,
    RemoteNotFoundError,
    SecretsConfigError,
    TransferError,
)
from pysecrets.models import TransferOutcome
from pysecrets.transfer import TransferGateway


class TestSingleFile:
    """Tests for single-file download and upload."""

    def test_download_to_mapped_path(self, gateway, fake_client, local_root):
        fake_client.objects["api/.env"] = b"TOKEN=1\n"

        result = gateway.download(local_root / "api" / ".env")

        assert result == local_root / "api" / ".env"
        assert result.read_bytes() == b"TOKEN=1\n"

    def test_download_to_explicit_target(self, gateway, fake_client, local_root, tmp_path):
        fake_client.objects["a.env"] = b"A=1\n"
        target = tmp_path / "elsewhere" / "a.env"

        gateway.download(local_root / "a.env", target)

        assert target.read_bytes() == b"A=1\n"
        assert not (local_root / "a.env").exists()

    def test_download_missing_object(self, gateway, local_root):
        with pytest.raises(RemoteNotFoundError, match="gs://test-bucket/nope.env"):
            gateway.download(local_root / "nope.env")

    def test_download_backend_failure(self, gateway, fake_client, local_root):
        fake_client.objects["a.env"] = b"A=1\n"
        fake_client.failures.add("a.env")

        with pytest.raises(TransferError) as exc_info:
            gateway.download(local_root / "a.env")

        assert not isinstance(exc_info.value, RemoteNotFoundError)

    def test_download_out_of_scope(self, gateway, fake_client, tmp_path):
        with pytest.raises(OutOfScopeError):
            gateway.download(tmp_path / "outside.env")
        assert fake_client.calls == []

    def test_upload(self, gateway, fake_client, local_root):
        (local_root / "a.env").write_text("A=2\n")

        address = gateway.upload(local_root / "a.env")

        assert address == "gs://test-bucket/a.env"
        assert fake_client.objects["a.env"] == b"A=2\n"

    def test_upload_missing_local_file(self, gateway, fake_client, local_root):
        with pytest.raises(TransferError, match="Local file not found"):
            gateway.upload(local_root / "ghost.env")
        assert fake_client.uploads() == []


class TestSilentMode:
    """Tests for copy message suppression."""

    def test_copy_message_shown(self, gateway, fake_client, local_root, capsys):
        fake_client.objects["a.env"] = b"A=1\n"

        gateway.download(local_root / "a.env")

        assert "Copying gs://test-bucket/a.env" in capsys.readouterr().out

    def test_silent_hides_copy_message(self, gateway, fake_client, local_root, capsys):
        fake_client.objects["a.env"] = b"A=1\n"

        gateway.download(local_root / "a.env", silent=True)

        assert "Copying" not in capsys.readouterr().out

    def test_debug_overrides_silent(self, settings, output, fake_client, capsys):
        debug_settings = SecretsSettings(
            local_root=settings.local_root,
            bucket=settings.bucket,
            staging_root=settings.staging_root,
            debug=True,
        )
        gateway = TransferGateway(debug_settings, output, client=fake_client)
        fake_client.objects["a.env"] = b"A=1\n"

        gateway.download(settings.local_root / "a.env", silent=True)

        assert "Copying" in capsys.readouterr().out


class TestBulk:
    """Tests for whole-tree operations."""

    def test_download_all(self, gateway, fake_client, local_root):
        fake_client.objects.update(
            {"a.env": b"A\n", "nested/b.env": b"B\n", "folder/": b""}
        )

        count = gateway.download_all()

        assert count == 2
        assert (local_root / "a.env").read_bytes() == b"A\n"
        assert (local_root / "nested" / "b.env").read_bytes() == b"B\n"

    def test_download_all_into_target(self, gateway, fake_client, tmp_path, local_root):
        fake_client.objects["a.env"] = b"A\n"
        target = tmp_path / "snapshot"
        target.mkdir()

        gateway.download_all(target)

        assert (target / "a.env").exists()
        assert not (local_root / "a.env").exists()

    def test_download_all_ignores_escaping_keys(self, gateway, fake_client, tmp_path):
        fake_client.objects["../evil.env"] = b"X\n"

        assert gateway.download_all() == 0
        assert not (tmp_path / "evil.env").exists()

    def test_download_all_propagates_failures(self, gateway, fake_client):
        fake_client.objects["a.env"] = b"A\n"
        fake_client.failures.add("a.env")

        with pytest.raises(TransferError):
            gateway.download_all()

    def test_upload_all(self, gateway, fake_client, local_root):
        (local_root / "a.env").write_text("A\n")
        (local_root / "nested").mkdir()
        (local_root / "nested" / "b.env").write_text("B\n")

        count = gateway.upload_all()

        assert count == 2
        assert fake_client.uploads() == ["a.env", "nested/b.env"]

    def test_upload_all_missing_root(self, settings, output, fake_client, tmp_path):
        missing = SecretsSettings(
            local_root=tmp_path / "absent",
            bucket=settings.bucket,
            staging_root=settings.staging_root,
        )
        gateway = TransferGateway(missing, output, client=fake_client)

        with pytest.raises(TransferError, match="does not exist"):
            gateway.upload_all()


class TestSelection:
    """Tests for per-file loops over a selection."""

    def test_upload_selection_keeps_order_and_continues(
        self, gateway, fake_client, local_root
    ):
        """Every file is attempted in order even if an earlier one fails."""
        (local_root / "b.env").write_text("B\n")
        (local_root / "a.env").write_text("A\n")
        fake_client.failures.add("b.env")

        report = gateway.upload_selection([local_root / "b.env", local_root / "a.env"])

        assert fake_client.uploads() == ["b.env", "a.env"]
        assert [f.outcome for f in report.files] == [
            TransferOutcome.FAILED,
            TransferOutcome.TRANSFERRED,
        ]
        assert not report.ok

    def test_download_selection_skips_out_of_scope(
        self, gateway, fake_client, local_root, tmp_path
    ):
        fake_client.objects["a.env"] = b"A\n"

        report = gateway.download_selection(
            [tmp_path / "outside.env", local_root / "a.env", local_root / "nope.env"]
        )

        assert [f.outcome for f in report.files] == [
            TransferOutcome.SKIPPED,
            TransferOutcome.TRANSFERRED,
            TransferOutcome.FAILED,
        ]
        assert report.transferred == 1
        assert report.skipped == 1
        assert report.failed == 1
        assert "must be inside" in report.files[0].reason

    def test_errors_are_reported(self, gateway, local_root, capsys):
        gateway.download_selection([local_root / "nope.env"])

        assert "No such object" in capsys.readouterr().err


class TestClientCreation:
    """Tests for lazy storage client creation."""

    def test_client_created_with_project(self, local_root, tmp_path):
        settings = SecretsSettings(
            local_root=local_root,
            bucket="test-bucket",
            staging_root=tmp_path,
            project="my-project",
        )
        gateway = TransferGateway(settings)

        with patch("pysecrets.transfer.storage.Client") as mock_client_class:
            client = gateway.client

        mock_client_class.assert_called_once_with(project="my-project")
        assert client is mock_client_class.return_value

    def test_missing_credentials(self, settings):
        gateway = TransferGateway(settings)

        with patch(
            "pysecrets.transfer.storage.Client",
            side_effect=DefaultCredentialsError("no creds"),
        ):
            with pytest.raises(SecretsConfigError, match="credentials"):
                gateway.client

    def test_bucket_required(self, local_root, tmp_path):
        settings = SecretsSettings(
            local_root=local_root, bucket=None, staging_root=tmp_path
        )

        with pytest.raises(SecretsConfigError, match="No bucket configured"):
            TransferGateway(settings)
