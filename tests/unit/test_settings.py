"""
Unit tests for application settings.

Settings are built directly with keyword arguments and no .env file, so
the developer's local environment can't leak into the results.
"""

import pytest

from src.config.settings import Settings, get_settings


ENV_VARS = [
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_BUCKET",
    "AWS_S3_URL",
    "S3_MOCK_MODE",
    "DEFAULT_IMAGE_PATH",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestAwsCredsExist:
    """Tests for deciding whether remote storage is usable."""

    def test_no_credentials_by_default(self):
        assert make_settings().aws_creds_exist is False

    def test_complete_credentials(self):
        settings = make_settings(
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            aws_bucket="bucket",
        )

        assert settings.aws_creds_exist is True

    def test_partial_credentials_are_not_enough(self):
        settings = make_settings(aws_access_key_id="key", aws_bucket="bucket")

        assert settings.aws_creds_exist is False

    def test_mock_mode_counts_as_credentialed(self):
        assert make_settings(s3_mock_mode=True).aws_creds_exist is True


class TestStorageConfig:
    """Tests for building the core storage configuration."""

    def test_maps_settings_to_storage_config(self):
        settings = make_settings(
            default_image_path="/img/default.png",
            local_upload_root="/srv/public",
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            aws_bucket="bucket",
            aws_s3_url="https://bucket.s3.amazonaws.com",
        )

        config = settings.storage_config()

        assert config.default_image_path == "/img/default.png"
        assert config.local_upload_root == "/srv/public"
        assert config.remote_credentials_present is True
        assert config.remote_base_url == "https://bucket.s3.amazonaws.com"

    def test_empty_base_url_becomes_none(self):
        assert make_settings().storage_config().remote_base_url is None


class TestValidateRequiredFields:
    """Tests for configuration validation."""

    def test_local_only_configuration_is_valid(self):
        assert make_settings().validate_required_fields() == []

    def test_partial_aws_configuration_is_reported(self):
        settings = make_settings(aws_access_key_id="key")

        missing = settings.validate_required_fields()

        assert "AWS_SECRET_ACCESS_KEY" in missing
        assert "AWS_BUCKET" in missing

    def test_credentials_without_public_url_are_reported(self):
        settings = make_settings(
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            aws_bucket="bucket",
        )

        assert settings.validate_required_fields() == ["AWS_S3_URL"]


class TestEnvironment:
    """Tests for loading from environment variables."""

    def test_reads_aws_variable_names(self, monkeypatch):
        monkeypatch.setenv("AWS_BUCKET", "shop-images")
        monkeypatch.setenv("DEFAULT_IMAGE_PATH", "/img/none.png")

        settings = make_settings()

        assert settings.aws_bucket == "shop-images"
        assert settings.default_image_path == "/img/none.png"

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()

        assert get_settings() is get_settings()
