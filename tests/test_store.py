"""
Tests for gemnexus.config module.

Tests the configuration store including:
- Lazy repository slots and the default slot
- URL trailing-slash handling
- SSL verification mode
- Always-prompt mode
- Clearing credentials
- Encryption and decryption of stored credentials
- Moving credentials to a secrets file and back
- File loading errors
"""

from __future__ import annotations

import os
import sys

import pytest
import yaml

from gemnexus.config import DEFAULT_REPO, ConfigStore, SslVerifyMode, default_file
from gemnexus.exceptions import ConfigError


class TestRepositorySlots:
    """Tests for repository slots and persistence."""

    def test_get_without_key_uses_default_slot(self, store):
        """Test that None selects the default repo."""
        assert store.get().repo_key == DEFAULT_REPO
        assert store.get(None).repo_key == DEFAULT_REPO

    def test_new_slot_is_empty(self, store):
        """Test that a fresh slot has no settings."""
        config = store.get("internal")

        assert config.url is None
        assert config.authorization is None
        assert config.ssl_verify_mode is None
        assert config.always_prompt is False
        assert config.encrypted is False

    def test_values_persist_across_instances(self, config_file):
        """Test that writes are saved immediately."""
        ConfigStore(config_file).get("internal").url = "https://nexus.example.com"

        reloaded = ConfigStore(config_file)

        assert reloaded.get("internal").url == "https://nexus.example.com"
        assert reloaded.get().url is None

    def test_handles_share_state(self, store):
        """Test that two handles onto one slot see each other's writes."""
        first = store.get("internal")
        second = store.get("internal")

        first.authorization = "Basic YTpi"

        assert second.authorization == "Basic YTpi"

    def test_repos_lists_keys_and_urls(self, store):
        """Test listing of configured repositories."""
        store.get().url = "https://a.example.com"
        store.get("other").url = "https://b.example.com"

        assert store.repos() == {
            "default": "https://a.example.com",
            "other": "https://b.example.com",
        }

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_is_owner_only(self, store, config_file):
        """Test that the config file is written with mode 0600."""
        store.get().url = "https://a.example.com"

        assert os.stat(config_file).st_mode & 0o777 == 0o600


class TestUrl:
    """Tests for URL normalization."""

    def test_setter_strips_trailing_slash(self, store):
        """Test that stored URLs have no trailing slash."""
        config = store.get()
        config.url = "https://repo.example.com/"

        assert config.url == "https://repo.example.com"

    def test_getter_strips_exactly_one_slash(self, config_file):
        """Test that a hand-edited URL loses only one trailing slash."""
        config_file.write_text(
            yaml.safe_dump({"repos": {"default": {"url": "https://repo.example.com//"}}}),
            encoding="utf-8",
        )

        assert ConfigStore(config_file).get().url == "https://repo.example.com/"


class TestSslVerifyMode:
    """Tests for the stored SSL verification mode."""

    def test_round_trip(self, store):
        """Test storing and clearing the mode."""
        config = store.get()

        config.ssl_verify_mode = SslVerifyMode.NONE
        assert config.ssl_verify_mode is SslVerifyMode.NONE

        config.ssl_verify_mode = None
        assert config.ssl_verify_mode is None

    def test_invalid_value_raises(self, config_file):
        """Test that unknown modes are rejected."""
        config_file.write_text(
            yaml.safe_dump({"repos": {"default": {"ssl_verify_mode": "maybe"}}}),
            encoding="utf-8",
        )

        with pytest.raises(ConfigError, match="ssl_verify_mode"):
            ConfigStore(config_file).get().ssl_verify_mode


class TestCredentials:
    """Tests for clearing credentials and always-prompt mode."""

    def test_clear_authorization_for_repo(self, store):
        """Test that only the given repo loses its credentials."""
        store.get().authorization = "Basic YTpi"
        store.get("other").authorization = "Basic Yzpk"

        store.clear_authorization_for_repo("other")

        assert store.get().authorization == "Basic YTpi"
        assert store.get("other").authorization is None

    def test_clear_credentials_removes_all(self, store):
        """Test that every repo loses its credentials."""
        store.get().authorization = "Basic YTpi"
        store.get("other").authorization = "Basic Yzpk"

        store.clear_credentials()

        assert store.get().authorization is None
        assert store.get("other").authorization is None

    def test_enabling_always_prompt_clears_credentials(self, store):
        """Test that always-prompt mode deletes stored credentials."""
        store.get().authorization = "Basic YTpi"

        store.set_always_prompt(True)

        assert store.always_prompt is True
        assert store.get().authorization is None

    def test_disabling_always_prompt(self, store):
        """Test switching back to stored credentials."""
        store.set_always_prompt(True)
        store.set_always_prompt(False)

        assert store.get().always_prompt is False


class TestEncryption:
    """Tests for encryption of stored credentials."""

    def test_encrypt_hides_value_on_disk(self, store, config_file):
        """Test that encrypted authorizations are not stored in clear text."""
        store.get().authorization = "Basic YWxpY2U6c2VjcmV0"
        store.unlock("master")

        store.encrypt()

        raw = config_file.read_text(encoding="utf-8")
        assert "YWxpY2U6c2VjcmV0" not in raw
        assert store.encrypted is True
        assert store.get().authorization == "Basic YWxpY2U6c2VjcmV0"

    def test_reload_requires_password(self, store, config_file):
        """Test that a new run cannot read credentials without unlocking."""
        store.get().authorization = "Basic YTpi"
        store.unlock("master")
        store.encrypt()

        reloaded = ConfigStore(config_file)

        with pytest.raises(ConfigError, match="encryption password"):
            reloaded.get().authorization

        reloaded.unlock("master")
        assert reloaded.get().authorization == "Basic YTpi"

    def test_wrong_password_raises(self, store, config_file):
        """Test that a wrong password is reported as ConfigError."""
        store.get().authorization = "Basic YTpi"
        store.unlock("master")
        store.encrypt()

        reloaded = ConfigStore(config_file)
        reloaded.unlock("wrong")

        with pytest.raises(ConfigError, match="wrong encryption password"):
            reloaded.get().authorization

    def test_new_values_are_encrypted(self, store, config_file):
        """Test that credentials set after encryption are encrypted too."""
        store.unlock("master")
        store.encrypt()

        store.get("other").authorization = "Basic bmV3OnZhbHVl"

        assert "bmV3OnZhbHVl" not in config_file.read_text(encoding="utf-8")
        assert store.get("other").authorization == "Basic bmV3OnZhbHVl"

    def test_decrypt_restores_plain_text(self, store, config_file):
        """Test that decrypt writes clear text and drops the salt."""
        store.get().authorization = "Basic YTpi"
        store.unlock("master")
        store.encrypt()

        store.decrypt()

        data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        assert data["encrypted"] is False
        assert "salt" not in data
        assert data["repos"]["default"]["authorization"] == "Basic YTpi"

    def test_encrypt_without_password_raises(self, store):
        """Test that encrypt needs an unlocked store."""
        store.get().authorization = "Basic YTpi"

        with pytest.raises(ConfigError):
            store.encrypt()


class TestSecretsFile:
    """Tests for relocating credentials to a secrets file."""

    def test_move_to_secrets_file(self, store, config_file, tmp_path):
        """Test that authorizations leave the config file."""
        secrets = tmp_path / "secrets.yaml"
        store.get().url = "https://a.example.com"
        store.get().authorization = "Basic YTpi"

        store.relocate_secrets(secrets)

        assert "Basic YTpi" not in config_file.read_text(encoding="utf-8")
        assert yaml.safe_load(secrets.read_text(encoding="utf-8")) == {
            "default": "Basic YTpi"
        }
        assert store.get().authorization == "Basic YTpi"

    def test_new_credentials_go_to_secrets_file(self, store, tmp_path):
        """Test that sign-ins after relocation write to the secrets file."""
        secrets = tmp_path / "secrets.yaml"
        store.relocate_secrets(secrets)

        store.get("other").authorization = "Basic Yzpk"

        assert yaml.safe_load(secrets.read_text(encoding="utf-8")) == {
            "other": "Basic Yzpk"
        }

    def test_move_back_deletes_secrets_file(self, store, config_file, tmp_path):
        """Test that relocate_secrets(None) restores the single-file layout."""
        secrets = tmp_path / "secrets.yaml"
        store.get().authorization = "Basic YTpi"
        store.relocate_secrets(secrets)

        store.relocate_secrets(None)

        assert not secrets.exists()
        data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        assert "secrets" not in data
        assert data["repos"]["default"]["authorization"] == "Basic YTpi"


class TestLoading:
    """Tests for reading configuration files."""

    def test_missing_file_is_empty(self, config_file):
        """Test that a missing file is not an error."""
        assert ConfigStore(config_file).repos() == {}
        assert not config_file.exists()

    def test_empty_file_is_empty(self, config_file):
        """Test that an empty file is treated as no configuration."""
        config_file.write_text("", encoding="utf-8")

        assert ConfigStore(config_file).repos() == {}

    def test_invalid_yaml_raises(self, config_file):
        """Test that YAML syntax errors become ConfigError."""
        config_file.write_text("repos: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError, match="Error parsing YAML"):
            ConfigStore(config_file)

    def test_non_mapping_raises(self, config_file):
        """Test that a list at top level is rejected."""
        config_file.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="mapping"):
            ConfigStore(config_file)

    def test_default_file_honors_environment(self, monkeypatch, tmp_path):
        """Test the GEMNEXUS_CONFIG override."""
        monkeypatch.setenv("GEMNEXUS_CONFIG", str(tmp_path / "custom.yaml"))

        assert default_file() == tmp_path / "custom.yaml"
