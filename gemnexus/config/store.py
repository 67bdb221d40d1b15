# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Persistent per-repository settings for gemnexus.

The configuration file is YAML. Each named repository slot ("repo key")
holds its own URL, SSL verification mode and stored authorization; the
always-prompt and encryption flags apply to the whole file.

File Layout:

    always_prompt: false
    encrypted: false
    salt: <base64, written once encryption has been enabled>
    secrets: /home/me/.gem/nexus-secrets.yaml   # optional
    repos:
      default:
        url: https://nexus.example.com/repository/gems
        ssl_verify_mode: peer
        authorization: Basic dXNlcjpwYXNz       # unless a secrets file is set

When a secrets file is configured, authorizations live there instead,
as a flat mapping of repo key to authorization.

Key Features:

- Repository slots are created lazily on first access and never deleted
- Stored URLs never carry a trailing slash
- Optional Fernet encryption of stored authorizations (see crypto.py)
- Authorizations can be moved into a separate secrets file and back
- Files are written with owner-only permissions

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from gemnexus.config import ConfigStore

        store = ConfigStore(Path("~/.gem/nexus.yaml").expanduser())
        config = store.get("internal")
        config.url = "https://nexus.example.com/repository/gems/"
        print(config.url)  # https://nexus.example.com/repository/gems
        ```
"""

from __future__ import annotations

import base64
from enum import Enum
import os
from pathlib import Path
from typing import Any

import yaml

from gemnexus.config.crypto import SecretCipher
from gemnexus.exceptions import ConfigError

DEFAULT_REPO = "default"
CONFIG_ENV_VAR = "GEMNEXUS_CONFIG"


class SslVerifyMode(Enum):
    """TLS certificate verification mode for https repositories."""

    PEER = "peer"
    NONE = "none"


def default_file() -> Path:
    """Return the configuration file used when none is given explicitly.

    Honors the GEMNEXUS_CONFIG environment variable, otherwise
    ~/.gem/nexus.yaml.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gem" / "nexus.yaml"


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """Load a YAML mapping, treating a missing or empty file as empty.

    Raises:
        ConfigError: For invalid YAML or a top-level value that is not a
            mapping.
    """
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {p}")
    return data


def _dump_yaml_file(data: dict[str, Any], p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)
    # Credentials may be inside
    os.chmod(p, 0o600)


# -------------------------------
# Store
# -------------------------------


class ConfigStore:
    """Durable key/value store of per-repository settings.

    Every mutation is written to disk immediately, so a value set through
    the store is persisted before any later request relies on it.

    Attributes:
        config_file: Path to the YAML configuration file.
        data: In-memory copy of the configuration file.
    """

    def __init__(self, config_file: Path | None = None) -> None:
        self.config_file = Path(config_file) if config_file else default_file()
        self.data: dict[str, Any] = _load_yaml_file(self.config_file)
        self._password: str | None = None
        self._cipher_cache: tuple[str, SecretCipher] | None = None

    def __str__(self) -> str:
        return str(self.config_file)

    def get(self, repo_key: str | None = None) -> RepositoryConfig:
        """Return the handle for a repository slot (``default`` if None)."""
        key = repo_key or DEFAULT_REPO
        self._repo(key)
        return RepositoryConfig(self, key)

    def repos(self) -> dict[str, str | None]:
        """Map every configured repo key to its URL."""
        return {
            key: settings.get("url")
            for key, settings in self.data.get("repos", {}).items()
        }

    def save(self) -> None:
        _dump_yaml_file(self.data, self.config_file)

    def _repo(self, repo_key: str) -> dict[str, Any]:
        repos = self.data.setdefault("repos", {})
        settings = repos.get(repo_key)
        if settings is None:
            settings = repos[repo_key] = {}
        return settings

    # ---------------------------------------------------------------- #
    # URL and TLS
    # ---------------------------------------------------------------- #

    def url(self, repo_key: str) -> str | None:
        url = self._repo(repo_key).get("url")
        if url is None:
            return None
        return _strip_trailing_slash(str(url))

    def set_url(self, repo_key: str, url: str) -> None:
        self._repo(repo_key)["url"] = _strip_trailing_slash(url)
        self.save()

    def ssl_verify_mode(self, repo_key: str) -> SslVerifyMode | None:
        raw = self._repo(repo_key).get("ssl_verify_mode")
        if raw is None:
            return None
        try:
            return SslVerifyMode(str(raw).lower())
        except ValueError as err:
            raise ConfigError(
                f"invalid ssl_verify_mode {raw!r} for repo '{repo_key}' in "
                f"{self.config_file} (expected 'peer' or 'none')"
            ) from err

    def set_ssl_verify_mode(self, repo_key: str, mode: SslVerifyMode | None) -> None:
        settings = self._repo(repo_key)
        if mode is None:
            settings.pop("ssl_verify_mode", None)
        else:
            settings["ssl_verify_mode"] = mode.value
        self.save()

    # ---------------------------------------------------------------- #
    # Flags
    # ---------------------------------------------------------------- #

    @property
    def always_prompt(self) -> bool:
        return bool(self.data.get("always_prompt", False))

    def set_always_prompt(self, flag: bool) -> None:
        """Switch always-prompt mode.

        Enabling it deletes every stored credential, since none will be
        read or written from then on.
        """
        if flag:
            self.clear_credentials()
        self.data["always_prompt"] = flag
        self.save()

    @property
    def encrypted(self) -> bool:
        return bool(self.data.get("encrypted", False))

    # ---------------------------------------------------------------- #
    # Authorization
    # ---------------------------------------------------------------- #

    @property
    def secrets_file(self) -> Path | None:
        raw = self.data.get("secrets")
        return Path(raw) if raw else None

    def authorization(self, repo_key: str) -> str | None:
        """Return the stored authorization for a repo, decrypted.

        Raises:
            ConfigError: If the value is encrypted and no (or a wrong)
                encryption password was given to unlock().
        """
        raw = self._read_raw_authorizations().get(repo_key)
        if not raw:
            return None
        if self.encrypted:
            return self._cipher().decrypt(raw)
        return raw

    def set_authorization(self, repo_key: str, authorization: str | None) -> None:
        """Store (or with None, delete) the authorization for a repo."""
        auths = self._read_raw_authorizations()
        if authorization is None:
            auths.pop(repo_key, None)
        elif self.encrypted:
            auths[repo_key] = self._cipher().encrypt(authorization)
        else:
            auths[repo_key] = authorization
        self._write_raw_authorizations(auths)

    def clear_authorization_for_repo(self, repo_key: str) -> None:
        self.set_authorization(repo_key, None)

    def clear_credentials(self) -> None:
        """Delete the stored authorization of every repo."""
        self._write_raw_authorizations({})

    def relocate_secrets(self, path: Path | None) -> None:
        """Move stored authorizations to a secrets file, or back.

        Args:
            path: Secrets file to hold the authorizations from now on. With
                None, the authorizations move back into the configuration
                file and the previous secrets file is deleted.
        """
        auths = self._read_raw_authorizations()
        previous = self.secrets_file
        if path is None:
            self.data.pop("secrets", None)
        else:
            self.data["secrets"] = str(Path(path).expanduser())
        self._write_raw_authorizations(auths)
        if previous is not None and previous != self.secrets_file:
            previous.unlink(missing_ok=True)

    def _read_raw_authorizations(self) -> dict[str, str]:
        secrets = self.secrets_file
        if secrets is not None:
            return {str(k): str(v) for k, v in _load_yaml_file(secrets).items() if v}
        return {
            key: settings["authorization"]
            for key, settings in self.data.get("repos", {}).items()
            if settings.get("authorization")
        }

    def _write_raw_authorizations(self, auths: dict[str, str]) -> None:
        for settings in self.data.get("repos", {}).values():
            settings.pop("authorization", None)
        secrets = self.secrets_file
        if secrets is None:
            for key, value in auths.items():
                self._repo(key)["authorization"] = value
        else:
            _dump_yaml_file(auths, secrets)
        self.save()

    # ---------------------------------------------------------------- #
    # Encryption
    # ---------------------------------------------------------------- #

    def unlock(self, password: str) -> None:
        """Provide the encryption password for the rest of this run."""
        self._password = password
        self._cipher_cache = None

    def encrypt(self) -> None:
        """Encrypt all stored authorizations with the unlocked password."""
        if self.encrypted:
            return
        if "salt" not in self.data:
            salt = SecretCipher.new_salt()
            self.data["salt"] = base64.b64encode(salt).decode("ascii")
        cipher = self._cipher()
        auths = {
            key: cipher.encrypt(value)
            for key, value in self._read_raw_authorizations().items()
        }
        self.data["encrypted"] = True
        self._write_raw_authorizations(auths)

    def decrypt(self) -> None:
        """Store all authorizations in plain text again."""
        if not self.encrypted:
            return
        cipher = self._cipher()
        auths = {
            key: cipher.decrypt(value)
            for key, value in self._read_raw_authorizations().items()
        }
        self.data["encrypted"] = False
        self.data.pop("salt", None)
        self._write_raw_authorizations(auths)

    def _cipher(self) -> SecretCipher:
        if self._password is None:
            raise ConfigError(
                f"credentials in {self.config_file} are encrypted - "
                "an encryption password is required"
            )
        salt = self.data.get("salt")
        if not salt:
            raise ConfigError(f"encryption salt missing from {self.config_file}")
        # Key derivation is slow; derive once per password and salt
        if self._cipher_cache is None or self._cipher_cache[0] != salt:
            cipher = SecretCipher.from_password(self._password, base64.b64decode(salt))
            self._cipher_cache = (salt, cipher)
        return self._cipher_cache[1]


class RepositoryConfig:
    """Handle onto one repository slot of a ConfigStore.

    Holds no copy of the settings: every attribute read and write goes
    through the store, so all holders of a handle observe the same values.

    Example:
        ```python
        config = store.get()
        if config.url is None:
            config.url = "https://nexus.example.com/repository/gems"
        config.authorization = None  # deletes the stored credentials
        ```
    """

    def __init__(self, store: ConfigStore, repo_key: str) -> None:
        self.store = store
        self.repo_key = repo_key

    def __str__(self) -> str:
        return str(self.store)

    def __repr__(self) -> str:
        return f"RepositoryConfig({self.repo_key!r}, {str(self.store)!r})"

    @property
    def url(self) -> str | None:
        return self.store.url(self.repo_key)

    @url.setter
    def url(self, value: str) -> None:
        self.store.set_url(self.repo_key, value)

    @property
    def authorization(self) -> str | None:
        return self.store.authorization(self.repo_key)

    @authorization.setter
    def authorization(self, value: str | None) -> None:
        self.store.set_authorization(self.repo_key, value)

    @property
    def ssl_verify_mode(self) -> SslVerifyMode | None:
        return self.store.ssl_verify_mode(self.repo_key)

    @ssl_verify_mode.setter
    def ssl_verify_mode(self, value: SslVerifyMode | None) -> None:
        self.store.set_ssl_verify_mode(self.repo_key, value)

    @property
    def always_prompt(self) -> bool:
        return self.store.always_prompt

    @property
    def encrypted(self) -> bool:
        return self.store.encrypted
