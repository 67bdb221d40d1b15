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

"""Core orchestration for gemnexus.

This module provides the high-level upload workflow and the administrative
operations on the configuration store.

Upload Workflow:

1. Ensure configured
   - Ask for the encryption password if stored credentials are encrypted
   - Resolve the repository URL (prompt and store it if unset, or when the
     repo is being cleared)
   - Resolve credentials (if none stored, in always-prompt mode, or when the
     repo is being cleared)
2. Upload every gem in order
   - PUT <url>/gems/<basename> with the raw file bytes
   - Classify the response
   - Stop at the first non-success outcome; later gems are not attempted

Response Classification:

- 400 -> DeploymentRejected
- 401 -> Unauthorized
- 500 -> ServerError
- other non-2xx (including 3xx, redirects are not followed) -> OtherFailure
- 2xx -> Success

Example:
    Upload two gems:
        ```python
        from gemnexus.config import ConfigStore
        from gemnexus.core import UploadOptions, UploadOrchestrator

        orchestrator = UploadOrchestrator(ConfigStore(), UploadOptions())
        exit_code = orchestrator.run(["pkg/foo-1.0.gem", "pkg/bar-2.1.gem"])
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from gemnexus.auth import AuthResolver, CredentialPrompter, TerminalPrompter
from gemnexus.config import ConfigStore, RepositoryConfig, SslVerifyMode
from gemnexus.exceptions import ConfigError
from gemnexus.io import HttpMethod, ProxyResolver, UploadClient
from gemnexus.logging import Logger, get_global_logger
from gemnexus.results import (
    DeploymentRejected,
    OtherFailure,
    RawResponse,
    ServerError,
    Success,
    Unauthorized,
    UploadOutcome,
)


@dataclass(frozen=True)
class UploadOptions:
    """Per-invocation settings for an upload run.

    Attributes:
        repo: Repository key (None selects the default slot).
        url: Repository URL to store when the URL is (re)configured.
        credential: Explicit ``USER:PASS``; skips the credential prompt.
        clear: Re-ask URL and credentials for this repository.
        ssl_verify_mode: TLS override for this run.
        http_proxy: Proxy override (URL or io.NO_PROXY).
    """

    repo: str | None = None
    url: str | None = None
    credential: str | None = None
    clear: bool = False
    ssl_verify_mode: SslVerifyMode | None = None
    http_proxy: str | object | None = None


def classify_response(raw: RawResponse) -> UploadOutcome:
    """Map an HTTP response onto an upload outcome."""
    if raw.status_code == 400:
        return DeploymentRejected()
    if raw.status_code == 401:
        return Unauthorized()
    if raw.status_code == 500:
        return ServerError()
    if not 200 <= raw.status_code < 300:
        return OtherFailure(raw.status_code, raw.reason)
    return Success(raw.reason)


class UploadOrchestrator:
    """Runs one upload invocation: configure once, then upload in order.

    Attributes:
        store: Configuration store of this run.
        config: Repository slot selected by ``options.repo``.
        options: Per-invocation settings.
    """

    def __init__(
        self,
        store: ConfigStore,
        options: UploadOptions,
        prompter: CredentialPrompter | None = None,
        logger: Logger | None = None,
        client: UploadClient | None = None,
    ) -> None:
        self.store = store
        self.options = options
        self.config: RepositoryConfig = store.get(options.repo)
        self.prompter = prompter or TerminalPrompter()
        self._logger = logger
        self.auth = AuthResolver(self.prompter, logger)
        self.client = client or UploadClient(
            self.config,
            ProxyResolver(override=options.http_proxy, logger=logger),
            ssl_verify_mode=options.ssl_verify_mode,
            logger=logger,
        )
        self._signed_in = False
        self._authorization: str | None = None

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    @property
    def authorization(self) -> str | None:
        """Header resolved this run, else the one stored in the config."""
        if self._signed_in:
            return self._authorization
        return self.config.authorization

    def ensure_configured(self) -> None:
        """Resolve encryption password, URL and credentials.

        Raises:
            ConfigError: If no URL can be resolved or stored credentials
                cannot be decrypted.
        """
        if self.config.encrypted:
            self.auth.prompt_encryption(self.store)
        if self.config.url is None or self.options.clear:
            self.configure_url()
        if (
            self.options.clear
            or self.config.always_prompt
            or self.authorization is None
        ):
            self.sign_in()

    def configure_url(self) -> None:
        """Take the URL from the options or a prompt and store it.

        Raises:
            ConfigError: If the value has no host part.
        """
        if self.options.url:
            url = self.options.url
        else:
            print("Enter the URL of the rubygems repository on a Nexus server")
            url = self.prompter.ask_text("URL: ").strip()

        try:
            host = urlsplit(url).hostname
        except ValueError:
            host = None
        if not host:
            raise ConfigError("no URL given")

        self.config.url = url
        print(f"The Nexus URL has been stored in {self.config}")

    def sign_in(self) -> None:
        self._authorization = self.auth.sign_in(
            self.config, credential=self.options.credential
        )
        self._signed_in = True

    def upload_one(self, path: Path) -> UploadOutcome:
        """PUT a single gem to the deploy endpoint and classify the result.

        Raises:
            ConfigError: If the gem file cannot be read.
            TransportError: If the request could not be completed.
        """
        try:
            body = path.read_bytes()
        except OSError as err:
            raise ConfigError(f"cannot read gem {path}: {err}") from err
        headers = {
            "Content-Length": str(len(body)),
            "Content-Type": "application/octet-stream",
        }
        authorization = self.authorization
        if authorization:
            headers["Authorization"] = authorization.strip()

        raw = self.client.request(
            HttpMethod.PUT, f"gems/{path.name}", headers=headers, body=body
        )
        return classify_response(raw)

    def upload(self, paths: list[Path]) -> UploadOutcome | None:
        """Upload gems in order, stopping at the first failure.

        Returns:
            The first non-success outcome, or the last Success (None for an
                empty list).
        """
        count = len(paths)
        print(f"Uploading {count} gem{'s' if count != 1 else ''} to Nexus...")

        outcome: UploadOutcome | None = None
        for index, path in enumerate(paths, start=1):
            self.logger.step(index, count, f"Uploading {path.name}...")
            outcome = self.upload_one(path)
            print(outcome.describe(path.name))
            if not outcome.succeeded:
                self.logger.verbose(
                    "UPLOAD",
                    f"Aborting: {count - index} remaining gem(s) not uploaded",
                )
                return outcome
        return outcome

    def run(self, paths: list[Path | str]) -> int:
        """Configure, upload, and return the process exit code (0 or 1)."""
        gems = [Path(p) for p in paths]
        if not gems:
            raise ConfigError("Please specify at least one gem file to upload")
        self.ensure_configured()
        try:
            outcome = self.upload(gems)
        finally:
            self.client.close()
        return 0 if outcome is not None and outcome.succeeded else 1


# -------------------------------
# Administrative operations
# -------------------------------


def _confirm(prompter: CredentialPrompter, question: str) -> bool:
    return prompter.ask_text(f"{question} (y/N) ").strip() == "y"


def list_repos(store: ConfigStore) -> dict[str, str | None]:
    """Print every configured repo key with its URL."""
    repos = store.repos()
    print()
    for key, url in repos.items():
        print(f"{key}: {url}")
    print()
    return repos


def enable_always_prompt(store: ConfigStore, prompter: CredentialPrompter) -> bool:
    """Switch to always-prompt mode after confirmation.

    Returns:
        True if the operator confirmed.
    """
    if not _confirm(
        prompter,
        "setup nexus to always prompt username/passwords and delete all current credentials ?",
    ):
        return False
    store.set_always_prompt(True)
    return True


def disable_always_prompt(store: ConfigStore) -> None:
    print("setup nexus to store username/passwords")
    store.set_always_prompt(False)


def clear_all_credentials(store: ConfigStore, prompter: CredentialPrompter) -> bool:
    """Delete every stored credential after confirmation."""
    if not _confirm(prompter, "delete all current credentials ?"):
        return False
    store.clear_credentials()
    return True


def set_encryption(
    store: ConfigStore, prompter: CredentialPrompter, enabled: bool
) -> None:
    """Encrypt (or decrypt) all stored credentials with a master password.

    Raises:
        ConfigError: When decrypting with a wrong password.
    """
    AuthResolver(prompter).prompt_encryption(store)
    if enabled:
        store.encrypt()
    else:
        store.decrypt()
