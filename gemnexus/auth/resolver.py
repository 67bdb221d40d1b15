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

"""Credential resolution for Nexus uploads.

This module turns a username/password pair into the HTTP Basic
Authorization header sent with every upload, and decides whether that
header is written back into the repository configuration.

Rules:

- An explicit ``USER:PASS`` string (``--credential``) is used as-is, no
  prompt is shown
- Otherwise the operator is prompted for username and password
- The anonymous credential ``:`` (empty username and password) resolves to
  no header at all; it is how stored credentials are deleted
- The result is stored in the repository configuration unless the
  configuration is in always-prompt mode, overwriting any previous value
  (with "nothing" for the anonymous credential)

Example:
    Resolve and store credentials:
        ```python
        from gemnexus.auth import AuthResolver, TerminalPrompter
        from gemnexus.config import ConfigStore

        config = ConfigStore().get()
        header = AuthResolver(TerminalPrompter()).sign_in(config)
        ```
"""

from __future__ import annotations

import base64
from dataclasses import dataclass

from gemnexus.auth.prompter import CredentialPrompter
from gemnexus.config import ConfigStore, RepositoryConfig
from gemnexus.exceptions import ConfigError
from gemnexus.logging import Logger, get_global_logger


@dataclass(frozen=True)
class Credential:
    """Username and password for HTTP Basic authentication.

    Attributes:
        username: Account name, empty for the anonymous credential.
        password: Account password, empty for the anonymous credential.
    """

    username: str
    password: str

    @property
    def is_anonymous(self) -> bool:
        return self.username == "" and self.password == ""


ANONYMOUS = Credential("", "")


def parse_credential(token: str) -> Credential:
    """Split a ``USER:PASS`` string at its first colon.

    Raises:
        ConfigError: If the string contains no colon.
    """
    username, sep, password = token.partition(":")
    if not sep:
        raise ConfigError('credentials must be given in "Username:Password" format')
    return Credential(username, password)


def authorization_header(credential: Credential) -> str | None:
    """Build the Basic Authorization header value.

    Returns:
        ``"Basic " + base64("user:pass")`` without any whitespace, or None
            for the anonymous credential.
    """
    if credential.is_anonymous:
        return None
    token = f"{credential.username}:{credential.password}".encode("utf-8")
    return "Basic " + base64.b64encode(token).decode("ascii")


class AuthResolver:
    """Collects credentials and conditionally persists them.

    Attributes:
        prompter: Source of interactive answers.
    """

    def __init__(
        self, prompter: CredentialPrompter, logger: Logger | None = None
    ) -> None:
        self.prompter = prompter
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    def sign_in(
        self, config: RepositoryConfig, credential: str | None = None
    ) -> str | None:
        """Resolve the Authorization header for a repository.

        Args:
            config: Repository slot that receives the header unless it is in
                always-prompt mode.
            credential: Explicit ``USER:PASS`` string. When None, the
                operator is prompted.

        Returns:
            The Authorization header value, or None for the anonymous
                credential.

        Raises:
            ConfigError: If an explicit credential has no colon, or if the
                store is encrypted and cannot be written.
        """
        if credential is not None:
            resolved = parse_credential(credential)
            self.logger.verbose("AUTH", "Using credentials given on the command line")
        else:
            print("Enter your Nexus credentials")
            username = self.prompter.ask_text("Username: ")
            password = self.prompter.ask_secret("Password: ")
            resolved = Credential(username, password)

        authorization = authorization_header(resolved)

        if not config.always_prompt:
            config.authorization = authorization
            if authorization:
                print(f"Your Nexus credentials have been stored in {config}")
            else:
                print(f"Your Nexus credentials have been deleted from {config}")
        else:
            self.logger.verbose("AUTH", "Always-prompt mode: credentials not stored")

        return authorization

    def prompt_encryption(self, store: ConfigStore) -> None:
        """Ask for the encryption password and hand it to the store."""
        password = self.prompter.ask_secret(
            "Enter your Nexus encryption credentials (no prompt): "
        )
        store.unlock(password)
