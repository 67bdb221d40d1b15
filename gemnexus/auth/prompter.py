"""
Interactive prompting for URLs, usernames and passwords.

Library code never reads the terminal directly; it asks a CredentialPrompter.
The CLI uses TerminalPrompter, tests pass a scripted implementation.
"""

from __future__ import annotations

import getpass
from typing import Protocol


class CredentialPrompter(Protocol):
    """Capability to ask the operator for text and secrets."""

    def ask_text(self, prompt: str) -> str:
        """Ask for a value that may be echoed (URL, username, y/N)."""
        ...

    def ask_secret(self, prompt: str) -> str:
        """Ask for a value without echoing it to the terminal."""
        ...


class TerminalPrompter:
    """Prompts on the controlling terminal.

    ask_secret relies on getpass, which switches terminal echo off only for
    the duration of the read and restores it in a ``finally`` block, so echo
    comes back even when the read is interrupted (Ctrl-C, EOF).
    """

    def ask_text(self, prompt: str) -> str:
        return input(prompt)

    def ask_secret(self, prompt: str) -> str:
        return getpass.getpass(prompt)
