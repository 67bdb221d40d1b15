"""
Pytest configuration and shared fixtures for gemnexus tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gemnexus.config import ConfigStore

PROXY_VARIABLES = (
    "http_proxy",
    "HTTP_PROXY",
    "https_proxy",
    "HTTPS_PROXY",
    "no_proxy",
    "NO_PROXY",
    "GEMNEXUS_CONFIG",
)


class ScriptedPrompter:
    """CredentialPrompter that replays canned answers and records prompts."""

    def __init__(self, texts: list[str] | None = None, secrets: list[str] | None = None):
        self.texts = list(texts or [])
        self.secrets = list(secrets or [])
        self.prompts: list[str] = []

    def ask_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.texts:
            raise AssertionError(f"unexpected text prompt: {prompt!r}")
        return self.texts.pop(0)

    def ask_secret(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.secrets:
            raise AssertionError(f"unexpected secret prompt: {prompt!r}")
        return self.secrets.pop(0)


@pytest.fixture(autouse=True)
def clean_proxy_env(monkeypatch):
    """Keep the developer's proxy settings out of every test."""
    for name in PROXY_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Provide a path for a not-yet-existing configuration file."""
    return tmp_path / "nexus.yaml"


@pytest.fixture
def store(config_file: Path) -> ConfigStore:
    """Provide an empty configuration store backed by a temporary file."""
    return ConfigStore(config_file)


@pytest.fixture
def prompter_factory():
    """
    Factory fixture for scripted prompters.

    Usage:
        prompter = prompter_factory(texts=["alice"], secrets=["pw"])
    """
    return ScriptedPrompter


@pytest.fixture
def create_gem(tmp_path: Path):
    """
    Factory fixture for creating fake gem files.

    Usage:
        path = create_gem("foo-1.0.gem", b"payload")
    """

    def _create(filename: str, data: bytes = b"gem payload") -> Path:
        path = tmp_path / "pkg" / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _create
