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

"""Exception hierarchy for gemnexus.

All exceptions inherit from GemNexusError, so callers can catch every
gemnexus failure with a single except clause. HTTP status outcomes of an
upload (401, 400, 500, ...) are not exceptions; they are reported as
UploadOutcome values (see gemnexus.results).

Example:
    Catching specific error types:
        ```python
        from gemnexus.core import UploadOrchestrator
        from gemnexus.exceptions import ConfigError, TransportError

        try:
            orchestrator.run(["pkg/foo-1.0.gem"])
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except TransportError as e:
            print(f"Network error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "GemNexusError",
    "ConfigError",
    "TransportError",
]


class GemNexusError(Exception):
    """Base exception for all gemnexus errors."""

    pass


class ConfigError(GemNexusError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - No repository URL could be resolved (nothing stored, prompt answer
        has no host)
    - Unreadable or corrupted configuration and secrets files
    - A selected proxy URL that cannot be parsed
    - Encryption password missing or wrong when stored credentials are
        encrypted
    - No gem files given for an upload

    A ConfigError always aborts the run before any upload request is sent.
    """

    pass


class TransportError(GemNexusError):
    """Raised when an HTTP request could not be completed.

    Covers DNS resolution failures, refused connections, TLS handshake or
    certificate errors, and read timeouts. The original requests exception
    is chained as ``__cause__``.
    """

    pass
