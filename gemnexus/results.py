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

"""Public API return types for gemnexus.

RawResponse is what UploadClient hands back for a single HTTP request.
UploadOutcome is the classification of that response made by the upload
orchestrator: exactly one of Success, DeploymentRejected, Unauthorized,
ServerError or OtherFailure.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from gemnexus.core import classify_response
        from gemnexus.results import RawResponse, Unauthorized

        outcome = classify_response(RawResponse(401, "Unauthorized", b""))
        assert outcome == Unauthorized()
        print(outcome.describe("foo-1.0.gem"))  # "Unauthorized"
        ```
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RawResponse:
    """Uninterpreted HTTP response.

    Attributes:
        status_code: Numeric HTTP status code.
        reason: Status message sent by the server (e.g., "Created").
        body: Raw response body.
    """

    status_code: int
    reason: str
    body: bytes


@dataclass(frozen=True)
class Success:
    """The server accepted the artifact (2xx)."""

    message: str

    succeeded = True

    def describe(self, artifact_name: str) -> str:
        return f"{self.message} {artifact_name}"


@dataclass(frozen=True)
class DeploymentRejected:
    """HTTP 400, typically a redeploy into a repository that forbids it."""

    succeeded = False

    def describe(self, artifact_name: str) -> str:
        return "something went wrong - maybe (re)deployment is not allowed"


@dataclass(frozen=True)
class Unauthorized:
    """HTTP 401."""

    succeeded = False

    def describe(self, artifact_name: str) -> str:
        return "Unauthorized"


@dataclass(frozen=True)
class ServerError:
    """HTTP 500."""

    succeeded = False

    def describe(self, artifact_name: str) -> str:
        return "something went wrong"


@dataclass(frozen=True)
class OtherFailure:
    """Any other status outside 2xx, including unfollowed redirects.

    Attributes:
        status_code: Numeric HTTP status code.
        message: Status message sent by the server.
    """

    status_code: int
    message: str

    succeeded = False

    def describe(self, artifact_name: str) -> str:
        return f"{self.message} {artifact_name}"


UploadOutcome = Success | DeploymentRejected | Unauthorized | ServerError | OtherFailure
