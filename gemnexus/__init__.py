"""
gemnexus - upload gems to a Nexus repository

A Python CLI for pushing built gem packages to a rubygems repository hosted
on a Nexus server over HTTP(S).

gemnexus provides:
  - Named repository configurations, each with its own URL and credentials
  - Stored HTTP Basic credentials, or prompting on every run
  - Optional encryption of stored credentials with a master password
  - Optional separate secrets file for credentials
  - Transparent HTTP proxy traversal (http_proxy/https_proxy/no_proxy)
  - Fail-fast batch uploads with clear per-gem outcomes

Quick Start
-----------
Upload a gem (prompts for the repository URL and credentials once):

    $ gem-nexus pkg/foo-1.0.gem

For full CLI documentation:

    $ gem-nexus --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Upload orchestration and administrative operations.
config : package
    YAML configuration store and credential encryption.
auth : package
    Credential prompting and Authorization header resolution.
io : package
    Proxy resolution and the HTTP client.

Public API
----------
    from gemnexus.config import ConfigStore
    from gemnexus.core import UploadOptions, UploadOrchestrator, classify_response
    from gemnexus.io import ProxyResolver, UploadClient
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Upload gems to a rubygems repository on a Nexus server"

from gemnexus.exceptions import ConfigError, GemNexusError, TransportError
from gemnexus.results import (
    DeploymentRejected,
    OtherFailure,
    RawResponse,
    ServerError,
    Success,
    Unauthorized,
    UploadOutcome,
)

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "GemNexusError",
    "ConfigError",
    "TransportError",
    "RawResponse",
    "UploadOutcome",
    "Success",
    "DeploymentRejected",
    "Unauthorized",
    "ServerError",
    "OtherFailure",
]
