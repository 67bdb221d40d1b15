"""Network operations for gemnexus.

Modules:

proxy : module
    Per-URL proxy selection from the environment and CLI overrides.
client : module
    Single-request HTTP client for a configured repository.

Public API:

UploadClient : class
    Sends one request and returns the raw response.
HttpMethod : enum
    GET, POST, PUT or DELETE.
ProxyResolver : class
    Resolves the proxy (if any) for a target URL.
ProxySpec : dataclass
    A parsed proxy URL.

Example:
    from gemnexus.config import ConfigStore
    from gemnexus.io import HttpMethod, ProxyResolver, UploadClient

    client = UploadClient(ConfigStore().get(), ProxyResolver())
    raw = client.request(HttpMethod.PUT, "gems/foo-1.0.gem", body=data)

"""

from .client import READ_TIMEOUT, HttpMethod, UploadClient, make_session
from .proxy import NO_PROXY, ProxyResolver, ProxySpec

__all__ = [
    "NO_PROXY",
    "READ_TIMEOUT",
    "HttpMethod",
    "ProxyResolver",
    "ProxySpec",
    "UploadClient",
    "make_session",
]
