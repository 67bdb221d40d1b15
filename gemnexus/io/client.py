"""
Single-request HTTP client for a configured Nexus repository.

UploadClient turns (method, path, headers, body) into one HTTP request
against ``<repository url>/<path>`` and returns the raw response. It does
not interpret status codes; that is the upload orchestrator's job.

Behavior:

- TLS verification for https: per-invocation override, else the
  repository's stored ``ssl_verify_mode``, else verify the peer
- Proxying is decided by ProxyResolver for every request; the session
  ignores proxy variables on its own (``trust_env = False``)
- Fixed read timeout of 300 seconds so large gems survive slow VPN links
- Redirects are not followed, a 3xx is returned as-is
- ``Authorization`` is stripped of surrounding whitespace before use
- Any requests transport failure (DNS, connect, TLS, timeout) is raised as
  TransportError

Example:
    >>> from gemnexus.config import ConfigStore
    >>> from gemnexus.io import HttpMethod, ProxyResolver, UploadClient
    >>> config = ConfigStore().get()
    >>> client = UploadClient(config, ProxyResolver())
    >>> raw = client.request(HttpMethod.GET, "gems/foo-1.0.gem")
    >>> raw.status_code
    200
"""

from __future__ import annotations

from enum import Enum

import requests

from gemnexus import __version__
from gemnexus.config import RepositoryConfig, SslVerifyMode
from gemnexus.exceptions import ConfigError, TransportError
from gemnexus.io.proxy import ProxyResolver
from gemnexus.logging import Logger, get_global_logger
from gemnexus.results import RawResponse

CONNECT_TIMEOUT = 60
READ_TIMEOUT = 300
USER_AGENT = f"gemnexus/{__version__}"


class HttpMethod(Enum):
    """Request methods the client can send."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


# Every HttpMethod member must appear here
_VERBS: dict[HttpMethod, str] = {
    HttpMethod.GET: "GET",
    HttpMethod.POST: "POST",
    HttpMethod.PUT: "PUT",
    HttpMethod.DELETE: "DELETE",
}


def make_session() -> requests.Session:
    """Create the requests.Session used for repository calls.

    No retry adapter is mounted: a failed upload is reported, never
    re-sent. ``trust_env`` is off so neither proxy variables nor .netrc
    are applied behind the ProxyResolver's back.
    """
    s = requests.Session()
    s.trust_env = False
    s.headers.update({"User-Agent": USER_AGENT})
    return s


class UploadClient:
    """Executes single requests against one repository.

    Attributes:
        config: Repository slot providing the base URL and TLS mode.
        proxy_resolver: Picks the proxy for each target URL.
        ssl_verify_mode: Per-invocation TLS override (``--ignore-ssl-errors``).
    """

    def __init__(
        self,
        config: RepositoryConfig,
        proxy_resolver: ProxyResolver,
        ssl_verify_mode: SslVerifyMode | None = None,
        logger: Logger | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.proxy_resolver = proxy_resolver
        self.ssl_verify_mode = ssl_verify_mode
        self._logger = logger
        self._session = session

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = make_session()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> UploadClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def url_for(self, path: str) -> str:
        """Join the repository URL and a request path with a single slash.

        Raises:
            ConfigError: If the repository has no URL configured.
        """
        base = self.config.url
        if base is None:
            raise ConfigError(
                f"no URL configured for repo '{self.config.repo_key}' in {self.config}"
            )
        return f"{base}/{path}"

    def verify_mode(self) -> SslVerifyMode:
        return self.ssl_verify_mode or self.config.ssl_verify_mode or SslVerifyMode.PEER

    def proxies_for(self, url: str) -> dict[str, str] | None:
        spec = self.proxy_resolver.resolve(url)
        if spec is None:
            return None
        return {"http": spec.url, "https": spec.url}

    def request(
        self,
        method: HttpMethod,
        path: str,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> RawResponse:
        """Send one request and return the uninterpreted response.

        Args:
            method: Request method.
            path: Path below the repository URL (e.g., "gems/foo-1.0.gem").
            headers: Extra request headers. An Authorization value is
                stripped of surrounding whitespace.
            body: Request body.

        Returns:
            Status code, status message and body of the response.

        Raises:
            ConfigError: If no URL is configured or the proxy is invalid.
            TransportError: If the request could not be completed.
        """
        url = self.url_for(path)
        verb = _VERBS[method]

        request_headers = dict(headers or {})
        if "Authorization" in request_headers:
            request_headers["Authorization"] = request_headers["Authorization"].strip()

        proxies = self.proxies_for(url)
        verify = self.verify_mode() is SslVerifyMode.PEER

        self.logger.verbose("HTTP", f"{verb} {url}")
        if "Authorization" in request_headers:
            self.logger.verbose("HTTP", "use authorization")
        else:
            self.logger.verbose("HTTP", "no authorization")
        if proxies:
            self.logger.verbose("HTTP", f"use proxy at {proxies['https']}")
        if not verify and url.startswith("https"):
            self.logger.verbose("HTTP", "TLS certificate verification disabled")

        try:
            resp = self.session.request(
                verb,
                url,
                headers=request_headers,
                data=body,
                proxies=proxies,
                verify=verify,
                timeout=(CONNECT_TIMEOUT, READ_TIMEOUT),
                allow_redirects=False,
            )
        except requests.RequestException as err:
            raise TransportError(f"{verb} {url} failed: {err}") from err

        self.logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")
        return RawResponse(
            status_code=resp.status_code,
            reason=resp.reason or "",
            body=resp.content,
        )
