"""
HTTP proxy selection for outbound repository requests.

A proxy is chosen per target URL, never cached across hosts:

1. An unparsable target URL means "no proxy" (never raises).
2. If ``no_proxy`` (or ``NO_PROXY``) lists the target host, no proxy is used.
   Entries are split on commas with optional following spaces and compared
   as exact, case-sensitive strings. There is no CIDR, suffix or wildcard
   matching.
3. The variable is ``http_proxy`` for http targets and ``https_proxy``
   otherwise.
4. An explicit override (``--http-proxy``) wins over the lower-case
   variable, which wins over the upper-case one. The NO_PROXY sentinel
   (``--no-http-proxy``) disables proxying.
5. The selected proxy URL must parse; a bad value is a ConfigError.

Example:
    >>> resolver = ProxyResolver(environ={"https_proxy": "http://proxy:8080"})
    >>> resolver.resolve("https://repo.example.com/gems/foo-1.0.gem")
    ProxySpec(scheme='http', host='proxy', port=8080, user=None, password=None)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
import re
from urllib.parse import quote, unquote, urlsplit

from gemnexus.exceptions import ConfigError
from gemnexus.logging import Logger, get_global_logger

NO_PROXY = object()
"""Override sentinel that disables proxying regardless of the environment."""

_NO_PROXY_SPLIT = re.compile(r", *")
_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class ProxySpec:
    """A parsed HTTP proxy.

    Attributes:
        scheme: "http" or "https".
        host: Proxy hostname.
        port: Proxy port (scheme default when the URL has none).
        user: Proxy username, if the proxy URL carries one.
        password: Proxy password, if the proxy URL carries one.
    """

    scheme: str
    host: str
    port: int
    user: str | None = None
    password: str | None = None

    @property
    def url(self) -> str:
        """Proxy URL in the form requests expects, credentials included."""
        auth = ""
        if self.user is not None:
            auth = quote(self.user, safe="")
            if self.password is not None:
                auth += ":" + quote(self.password, safe="")
            auth += "@"
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{auth}{host}:{self.port}"

    @classmethod
    def parse(cls, value: str) -> ProxySpec:
        """Parse a proxy URL such as ``http://user:pw@proxy:3128``.

        Raises:
            ConfigError: If the value cannot be parsed, has no host, or uses
                a scheme other than http/https.
        """
        try:
            parts = urlsplit(value)
            port = parts.port
        except ValueError as err:
            raise ConfigError(f"invalid proxy URL {value!r}: {err}") from err
        if parts.scheme not in _DEFAULT_PORTS:
            raise ConfigError(
                f"invalid proxy URL {value!r}: scheme must be http or https"
            )
        if not parts.hostname:
            raise ConfigError(f"invalid proxy URL {value!r}: no host")
        return cls(
            scheme=parts.scheme,
            host=parts.hostname,
            port=port or _DEFAULT_PORTS[parts.scheme],
            user=unquote(parts.username) if parts.username is not None else None,
            password=unquote(parts.password) if parts.password is not None else None,
        )


def _raw_host(netloc: str) -> str:
    """Host part of a netloc with its original letter case."""
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        return hostport[1 : hostport.find("]")]
    return hostport.partition(":")[0]


class ProxyResolver:
    """Decides whether and through which proxy a target URL is reached.

    Attributes:
        override: Explicit proxy URL, the NO_PROXY sentinel, or None to defer
            to the environment.
        environ: Environment mapping consulted for proxy variables.
    """

    def __init__(
        self,
        override: str | object | None = None,
        environ: Mapping[str, str] | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.override = override
        self.environ = os.environ if environ is None else environ
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    def resolve(self, target_url: str) -> ProxySpec | None:
        """Return the proxy for target_url, or None to connect directly.

        Raises:
            ConfigError: If the selected proxy URL is invalid.
        """
        try:
            target = urlsplit(target_url)
        except ValueError:
            return None
        host = _raw_host(target.netloc)
        if not host:
            return None

        if self._excluded(host):
            self.logger.debug("PROXY", f"{host} listed in no_proxy, connecting directly")
            return None

        key = "http_proxy" if target.scheme == "http" else "https_proxy"
        if self.override is not None:
            proxy = self.override
        else:
            # A set but empty lower-case variable still wins
            if key in self.environ:
                proxy = self.environ[key]
            else:
                proxy = self.environ.get(key.upper())
        if proxy is None or proxy is NO_PROXY or proxy == "":
            return None

        spec = ProxySpec.parse(str(proxy))
        self.logger.debug("PROXY", f"{host} via {spec.host}:{spec.port}")
        return spec

    def _excluded(self, host: str) -> bool:
        no_proxy = self.environ.get("no_proxy") or self.environ.get("NO_PROXY")
        if not no_proxy:
            return False
        return host in _NO_PROXY_SPLIT.split(no_proxy)
