"""
Tests for gemnexus.io.client module.

Tests the HTTP client including:
- URL joining
- Header handling (User-Agent, Authorization stripping)
- TLS verification precedence
- Proxy routing and no_proxy bypass
- Fixed read timeout and no redirect following
- Transport failures
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
import requests_mock

from gemnexus.config import SslVerifyMode
from gemnexus.exceptions import ConfigError, TransportError
from gemnexus.io import READ_TIMEOUT, HttpMethod, ProxyResolver, UploadClient
from gemnexus.io.client import USER_AGENT


@pytest.fixture
def config(store):
    """Provide the default repo configured for repo.example.com."""
    cfg = store.get()
    cfg.url = "https://repo.example.com/"
    return cfg


def _fake_session(status_code: int = 201, reason: str = "Created") -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = MagicMock(
        status_code=status_code, reason=reason, content=b""
    )
    return session


class TestRequest:
    """Tests for UploadClient.request against a mocked server."""

    def test_put_joins_url_and_returns_raw_response(self, config):
        """Test URL construction and response passthrough."""
        client = UploadClient(config, ProxyResolver(environ={}))

        with requests_mock.Mocker() as m:
            m.put(
                "https://repo.example.com/gems/foo-1.0.gem",
                status_code=201,
                reason="Created",
                content=b"ok",
            )
            raw = client.request(HttpMethod.PUT, "gems/foo-1.0.gem", body=b"data")

        assert raw.status_code == 201
        assert raw.reason == "Created"
        assert raw.body == b"ok"
        assert m.last_request.url == "https://repo.example.com/gems/foo-1.0.gem"
        assert m.last_request.body == b"data"

    @pytest.mark.parametrize("method", list(HttpMethod))
    def test_every_method_is_sent(self, config, method):
        """Test that each HttpMethod maps onto its verb."""
        client = UploadClient(config, ProxyResolver(environ={}))

        with requests_mock.Mocker() as m:
            m.register_uri(method.value, "https://repo.example.com/gems", status_code=200)
            client.request(method, "gems")

        assert m.last_request.method == method.value

    def test_headers(self, config):
        """Test User-Agent and whitespace-stripped Authorization."""
        client = UploadClient(config, ProxyResolver(environ={}))

        with requests_mock.Mocker() as m:
            m.put("https://repo.example.com/gems/a.gem", status_code=201)
            client.request(
                HttpMethod.PUT,
                "gems/a.gem",
                headers={"Authorization": "  Basic YTpi\n"},
                body=b"x",
            )

        assert m.last_request.headers["User-Agent"] == USER_AGENT
        assert m.last_request.headers["Authorization"] == "Basic YTpi"

    def test_redirect_is_not_followed(self, config):
        """Test that a 3xx is returned instead of followed."""
        client = UploadClient(config, ProxyResolver(environ={}))

        with requests_mock.Mocker() as m:
            m.put(
                "https://repo.example.com/gems/a.gem",
                status_code=302,
                reason="Found",
                headers={"Location": "https://elsewhere.example.com/"},
            )
            raw = client.request(HttpMethod.PUT, "gems/a.gem", body=b"x")

        assert raw.status_code == 302
        assert m.call_count == 1

    @pytest.mark.parametrize(
        "exc",
        [
            requests.exceptions.ConnectTimeout,
            requests.exceptions.ReadTimeout,
            requests.exceptions.SSLError,
            requests.exceptions.ConnectionError,
        ],
    )
    def test_transport_failures_raise_transport_error(self, config, exc):
        """Test that requests exceptions are wrapped and chained."""
        client = UploadClient(config, ProxyResolver(environ={}))

        with requests_mock.Mocker() as m:
            m.put("https://repo.example.com/gems/a.gem", exc=exc)
            with pytest.raises(TransportError) as info:
                client.request(HttpMethod.PUT, "gems/a.gem", body=b"x")

        assert isinstance(info.value.__cause__, exc)

    def test_missing_url_raises_config_error(self, store):
        """Test that an unconfigured repo fails before any request."""
        session = _fake_session()
        client = UploadClient(store.get("empty"), ProxyResolver(environ={}), session=session)

        with pytest.raises(ConfigError, match="no URL configured"):
            client.request(HttpMethod.GET, "gems")

        session.request.assert_not_called()


class TestTransportSettings:
    """Tests for timeout, TLS and proxy arguments passed to requests."""

    def test_read_timeout_and_redirects(self, config):
        """Test the fixed read timeout and disabled redirects."""
        session = _fake_session()
        client = UploadClient(config, ProxyResolver(environ={}), session=session)

        client.request(HttpMethod.PUT, "gems/a.gem", body=b"x")

        kwargs = session.request.call_args.kwargs
        assert kwargs["timeout"][1] == READ_TIMEOUT == 300
        assert kwargs["allow_redirects"] is False

    def test_verify_peer_by_default(self, config):
        """Test the default TLS mode."""
        session = _fake_session()
        client = UploadClient(config, ProxyResolver(environ={}), session=session)

        client.request(HttpMethod.GET, "gems")

        assert session.request.call_args.kwargs["verify"] is True

    def test_stored_mode_used(self, config):
        """Test that the stored ssl_verify_mode applies."""
        config.ssl_verify_mode = SslVerifyMode.NONE
        session = _fake_session()
        client = UploadClient(config, ProxyResolver(environ={}), session=session)

        client.request(HttpMethod.GET, "gems")

        assert session.request.call_args.kwargs["verify"] is False

    def test_override_beats_stored_mode(self, config):
        """Test that the per-invocation override wins."""
        config.ssl_verify_mode = SslVerifyMode.PEER
        session = _fake_session()
        client = UploadClient(
            config,
            ProxyResolver(environ={}),
            ssl_verify_mode=SslVerifyMode.NONE,
            session=session,
        )

        client.request(HttpMethod.GET, "gems")

        assert session.request.call_args.kwargs["verify"] is False

    def test_proxy_with_credentials(self, config):
        """Test that the resolved proxy is passed to requests."""
        session = _fake_session()
        resolver = ProxyResolver(environ={"https_proxy": "http://bob:pw@proxy:8080"})
        client = UploadClient(config, resolver, session=session)

        client.request(HttpMethod.GET, "gems")

        proxies = session.request.call_args.kwargs["proxies"]
        assert proxies == {
            "http": "http://bob:pw@proxy:8080",
            "https": "http://bob:pw@proxy:8080",
        }

    def test_no_proxy_host_sent_directly(self, config):
        """Test that no_proxy bypasses https_proxy."""
        session = _fake_session()
        resolver = ProxyResolver(
            environ={"no_proxy": "repo.example.com", "https_proxy": "http://proxy:8080"}
        )
        client = UploadClient(config, resolver, session=session)

        client.request(HttpMethod.GET, "gems")

        assert session.request.call_args.kwargs["proxies"] is None

    def test_session_ignores_environment(self):
        """Test that requests itself does not apply proxy variables."""
        from gemnexus.io import make_session

        session = make_session()

        assert session.trust_env is False
        assert session.headers["User-Agent"] == USER_AGENT
