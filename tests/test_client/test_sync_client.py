"""Tests for the synchronous HTTP client."""

from __future__ import annotations

import threading

import httpx
import pytest

from onecrm.auth import APIKeyAuth, OAuth2AccessToken
from onecrm.client import Client, RequestOptions, Response
from onecrm.context import Context
from onecrm.exceptions import APIError, AuthError, RequestCancelled, TransportError


BASE_URL = "https://crm.example.com/api.php"


class ClosableBody:
    def __init__(self) -> None:
        self.close_calls = 0

    def __iter__(self):
        yield b'{"name":"ACME"}'

    def close(self) -> None:
        self.close_calls += 1


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


class TestRequestBuilding:
    def test_url_joins_base_and_path(self, make_transport) -> None:
        transport = make_transport()
        with Client(BASE_URL + "/", transport=transport) as client:
            client.get("data/Account").close()
        assert str(transport.last.url) == f"{BASE_URL}/data/Account"
        assert transport.last.method == "GET"

    def test_default_content_type(self, make_transport) -> None:
        transport = make_transport()
        with Client(BASE_URL, transport=transport) as client:
            client.get("me").close()
        assert transport.last.headers["Content-Type"] == "application/json"

    def test_content_type_override(self, make_transport) -> None:
        transport = make_transport()
        opts = RequestOptions().content_type("text/plain").body(b"hi")
        with Client(BASE_URL, transport=transport) as client:
            client.post("notes", opts).close()
        assert transport.last.headers["Content-Type"] == "text/plain"
        assert transport.last.content == b"hi"

    def test_query_parameters(self, make_transport) -> None:
        transport = make_transport()
        opts = (
            RequestOptions()
            .query_value("filter", "x")
            .query_value("filter", "active")
            .query_value("fields", "name", append=True)
            .query_value("fields", "email", append=True)
        )
        with Client(BASE_URL, transport=transport) as client:
            client.get("data/Account", opts).close()
        params = transport.last.url.params
        assert params.get_list("filter") == ["active"]
        assert params.get_list("fields") == ["name", "email"]

    def test_headers_accumulate(self, make_transport) -> None:
        transport = make_transport()
        opts = RequestOptions().header("X-Tag", "a").header("X-Tag", "b")
        with Client(BASE_URL, transport=transport) as client:
            client.get("me", opts).close()
        assert transport.last.headers.get_list("X-Tag") == ["a", "b"]

    def test_json_body_sent(self, make_transport) -> None:
        transport = make_transport()
        with Client(BASE_URL, transport=transport) as client:
            client.patch("data/Account/1", RequestOptions().json_body({"name": "ACME"})).close()
        assert transport.last.method == "PATCH"
        assert transport.last.content == b'{"name":"ACME"}'

    @pytest.mark.parametrize("method", ["get", "post", "put", "patch"])
    def test_verb_helpers(self, make_transport, method: str) -> None:
        transport = make_transport()
        with Client(BASE_URL, transport=transport) as client:
            getattr(client, method)("me").close()
        assert transport.last.method == method.upper()

    def test_body_released_after_send(self, make_transport) -> None:
        transport = make_transport()
        body = ClosableBody()
        with Client(BASE_URL, transport=transport) as client:
            client.post("data/Account", RequestOptions().body(body)).close()
        assert body.close_calls == 1
        assert transport.last.content == b'{"name":"ACME"}'


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class TestAuth:
    def test_bearer_token_applied(self, make_transport) -> None:
        transport = make_transport()
        token = OAuth2AccessToken(access_token="tok123", token_type="Bearer")
        with Client(BASE_URL, auth=token, transport=transport) as client:
            client.get("me").close()
        assert transport.last.headers["Authorization"] == "Bearer tok123"

    def test_no_auth_no_header(self, make_transport) -> None:
        transport = make_transport()
        with Client(BASE_URL, transport=transport) as client:
            client.get("me").close()
        assert "Authorization" not in transport.last.headers

    def test_auth_failure_aborts_before_send(self, make_transport) -> None:
        transport = make_transport()
        body = ClosableBody()
        with Client(BASE_URL, auth=APIKeyAuth(key=""), transport=transport) as client:
            with pytest.raises(AuthError):
                client.post("me", RequestOptions().body(body))
        assert transport.requests == []
        assert body.close_calls == 1


# ---------------------------------------------------------------------------
# Status handling
# ---------------------------------------------------------------------------


class TestStatusHandling:
    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_2xx_returns_response(self, make_transport, status: int) -> None:
        transport = make_transport(lambda request: httpx.Response(status, content=b""))
        with Client(BASE_URL, transport=transport) as client:
            res = client.get("me")
        assert isinstance(res, Response)
        assert res.status_code == status
        assert not res.consumed

    def test_404_raises_api_error(self, make_transport) -> None:
        transport = make_transport(
            lambda request: httpx.Response(404, content=b'{"error":"not found"}')
        )
        with Client(BASE_URL, transport=transport) as client:
            with pytest.raises(APIError) as exc_info:
                client.get("data/Account/missing")
        assert exc_info.value.code == 404
        assert '{"error":"not found"}' in str(exc_info.value)
        assert exc_info.value.body == '{"error":"not found"}'

    @pytest.mark.parametrize("status", [199, 300, 302, 400, 401, 500, 503])
    def test_non_2xx_message_is_body(self, make_transport, status: int) -> None:
        transport = make_transport(lambda request: httpx.Response(status, text=f"status {status}"))
        with Client(BASE_URL, transport=transport) as client:
            with pytest.raises(APIError) as exc_info:
                client.get("me")
        assert exc_info.value.code == status
        assert str(exc_info.value) == f"status {status}"

    def test_error_body_is_closed(self, make_transport) -> None:
        closed = []

        class _Stream(httpx.SyncByteStream):
            def __iter__(self):
                yield b"boom"

            def close(self) -> None:
                closed.append(True)

        transport = make_transport(lambda request: httpx.Response(500, stream=_Stream()))
        with Client(BASE_URL, transport=transport) as client:
            with pytest.raises(APIError, match="boom"):
                client.get("me")
        assert closed

    def test_successful_body_is_json(self, make_transport) -> None:
        transport = make_transport(lambda request: httpx.Response(200, json={"id": "u1"}))
        with Client(BASE_URL, transport=transport) as client:
            assert client.get("me").json() == {"id": "u1"}


# ---------------------------------------------------------------------------
# Transport failures and cancellation
# ---------------------------------------------------------------------------


class TestTransportFailures:
    def test_connect_error(self, make_transport) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with Client(BASE_URL, transport=make_transport(handler)) as client:
            with pytest.raises(TransportError, match="connection refused") as exc_info:
                client.get("me")
        assert not isinstance(exc_info.value, RequestCancelled)

    def test_malformed_url(self, make_transport) -> None:
        transport = make_transport()
        with Client("http://exa mple.com:notaport", transport=transport) as client:
            with pytest.raises(TransportError):
                client.get("me")
        assert transport.requests == []

    def test_cancelled_context_never_sends(self, make_transport) -> None:
        transport = make_transport()
        ctx = Context()
        ctx.cancel()
        body = ClosableBody()
        with Client(BASE_URL, transport=transport) as client:
            with pytest.raises(RequestCancelled, match="cancelled"):
                client.post("me", RequestOptions().context(ctx).body(body))
        assert transport.requests == []
        assert body.close_calls == 1

    def test_client_context_applies(self, make_transport) -> None:
        transport = make_transport()
        ctx = Context()
        with Client(BASE_URL, context=ctx, transport=transport) as client:
            ctx.cancel()
            with pytest.raises(RequestCancelled):
                client.get("me")
        assert transport.requests == []

    def test_per_call_context_overrides_client_context(self, make_transport) -> None:
        transport = make_transport()
        cancelled = Context()
        cancelled.cancel()
        with Client(BASE_URL, context=cancelled, transport=transport) as client:
            client.get("me", RequestOptions().context(Context())).close()
        assert len(transport.requests) == 1

    def test_expired_deadline(self, make_transport) -> None:
        transport = make_transport()
        with Client(BASE_URL, transport=transport) as client:
            with pytest.raises(RequestCancelled, match="deadline"):
                client.get("me", RequestOptions().context(Context(timeout=0)))
        assert transport.requests == []

    def test_cancel_during_send(self, make_transport) -> None:
        ctx = Context()

        def handler(request: httpx.Request) -> httpx.Response:
            ctx.cancel()
            return httpx.Response(200, json={})

        with Client(BASE_URL, transport=make_transport(handler)) as client:
            with pytest.raises(RequestCancelled):
                client.get("me", RequestOptions().context(ctx))

    def test_timeout_clamped_to_deadline(self, make_transport) -> None:
        transport = make_transport()
        ctx = Context(timeout=5.0)
        with Client(BASE_URL, timeout=60.0, transport=transport) as client:
            client.get("me", RequestOptions().context(ctx)).close()
        timeout = transport.last.extensions["timeout"]
        assert 0 < timeout["read"] <= 5.0


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_properties(self) -> None:
        token = OAuth2AccessToken(access_token="t")
        ctx = Context()
        with Client(BASE_URL + "//", auth=token, context=ctx) as client:
            assert client.base_url == BASE_URL
            assert client.auth is token
            assert client.context is ctx

    def test_default_context_is_background(self) -> None:
        with Client(BASE_URL) as client:
            assert not client.context.done
            assert client.context.deadline is None

    def test_shared_across_calls(self, make_transport) -> None:
        transport = make_transport(lambda request: httpx.Response(200, json={"path": request.url.path}))
        with Client(BASE_URL, transport=transport) as client:
            first = client.get("a").json()
            second = client.get("b").json()
        assert first["path"].endswith("/a")
        assert second["path"].endswith("/b")

    def test_concurrent_calls_do_not_share_state(self, make_transport) -> None:
        workers = 8
        barrier = threading.Barrier(workers)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "worker": request.url.params.get_list("worker"),
                    "tag": request.headers.get_list("X-Worker"),
                },
            )

        transport = make_transport(handler)
        results: dict[int, dict] = {}
        errors: list[Exception] = []

        def call(client: Client, index: int) -> None:
            try:
                opts = RequestOptions().query_value("worker", str(index)).header("X-Worker", str(index))
                barrier.wait(timeout=5)
                results[index] = client.get("me", opts).json()
            except Exception as exc:
                errors.append(exc)

        with Client(BASE_URL, auth=OAuth2AccessToken(access_token="tok123"), transport=transport) as client:
            threads = [threading.Thread(target=call, args=(client, i)) for i in range(workers)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert errors == []
        assert len(transport.requests) == workers
        for index in range(workers):
            assert results[index] == {"worker": [str(index)], "tag": [str(index)]}
        for request in transport.requests:
            assert request.url.params.get_list("worker") == request.headers.get_list("X-Worker")
            assert request.headers["Authorization"] == "Bearer tok123"
