# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for SessionClient against the fake transport."""

from __future__ import annotations

import logging

import pytest

from userinfo_client import (
    NO_SESSION,
    ActiveSession,
    HttpxTransport,
    SessionClient,
    UserInfoTransportError,
)
from userinfo_client.config import BASE_URL_ENV
from userinfo_client.service import decode_user_info
from userinfo_client.errors import UserInfoDecodeError
from userinfo_client.testing import FakeTransport, Reply

BASE_URL = "https://www.example.com"
LOGIN_COOKIE = [("Set-Cookie", "Login=success")]
USER_JSON = b'{"sample1":"John","sample2":"Bob"}'


def _make_client(default: Reply | None = None) -> tuple[SessionClient, FakeTransport]:
    transport = FakeTransport(default)
    return SessionClient(transport, base_url=BASE_URL), transport


def _logged_in_client() -> tuple[SessionClient, FakeTransport]:
    client, transport = _make_client()
    transport.route("/login.asp", Reply(headers=LOGIN_COOKIE))
    assert client.authenticate("good_username", "good_password").result() is True
    return client, transport


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults_to_httpx_transport(self) -> None:
        with SessionClient(base_url=BASE_URL) as client:
            assert isinstance(client._transport, HttpxTransport)
        assert client._transport.is_closed

    def test_base_url_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(BASE_URL_ENV, "http://svc.test/")
        client = SessionClient(FakeTransport())
        assert client.base_url == "http://svc.test"

    def test_explicit_base_url_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(BASE_URL_ENV, "http://svc.test")
        client = SessionClient(FakeTransport(), base_url="https://other.test/")
        assert client.base_url == "https://other.test"

    def test_starts_without_session(self) -> None:
        client, _ = _make_client()
        assert client.session is NO_SESSION
        assert client.is_authenticated is False


# ---------------------------------------------------------------------------
# authenticate
# ---------------------------------------------------------------------------


class TestAuthenticate:
    def test_success_stores_cookies(self) -> None:
        client, transport = _make_client(Reply(headers=LOGIN_COOKIE))
        assert client.authenticate("good_username", "good_password").result() is True
        assert client.is_authenticated
        assert isinstance(client.session, ActiveSession)
        assert client.session.cookie_names == ("Login",)
        assert client.session.cookies[0].value == "success"

    def test_request_shape(self) -> None:
        client, transport = _make_client(Reply(headers=LOGIN_COOKIE))
        client.authenticate("good_username", "good_password").result()
        req = transport.last_request
        assert req is not None
        assert req.method == "POST"
        assert req.url == "https://www.example.com/login.asp"
        assert req.body == b"user=good_username&password=good_password"
        assert req.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert req.timeout == 10.0

    def test_credentials_are_percent_encoded(self) -> None:
        client, transport = _make_client(Reply(headers=LOGIN_COOKIE))
        client.authenticate("jo smith", "p&ss=wörd").result()
        assert transport.last_request is not None
        assert transport.last_request.body == (
            b"user=jo%20smith&password=p%26ss%3Dw%C3%B6rd"
        )

    def test_no_cookie_fails(self) -> None:
        client, _ = _make_client(Reply(status_code=200))
        assert client.authenticate("good_username", "good_password").result() is False
        assert client.session is NO_SESSION

    def test_cookie_for_foreign_domain_is_not_a_session(self) -> None:
        client, _ = _make_client(
            Reply(headers=[("Set-Cookie", "Login=success; Domain=other.org")])
        )
        assert client.authenticate("u", "p").result() is False
        assert client.session is NO_SESSION

    @pytest.mark.parametrize("status", [201, 302, 401, 404, 500])
    def test_non_200_fails_even_with_cookie(self, status: int) -> None:
        client, _ = _make_client(Reply(status_code=status, headers=LOGIN_COOKIE))
        assert client.authenticate("bad_username", "bad_password").result() is False
        assert client.session is NO_SESSION

    def test_network_error_fails(self) -> None:
        client, transport = _make_client(
            Reply(error=UserInfoTransportError("network unreachable"))
        )
        assert client.authenticate("u", "p").result() is False
        assert transport.was_dispatched

    def test_foreign_error_type_fails(self) -> None:
        client, _ = _make_client(Reply(error=OSError("connection reset")))
        assert client.authenticate("u", "p").result() is False

    def test_non_http_response_fails(self) -> None:
        client, _ = _make_client(Reply(raw="not a response"))
        assert client.authenticate("u", "p").result() is False

    def test_unencodable_credentials_are_never_sent(self) -> None:
        client, transport = _make_client(Reply(headers=LOGIN_COOKIE))
        assert client.authenticate("\ud800", "p").result() is False
        assert client.authenticate("u", "\udfff").result() is False
        assert transport.submitted == []
        assert not transport.was_dispatched

    def test_failure_keeps_previous_session(self) -> None:
        client, transport = _logged_in_client()
        before = client.session
        transport.route("/login.asp", Reply(status_code=401))
        assert client.authenticate("other", "pw").result() is False
        assert client.session is before

    def test_success_replaces_previous_session(self) -> None:
        client, transport = _logged_in_client()
        transport.route("/login.asp", Reply(headers=[("Set-Cookie", "Token=abc")]))
        assert client.authenticate("other", "pw").result() is True
        assert isinstance(client.session, ActiveSession)
        assert client.session.cookie_names == ("Token",)


# ---------------------------------------------------------------------------
# fetch_resource
# ---------------------------------------------------------------------------


class TestFetchResource:
    def test_success(self) -> None:
        client, transport = _logged_in_client()
        transport.route("/user_information.asp", Reply(body=USER_JSON))
        info = client.fetch_resource().result()
        assert info == {"sample1": "John", "sample2": "Bob"}

    def test_request_carries_session_cookie(self) -> None:
        client, transport = _logged_in_client()
        transport.route("/user_information.asp", Reply(body=USER_JSON))
        client.fetch_resource().result()
        req = transport.last_request
        assert req is not None
        assert req.method == "GET"
        assert req.url == "https://www.example.com/user_information.asp"
        assert req.headers["Cookie"] == "Login=success"
        assert req.body is None

    def test_without_session_sends_nothing(self) -> None:
        client, transport = _make_client(Reply(body=USER_JSON))
        assert client.fetch_resource().result() is None
        assert transport.submitted == []
        assert not transport.was_dispatched

    def test_network_error(self) -> None:
        client, transport = _logged_in_client()
        transport.route(
            "/user_information.asp", Reply(error=UserInfoTransportError("offline"))
        )
        assert client.fetch_resource().result() is None

    def test_not_found(self) -> None:
        client, transport = _logged_in_client()
        transport.route("/user_information.asp", Reply(status_code=404, body=USER_JSON))
        assert client.fetch_resource().result() is None

    @pytest.mark.parametrize(
        "body",
        [
            None,
            b"",
            b'{"sample1": "John"',
            b'["John", "Bob"]',
            b'{"age": 42}',
            b"\xff\xfe",
            b"[" * 100000,
        ],
    )
    def test_empty_or_malformed_body(self, body: bytes | None) -> None:
        client, transport = _logged_in_client()
        transport.route("/user_information.asp", Reply(body=body))
        assert client.fetch_resource().result() is None

    def test_non_http_response(self) -> None:
        client, transport = _logged_in_client()
        transport.route("/user_information.asp", Reply(raw=object()))
        assert client.fetch_resource().result() is None

    def test_session_untouched(self) -> None:
        client, transport = _logged_in_client()
        before = client.session
        transport.route("/user_information.asp", Reply(status_code=500))
        client.fetch_resource().result()
        transport.route("/user_information.asp", Reply(body=USER_JSON))
        client.fetch_resource().result()
        assert client.session is before


# ---------------------------------------------------------------------------
# terminate
# ---------------------------------------------------------------------------


class TestTerminate:
    def test_success_clears_session(self) -> None:
        client, transport = _logged_in_client()
        assert client.terminate().result() is True
        assert client.session is NO_SESSION
        req = transport.last_request
        assert req is not None
        assert req.method == "GET"
        assert req.url == "https://www.example.com/logout.asp"
        assert req.headers["Cookie"] == "Login=success"

    def test_without_session_sends_nothing(self) -> None:
        client, transport = _make_client()
        assert client.terminate().result() is False
        assert not transport.was_dispatched

    def test_network_error_keeps_session(self) -> None:
        client, transport = _logged_in_client()
        before = client.session
        transport.route("/logout.asp", Reply(error=UserInfoTransportError("offline")))
        assert client.terminate().result() is False
        assert client.session is before

    def test_not_found_keeps_session(self) -> None:
        client, transport = _logged_in_client()
        before = client.session
        transport.route("/logout.asp", Reply(status_code=404))
        assert client.terminate().result() is False
        assert client.session is before

    def test_fetch_after_logout_sends_nothing(self) -> None:
        client, transport = _logged_in_client()
        client.terminate().result()
        sent = len(transport.dispatched)
        assert client.fetch_resource().result() is None
        assert client.terminate().result() is False
        assert len(transport.dispatched) == sent


# ---------------------------------------------------------------------------
# Completion contract
# ---------------------------------------------------------------------------


class TestCompletion:
    def test_duplicate_completion_is_ignored(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        client, transport = _make_client(Reply(headers=LOGIN_COOKIE))
        transport.completions = 2
        with caplog.at_level(logging.WARNING, logger="userinfo_client.service"):
            assert client.authenticate("u", "p").result() is True
        assert "duplicate completion" in caplog.text

    def test_unexpected_exception_reaches_caller(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(response: object) -> list:
            raise RuntimeError("cookie parser bug")

        monkeypatch.setattr("userinfo_client.service.extract_cookies", boom)
        client, _ = _make_client(Reply(headers=LOGIN_COOKIE))
        future = client.authenticate("u", "p")
        assert isinstance(future.exception(), RuntimeError)
        assert client.session is NO_SESSION

    def test_failures_are_logged_without_secret(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        client, _ = _make_client(Reply(status_code=401))
        with caplog.at_level(logging.INFO, logger="userinfo_client.service"):
            client.authenticate("alice", "hunter2").result()
        assert "401" in caplog.text
        assert "hunter2" not in caplog.text


# ---------------------------------------------------------------------------
# decode_user_info helper
# ---------------------------------------------------------------------------


class TestDecodeUserInfo:
    def test_flat_object(self) -> None:
        assert decode_user_info(b'{"real_name": "John Smith"}') == {
            "real_name": "John Smith"
        }

    def test_empty_object_is_valid(self) -> None:
        assert decode_user_info(b"{}") == {}

    def test_nested_value_rejected(self) -> None:
        with pytest.raises(UserInfoDecodeError, match="strings"):
            decode_user_info(b'{"a": {"b": "c"}}')

    def test_empty_rejected(self) -> None:
        with pytest.raises(UserInfoDecodeError, match="empty"):
            decode_user_info(b"")

    def test_deeply_nested_rejected(self) -> None:
        with pytest.raises(UserInfoDecodeError, match="invalid JSON"):
            decode_user_info(b"[" * 100000)
