"""Tests for next-URL continuation — resolve, build, redirect."""

import pytest

from perch.config import RedirectConfig
from perch.security.redirects import (
    build_next_url,
    get_next_url,
    query_unescape,
    redirect_to_next_url,
    redirect_with_next_url,
)
from perch.testing import ResponseRecorder, make_request


class TestGetNextUrl:
    async def test_query_value(self) -> None:
        assert await get_next_url(make_request("/login", query="next=/dashboard")) == "/dashboard"

    async def test_form_value_when_query_missing(self) -> None:
        request = make_request("/login", form={"next": "/settings"})
        assert await get_next_url(request) == "/settings"

    async def test_query_wins_over_form(self) -> None:
        request = make_request("/login", query="next=/a", form={"next": "/b"})
        assert await get_next_url(request) == "/a"

    async def test_empty_query_falls_back_to_form(self) -> None:
        request = make_request("/login", query="next=", form={"next": "/b"})
        assert await get_next_url(request) == "/b"

    async def test_missing(self) -> None:
        assert await get_next_url(make_request("/login")) == ""

    async def test_double_encoded_value_is_decoded(self) -> None:
        # the query string layer decodes once, then the value itself
        request = make_request("/login", query="next=%252Fa%2520b")
        assert await get_next_url(request) == "/a b"

    async def test_plus_decodes_to_space(self) -> None:
        request = make_request("/login", query={"next": "/search?q=a+b"})
        assert await get_next_url(request) == "/search?q=a b"

    async def test_encoded_protocol_relative_rejected(self) -> None:
        request = make_request("/login", query={"next": "%2F%2Fevil.com"})
        assert await get_next_url(request) == ""

    @pytest.mark.parametrize(
        "value",
        [
            "https://evil.com",
            "http://evil.com/path",
            "//evil.com",
            "/\\evil.com",
            "evil.com",
            "javascript:alert(1)",
            "%2F%2Fevil.com%2Fx",
            "https%3A%2F%2Fevil.com",
        ],
    )
    async def test_unsafe_values_rejected(self, value: str) -> None:
        request = make_request("/login", query={"next": value})
        assert await get_next_url(request) == ""

    @pytest.mark.parametrize(
        "query",
        [
            "next=%2F%09%2Fevil.com",
            "next=/%0A/evil.com",
            "next=/%0D%0Ax",
            "next=%2F%0D%0ASet-Cookie%3A%20a%3Db",
            "next=/%2509/evil.com",
        ],
    )
    async def test_control_characters_rejected(self, query: str) -> None:
        assert await get_next_url(make_request("/login", query=query)) == ""

    async def test_undecodable_safe_value_kept_raw(self) -> None:
        request = make_request("/login", query={"next": "/100%"})
        assert await get_next_url(request) == "/100%"

    async def test_undecodable_unsafe_value_rejected(self) -> None:
        request = make_request("/login", query={"next": "evil.com/%zz"})
        assert await get_next_url(request) == ""

    async def test_decoded_value_wins_over_raw(self) -> None:
        # "/%2Fevil.com" is a safe path as-is, but it decodes to "//evil.com"
        request = make_request("/login", query={"next": "/%2Fevil.com"})
        assert await get_next_url(request) == ""

    async def test_form_parse_errors_ignored(self) -> None:
        request = make_request(
            "/login",
            query="next=/ok",
            body=b"{}",
            headers={"content-type": "application/json"},
        )
        assert await get_next_url(request) == "/ok"

    async def test_unparsable_form_means_no_value(self) -> None:
        request = make_request("/login", body=b"{}", headers={"content-type": "application/json"})
        assert await get_next_url(request) == ""

    async def test_custom_key(self) -> None:
        config = RedirectConfig(next_key="return_to")
        request = make_request("/login", query="return_to=/a&next=/b")
        assert await get_next_url(request, config) == "/a"

    @pytest.mark.parametrize(
        "query",
        ["next=/x", "next=//x", "next=http://x", "next=%2F%2Fx", "next=%25", "next=/%ZZ", "next=+/x"],
    )
    async def test_result_is_empty_or_single_slash_path(self, query: str) -> None:
        result = await get_next_url(make_request("/login", query=query))
        assert result == "" or (result.startswith("/") and not result.startswith("//"))


class TestQueryUnescape:
    def test_percent_and_plus(self) -> None:
        assert query_unescape("%2Fa+b") == "/a b"

    def test_malformed_escape(self) -> None:
        with pytest.raises(ValueError):
            query_unescape("/50%off")

    def test_invalid_utf8(self) -> None:
        with pytest.raises(ValueError):
            query_unescape("/%ff")


class TestBuildNextUrl:
    def test_encodes_value(self) -> None:
        assert build_next_url("/auth/login", "/settings?tab=2") == (
            "/auth/login?next=%2Fsettings%3Ftab%3D2"
        )

    def test_empty_value(self) -> None:
        assert build_next_url("/auth/login", "") == "/auth/login?next="

    def test_custom_key(self) -> None:
        config = RedirectConfig(next_key="r")
        assert build_next_url("/in", "/a b", config) == "/in?r=%2Fa+b"


class TestRedirects:
    async def test_redirect_to_next_url(self) -> None:
        recorder = ResponseRecorder()
        request = make_request("/login", form={"next": "/billing"})
        await redirect_to_next_url(recorder.writer, request, 303)

        assert recorder.status == 303
        assert recorder.headers["location"] == "/billing"

    async def test_redirect_to_rejected_next_url(self) -> None:
        recorder = ResponseRecorder()
        request = make_request("/auth/login", query={"next": "https://evil.com"})
        await redirect_to_next_url(recorder.writer, request, 302)

        # empty target resolves to the current directory, never off-site
        assert recorder.headers["location"] == "/auth/"

    async def test_redirect_with_next_url(self) -> None:
        recorder = ResponseRecorder()
        request = make_request("/auth/signup", query="next=/billing")
        await redirect_with_next_url(recorder.writer, request, "/auth/login", 307)

        assert recorder.status == 307
        assert recorder.headers["location"] == "/auth/login?next=%2Fbilling"

    async def test_redirect_to_next_url_with_tab_stays_local(self) -> None:
        recorder = ResponseRecorder()
        request = make_request("/auth/login", query="next=%2F%09%2Fevil.com")
        await redirect_to_next_url(recorder.writer, request, 302)

        assert recorder.headers["location"] == "/auth/"
