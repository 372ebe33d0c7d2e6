"""Tests for perch.testing — request factory and response recorder."""

from perch.testing import ResponseRecorder, call_asgi, make_request, make_scope


class TestMakeScope:
    def test_mapping_query_is_encoded(self) -> None:
        scope = make_scope("GET", "/login", query={"next": "/a b"})
        assert scope["query_string"] == b"next=%2Fa+b"

    def test_headers_lowercased(self) -> None:
        scope = make_scope(headers={"X-Token": "abc"})
        assert scope["headers"] == [(b"x-token", b"abc")]


class TestMakeRequest:
    def test_defaults_to_get(self) -> None:
        request = make_request("/")
        assert request.method == "GET"

    async def test_form_makes_post(self) -> None:
        request = make_request("/login", form={"next": "/home"})

        assert request.method == "POST"
        assert request.content_type == "application/x-www-form-urlencoded"
        assert (await request.form())["next"] == "/home"

    async def test_raw_body(self) -> None:
        request = make_request("/", method="PUT", body=b"raw")
        assert await request.body() == b"raw"


class TestResponseRecorder:
    async def test_empty(self) -> None:
        recorder = ResponseRecorder()

        assert not recorder.started
        assert recorder.status is None
        assert len(recorder.headers) == 0
        assert recorder.body == b""

    async def test_records_writes(self) -> None:
        recorder = ResponseRecorder()
        recorder.writer.status = 201
        await recorder.writer.write("hello ")
        await recorder.writer.write(b"world")
        assert not recorder.finished
        await recorder.writer.close()

        assert recorder.status == 201
        assert recorder.text == "hello world"
        assert recorder.finished


class TestCallAsgi:
    async def test_round_trip(self) -> None:
        async def app(scope, receive, send) -> None:
            message = await receive()
            await send({"type": "http.response.start", "status": 200, "headers": []})
            await send({"type": "http.response.body", "body": message["body"]})

        recorder = await call_asgi(app, "POST", "/", form={"a": "1"})

        assert recorder.status == 200
        assert recorder.body == b"a=1"
        assert recorder.finished
