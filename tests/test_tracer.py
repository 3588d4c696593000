"""Tests for the request/response tracer."""

import io

import httpx
import pytest
from rich.console import Console

from bucketwire.models import ClientConfig
from bucketwire.request import build_request
from bucketwire.tracer import STREAMED_BODY, Tracer, describe_payload


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def tracer(output) -> Tracer:
    return Tracer(enabled=True, console=Console(file=output, width=200))


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(endpoint="s3.amazonaws.com", region="us-east-1")


class TestTraceRequest:
    """Tests for Tracer.trace_request."""

    def test_disabled_prints_nothing(self, output, config):
        tracer = Tracer(enabled=False, console=Console(file=output))

        tracer.trace_request(build_request(config, "GET", "logs-2024", "k"))

        assert output.getvalue() == ""

    def test_dumps_method_url_and_headers(self, tracer, output, config):
        request = build_request(
            config, "PUT", "logs-2024", "k", headers={"x-amz-meta-a": "[1]"}, payload="hi"
        )

        tracer.trace_request(request)

        text = output.getvalue()
        assert "REQUEST: PUT https://logs-2024.s3.amazonaws.com/k" in text
        assert "host: logs-2024.s3.amazonaws.com" in text
        assert "x-amz-meta-a: [1]" in text
        assert "hi" in text

    def test_bytes_summarized(self, tracer, output, config):
        request = build_request(config, "PUT", "logs-2024", "k", payload=b"\x00" * 10)

        tracer.trace_request(request)

        assert "<bytes of size 10>" in output.getvalue()

    def test_stream_not_consumed(self, tracer, output, config):
        """Tracing must not read from a streamed payload."""
        stream = io.BytesIO(b"secret body")
        request = build_request(config, "PUT", "logs-2024", "k", payload=stream)

        tracer.trace_request(request)

        assert stream.tell() == 0
        assert "secret body" not in output.getvalue()
        assert "streamed body" in output.getvalue()


class TestTraceResponse:
    """Tests for Tracer.trace_response."""

    def test_buffered_response(self, tracer, output):
        response = httpx.Response(200, headers={"etag": '"abc"'}, content=b"<ok/>")

        tracer.trace_response(response)

        text = output.getvalue()
        assert "RESPONSE: 200 OK" in text
        assert 'etag: "abc"' in text
        assert "<ok/>" in text

    def test_streamed_response_not_consumed(self, tracer, output):
        response = httpx.Response(200, content=iter([b"body-marker-xyz"]))

        tracer.trace_response(response, streamed=True)

        assert STREAMED_BODY in output.getvalue()
        assert "body-marker-xyz" not in output.getvalue()
        assert response.is_stream_consumed is False

    def test_disabled(self, output):
        tracer = Tracer(enabled=False, console=Console(file=output))

        tracer.trace_response(httpx.Response(404))

        assert output.getvalue() == ""


class TestDescribePayload:
    def test_text(self):
        assert describe_payload("hello") == "hello"

    def test_bytes(self):
        assert describe_payload(b"abc") == "<bytes of size 3>"

    def test_iterator(self):
        assert describe_payload(iter([b"a"])).startswith("<streamed body")
