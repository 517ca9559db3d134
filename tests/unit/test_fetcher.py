import asyncio
import gzip
import zlib
import httpx
from app.fetch.base import FailureKind, FetchFailure, FetchSuccess
from app.fetch.scraper import HttpxFetcher

URL = "https://example.com/page"

def fetch_with(handler, **kwargs):
    fetcher = HttpxFetcher(transport=httpx.MockTransport(handler), **kwargs)
    return asyncio.run(fetcher.fetch(URL))

def streamed(body, status=200, headers=None, chunk_size=None):
    """Response whose body arrives as a stream, the way a real transport delivers it"""
    if isinstance(body, str):
        body = body.encode("utf-8")
    size = chunk_size or max(len(body), 1)

    async def chunks():
        for start in range(0, len(body), size):
            yield body[start:start + size]

    return httpx.Response(status, headers=headers, content=chunks())

class TestHttpxFetcher:
    """Unit tests for the bounded single-shot fetcher"""

    def test_success(self):
        def handler(request):
            return streamed("<head><title>Foo</title></head>", headers={"Content-Type": "text/html"})

        outcome = fetch_with(handler)
        assert isinstance(outcome, FetchSuccess)
        assert outcome.status_code == 200
        assert outcome.body == "<head><title>Foo</title></head>"
        assert outcome.truncated is False

    def test_sends_user_agent(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers["User-Agent"]
            return streamed("ok")

        fetch_with(handler, user_agent="LinkPreviewBot/1.0")
        assert seen["ua"] == "LinkPreviewBot/1.0"

    def test_non_ok_status_is_failure(self):
        outcome = fetch_with(lambda request: httpx.Response(404, text="missing"))
        assert isinstance(outcome, FetchFailure)
        assert outcome.kind is FailureKind.NON_OK_STATUS
        assert "404" in outcome.reason

    def test_other_2xx_is_failure(self):
        outcome = fetch_with(lambda request: httpx.Response(204))
        assert isinstance(outcome, FetchFailure)
        assert outcome.kind is FailureKind.NON_OK_STATUS

    def test_server_error_is_failure(self):
        outcome = fetch_with(lambda request: httpx.Response(500, text="boom"))
        assert isinstance(outcome, FetchFailure)

    def test_connection_error_is_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        outcome = fetch_with(handler)
        assert isinstance(outcome, FetchFailure)
        assert outcome.kind is FailureKind.TRANSPORT

    def test_timeout_is_transport_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        outcome = fetch_with(handler)
        assert isinstance(outcome, FetchFailure)
        assert outcome.kind is FailureKind.TRANSPORT
        assert "Timeout" in outcome.reason

    def test_body_is_capped(self):
        body = "<head><title>Foo</title>" + "x" * 5000
        outcome = fetch_with(lambda request: streamed(body, chunk_size=64), max_bytes=100)
        assert isinstance(outcome, FetchSuccess)
        assert outcome.body == body[:100]
        assert outcome.truncated is True

    def test_body_exactly_at_cap_is_not_truncated(self):
        body = "a" * 100
        outcome = fetch_with(lambda request: streamed(body), max_bytes=100)
        assert outcome.body == body
        assert outcome.truncated is False

    def test_gzip_body_is_decompressed(self):
        page = b"<head><title>Zipped</title></head>"

        def handler(request):
            return streamed(gzip.compress(page), headers={"Content-Encoding": "gzip"})

        outcome = fetch_with(handler)
        assert isinstance(outcome, FetchSuccess)
        assert outcome.body == page.decode()
        assert outcome.truncated is False

    def test_gzip_expansion_is_capped(self):
        page = b"<head><title>Bomb</title>" + b"x" * 5_000_000
        compressed = gzip.compress(page)
        assert len(compressed) < 153600

        def handler(request):
            return streamed(compressed, headers={"Content-Encoding": "gzip"})

        outcome = fetch_with(handler, max_bytes=153600)
        assert isinstance(outcome, FetchSuccess)
        assert len(outcome.body) == 153600
        assert outcome.body.startswith("<head><title>Bomb</title>")
        assert outcome.truncated is True

    def test_deflate_body_is_decompressed(self):
        page = b"<title>Deflated</title>"

        def handler(request):
            return streamed(zlib.compress(page), headers={"Content-Encoding": "deflate"}, chunk_size=4)

        assert fetch_with(handler).body == page.decode()

    def test_corrupt_gzip_is_transport_failure(self):
        def handler(request):
            return streamed(b"definitely not gzip", headers={"Content-Encoding": "gzip"})

        outcome = fetch_with(handler)
        assert isinstance(outcome, FetchFailure)
        assert outcome.kind is FailureKind.TRANSPORT

    def test_unsupported_encoding_is_failure(self):
        def handler(request):
            return streamed(b"\x1b\x00\x00", headers={"Content-Encoding": "br"})

        outcome = fetch_with(handler)
        assert isinstance(outcome, FetchFailure)
        assert "br" in outcome.reason

    def test_declared_charset_is_used(self):
        def handler(request):
            return streamed(
                "<title>Café</title>".encode("iso-8859-1"),
                headers={"Content-Type": "text/html; charset=iso-8859-1"},
            )

        assert fetch_with(handler).body == "<title>Café</title>"

    def test_unknown_charset_falls_back_to_utf8(self):
        def handler(request):
            return streamed(
                "<title>Café</title>".encode("utf-8"),
                headers={"Content-Type": "text/html; charset=x-made-up"},
            )

        assert fetch_with(handler).body == "<title>Café</title>"

    def test_redirects_are_followed(self):
        def handler(request):
            if request.url.path == "/page":
                return httpx.Response(301, headers={"Location": "https://example.com/moved"})
            return streamed("<title>Moved</title>")

        outcome = fetch_with(handler)
        assert isinstance(outcome, FetchSuccess)
        assert outcome.final_url == "https://example.com/moved"
