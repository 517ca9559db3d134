import zlib
from typing import Callable, Optional

import httpx

from app.core.config import settings
from .base import BaseFetcher, FetchFailure, FetchOutcome, FetchSuccess, FailureKind

_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.7",
    "Accept-Encoding": "gzip, deflate",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
}

class HttpxFetcher(BaseFetcher):
    """
    Single GET with a hard ceiling on the number of body bytes read.

    Only HTTP 200 counts as success. Transport errors and other statuses are
    returned as FetchFailure, never raised. No retries.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_bytes: Optional[int] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_RESPONSE_BYTES
        self.user_agent = user_agent or settings.USER_AGENT
        self._transport = transport

    async def fetch(self, url: str) -> FetchOutcome:
        headers = {"User-Agent": self.user_agent, **_HEADERS}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    if response.status_code != httpx.codes.OK:
                        return FetchFailure(
                            url=url,
                            reason=f"HTTP {response.status_code}",
                            kind=FailureKind.NON_OK_STATUS,
                        )
                    content_encoding = response.headers.get("Content-Encoding", "identity").strip().lower() or "identity"
                    if content_encoding not in _DECOMPRESSORS:
                        return FetchFailure(url=url, reason=f"Unsupported content encoding {content_encoding!r}")
                    raw, truncated = await _read_capped(
                        response, self.max_bytes, _DECOMPRESSORS[content_encoding]
                    )
                    encoding = response.charset_encoding or "utf-8"
                    return FetchSuccess(
                        url=url,
                        status_code=response.status_code,
                        body=_decode(raw, encoding),
                        final_url=str(response.url),
                        truncated=truncated,
                    )
        except httpx.TimeoutException:
            return FetchFailure(url=url, reason=f"Timeout while fetching {url}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return FetchFailure(url=url, reason=f"Failed to fetch {url}: {e}")
        except zlib.error as e:
            return FetchFailure(url=url, reason=f"Corrupt compressed body from {url}: {e}")

def _gzip():
    return zlib.decompressobj(16 + zlib.MAX_WBITS)

def _deflate():
    # zlib or gzip header, detected from the stream
    return zlib.decompressobj(32 + zlib.MAX_WBITS)

_DECOMPRESSORS = {
    "identity": None,
    "gzip": _gzip,
    "x-gzip": _gzip,
    "deflate": _deflate,
}

async def _read_capped(
    response: httpx.Response,
    max_bytes: int,
    decompressor_factory: Optional[Callable] = None,
) -> tuple[bytes, bool]:
    """
    Read at most max_bytes of decoded body, stopping the stream at the ceiling.

    Raw wire chunks are decompressed here with an output limit, so a small
    compressed chunk can never expand past the ceiling in memory.
    """
    decompressor = decompressor_factory() if decompressor_factory else None
    buf = bytearray()
    async for chunk in response.aiter_raw():
        remaining = max_bytes - len(buf)
        if decompressor is not None:
            # input is only left unconsumed once the output limit is hit
            chunk = decompressor.decompress(chunk, remaining + 1)
        if len(chunk) > remaining:
            buf.extend(chunk[:remaining])
            return bytes(buf), True
        buf.extend(chunk)
    if decompressor is not None:
        tail = decompressor.flush()
        remaining = max_bytes - len(buf)
        if len(tail) > remaining:
            buf.extend(tail[:remaining])
            return bytes(buf), True
        buf.extend(tail)
    return bytes(buf), False

def _decode(raw: bytes, encoding: str) -> str:
    try:
        return raw.decode(encoding, errors="replace")
    except LookupError:
        # unknown charset label in Content-Type
        return raw.decode("utf-8", errors="replace")
