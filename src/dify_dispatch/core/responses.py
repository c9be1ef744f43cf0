# src/dify_dispatch/core/responses.py
from __future__ import annotations
import asyncio
import codecs
import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Mapping, Optional, Union

import aiohttp
from aiohttp import hdrs

from .errors import StreamInterruptedError


@dataclass(frozen=True)
class BufferedResponse:
    """
    A fully read HTTP response. The status is reported as-is; callers decide
    what a non-2xx status means for them.
    """
    status: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    charset: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, encoding: Optional[str] = None) -> str:
        return self.body.decode(encoding or _known_charset(self.charset), errors="replace")

    def json(self) -> Any:
        return json.loads(self.text())

    @classmethod
    async def read_from(cls, response: aiohttp.ClientResponse) -> "BufferedResponse":
        try:
            body = await response.read()
        finally:
            response.release()
        return cls(
            status=response.status,
            body=body,
            headers=dict(response.headers),
            charset=response.charset,
        )


def _known_charset(charset: Optional[str]) -> str:
    # Servers may announce charsets Python has no codec for.
    if not charset:
        return "utf-8"
    try:
        codecs.lookup(charset)
    except LookupError:
        return "utf-8"
    return charset


class StreamedResponse:
    """
    An open HTTP response whose body is consumed incrementally.

    The body can be iterated once. The connection is released when the body
    is exhausted and closed on error or when the caller gives up early via
    ``aclose()`` or by leaving ``async with``.
    """

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response
        self.status: int = response.status
        self.headers = response.headers
        self._iterator: Optional[AsyncIterator[bytes]] = None
        self._closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def raw(self) -> aiohttp.ClientResponse:
        return self._response

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.iter_chunks()

    def iter_chunks(self) -> AsyncIterator[bytes]:
        if self._iterator is not None or self._closed:
            raise RuntimeError("Streamed body can only be iterated once")
        self._iterator = self._chunks()
        return self._iterator

    async def _chunks(self) -> AsyncIterator[bytes]:
        # Without chunked framing there are no chunk boundaries; pass data through as read.
        chunked = "chunked" in self.headers.get(hdrs.TRANSFER_ENCODING, "").lower()
        pending = b""
        completed = False
        try:
            async for data, end_of_chunk in self._response.content.iter_chunks():
                pending += data
                if pending and (end_of_chunk or not chunked):
                    yield pending
                    pending = b""
            if pending:
                yield pending
            completed = True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise StreamInterruptedError(f"Stream interrupted: {e!r}") from e
        finally:
            self._finish(completed)

    def _finish(self, completed: bool) -> None:
        if self._closed:
            return
        self._closed = True
        if completed:
            self._response.release()
        else:
            self._response.close()

    async def aclose(self) -> None:
        if self._iterator is not None:
            await self._iterator.aclose()  # type: ignore[attr-defined]
        self._finish(False)

    async def __aenter__(self) -> "StreamedResponse":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


ResponseHandle = Union[BufferedResponse, StreamedResponse]
