# src/dify_dispatch/client.py
from __future__ import annotations
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import aiofiles
import aiohttp

from dify_dispatch.core.errors import TransportError
from dify_dispatch.core.responses import BufferedResponse, ResponseHandle, StreamedResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.dify.ai/v1"


class DifyClient:
    """
    Request dispatcher for the Dify service API.

    Holds the API key and base URL and nothing else that changes after
    construction, so one instance can serve concurrent calls. The aiohttp
    session is created on first use inside the running loop unless one is
    passed in; a session passed in is never closed by this client.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        self._api_key = api_key
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def base_url(self) -> str:
        return self._base_url

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self._base_url!r})"

    # ----- session lifecycle -----

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or (self._owns_session and self._session.closed):
            kwargs: Dict[str, Any] = {}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._session = aiohttp.ClientSession(**kwargs)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "DifyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ----- request building -----

    def _url(self, endpoint: str) -> str:
        return f"{self._base_url}{endpoint}"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _json_headers(self) -> Dict[str, str]:
        headers = self._auth_headers()
        headers["Content-Type"] = "application/json"
        return headers

    async def _dispatch(self, method: str, url: str, *, stream: bool, **request_kwargs) -> ResponseHandle:
        session = self._get_session()
        try:
            response = await session.request(method, url, **request_kwargs)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s %s failed before a response arrived: %r", method, url, e)
            raise TransportError(f"{method} {url} failed: {e!r}") from e

        logger.debug("%s %s -> %s", method, url, response.status)
        if stream:
            return StreamedResponse(response)
        try:
            return await BufferedResponse.read_from(response)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s %s failed while reading the body: %r", method, url, e)
            raise TransportError(f"{method} {url} failed while reading the body: {e!r}") from e

    async def send_request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        stream: bool = False,
    ) -> ResponseHandle:
        """
        Send one request and return a handle for its response.

        The request is the same whatever ``stream`` says; ``stream`` only picks
        the handle: a StreamedResponse as soon as headers arrive, otherwise a
        BufferedResponse with the body read in full.
        """
        url = self._url(endpoint)
        logger.debug("request url: %s, method: %s", url, method)
        logger.debug("request payload: %s", json)

        request_kwargs: Dict[str, Any] = {"headers": self._json_headers()}
        if json is not None:
            request_kwargs["data"] = _dumps(json)
        if params is not None:
            request_kwargs["params"] = params
        return await self._dispatch(method, url, stream=stream, **request_kwargs)

    async def send_request_with_files(
        self,
        method: str,
        endpoint: str,
        data: Dict[str, Any],
        file_path: Union[str, Path],
    ) -> BufferedResponse:
        file_path = Path(file_path)
        url = self._url(endpoint)
        logger.debug("upload url: %s, method: %s, file: %s", url, method, file_path)

        async with aiofiles.open(file_path, "rb") as f:
            content = await f.read()

        form = aiohttp.FormData()
        form.add_field("data", _dumps(data))
        form.add_field("file", content, filename=file_path.name)
        # Content-Type comes from the multipart body.
        return await self._dispatch(method, url, stream=False, headers=self._auth_headers(), data=form)

    # ----- app-independent endpoints -----

    async def message_feedback(self, message_id: str, rating: Any, user: str) -> BufferedResponse:
        data = {"rating": rating, "user": user}
        return await self.send_request("POST", f"/messages/{message_id}/feedbacks", json=data)

    async def get_application_parameters(self, user: str) -> BufferedResponse:
        return await self.send_request("GET", "/parameters", params={"user": user})

    async def file_upload(self, user: str, file_path: Union[str, Path]) -> BufferedResponse:
        return await self.send_request_with_files("POST", "/files/upload", {"user": user}, file_path)


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)
