# tests/unit/conftest.py

from __future__ import annotations
import asyncio
from typing import Any, Awaitable, Callable

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


@pytest.fixture
def serve():
    """
    Run `scenario(base_url)` against a local aiohttp server hosting `app`.
    base_url points at the server's /v1 prefix, like a real Dify base URL.
    """
    def _serve(app: web.Application, scenario: Callable[[str], Awaitable[Any]]) -> Any:
        async def main():
            async with TestServer(app) as server:
                return await scenario(str(server.make_url("/v1")))
        return asyncio.run(main())
    return _serve
