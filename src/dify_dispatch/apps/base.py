# src/dify_dispatch/apps/base.py
from __future__ import annotations
from typing import Any, Dict, Optional

import aiohttp

from dify_dispatch.client import DifyClient


class AppClient:
    """
    Shared plumbing for the per-app clients: each wraps a DifyClient and adds
    the endpoints of one Dify app type.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        self.dify_client = DifyClient(api_key, base_url, session=session, timeout=timeout)

    @classmethod
    def from_client(cls, client: DifyClient, **kwargs: Any):
        """Wrap an existing DifyClient; configuration and session are shared."""
        obj = cls.__new__(cls)
        obj.dify_client = client
        obj._init_extra(**kwargs)
        return obj

    @classmethod
    def create(cls, *, client: DifyClient, app_cfg: Dict[str, Any]):
        """Build from bootstrap: a ready DifyClient plus the 'dify' config section."""
        return cls.from_client(client)

    def _init_extra(self, **kwargs: Any) -> None:
        if kwargs:
            raise TypeError(f"Unexpected arguments for {type(self).__name__}: {sorted(kwargs)}")

    async def close(self) -> None:
        await self.dify_client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
