# src/dify_dispatch/apps/knowledge.py
from __future__ import annotations
from typing import Any, Dict, Optional

import aiohttp

from dify_dispatch.apps.base import AppClient
from dify_dispatch.apps.registry import AppRegistry
from dify_dispatch.client import DifyClient
from dify_dispatch.core.errors import MissingDatasetError
from dify_dispatch.core.responses import BufferedResponse


@AppRegistry.register("knowledge")
class KnowledgeBaseClient(AppClient):
    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        dataset_id: Optional[str] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        super().__init__(api_key, base_url, session=session, timeout=timeout)
        self._init_extra(dataset_id=dataset_id)

    def _init_extra(self, dataset_id: Optional[str] = None) -> None:
        self._dataset_id = dataset_id

    @classmethod
    def create(cls, *, client: DifyClient, app_cfg: Dict[str, Any]) -> "KnowledgeBaseClient":
        return cls.from_client(client, dataset_id=(app_cfg or {}).get("dataset_id"))

    @property
    def dataset_id(self) -> str:
        if not self._dataset_id:
            raise MissingDatasetError("dataset_id is not set")
        return self._dataset_id

    async def create_dataset(self, name: str) -> BufferedResponse:
        return await self.dify_client.send_request("POST", "/datasets", json={"name": name})
