# src/dify_dispatch/apps/completion.py
from __future__ import annotations
from typing import Any, Dict, Optional

from dify_dispatch.apps.base import AppClient
from dify_dispatch.apps.registry import AppRegistry
from dify_dispatch.core.payload import MessagePayload, ResponseMode
from dify_dispatch.core.responses import ResponseHandle


@AppRegistry.register("completion")
class CompletionClient(AppClient):
    async def create_completion_message(
        self,
        inputs: Any,
        response_mode: ResponseMode,
        user: str,
        files: Any = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> ResponseHandle:
        mode = ResponseMode.parse(response_mode)
        payload = MessagePayload(
            inputs=inputs,
            user=user,
            response_mode=mode,
            files=files,
            extra=dict(extra or {}),
        )
        return await self.dify_client.send_request(
            "POST", "/completion-messages", json=payload.to_json(), stream=mode.streaming
        )
