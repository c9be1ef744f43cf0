# src/dify_dispatch/apps/workflow.py
from __future__ import annotations
from typing import Any, Dict, Optional

from dify_dispatch.apps.base import AppClient
from dify_dispatch.apps.registry import AppRegistry
from dify_dispatch.core.payload import MessagePayload, ResponseMode
from dify_dispatch.core.responses import ResponseHandle

DEFAULT_WORKFLOW_USER = "abc-123"


@AppRegistry.register("workflow")
class WorkflowClient(AppClient):
    async def run(
        self,
        inputs: Any,
        response_mode: ResponseMode,
        user: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> ResponseHandle:
        mode = ResponseMode.parse(response_mode)
        payload = MessagePayload(
            inputs=inputs,
            user=user or DEFAULT_WORKFLOW_USER,
            response_mode=mode,
            extra=dict(extra or {}),
        )
        return await self.dify_client.send_request(
            "POST", "/workflows/run", json=payload.to_json(), stream=mode.streaming
        )
