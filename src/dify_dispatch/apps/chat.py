# src/dify_dispatch/apps/chat.py
from __future__ import annotations
from typing import Any, Dict, Optional

from dify_dispatch.apps.base import AppClient
from dify_dispatch.apps.registry import AppRegistry
from dify_dispatch.core.payload import MessagePayload, ResponseMode
from dify_dispatch.core.responses import ResponseHandle


@AppRegistry.register("chat")
class ChatClient(AppClient):
    async def create_chat_message(
        self,
        inputs: Any,
        query: str,
        user: str,
        response_mode: ResponseMode = ResponseMode.BLOCK,
        conversation_id: Optional[str] = None,
        files: Any = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> ResponseHandle:
        """
        POST /chat-messages.

        Returns a BufferedResponse for ResponseMode.BLOCK and a
        StreamedResponse for ResponseMode.STREAM. Continuing a conversation is
        just a matter of passing the conversation_id the service returned.
        """
        mode = ResponseMode.parse(response_mode)
        payload = MessagePayload(
            inputs=inputs,
            query=query,
            user=user,
            response_mode=mode,
            conversation_id=conversation_id,
            files=files,
            extra=dict(extra or {}),
        )
        return await self.dify_client.send_request(
            "POST", "/chat-messages", json=payload.to_json(), stream=mode.streaming
        )
