# src/dify_dispatch/core/payload.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ResponseMode(str, Enum):
    BLOCK = "blocking"
    STREAM = "streaming"

    @classmethod
    def parse(cls, value: "ResponseMode | str") -> "ResponseMode":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for mode in cls:
            if key in (mode.value, mode.name.lower()):
                return mode
        raise ValueError(f"Unknown response mode '{value}'. Expected 'blocking' or 'streaming'.")

    @property
    def streaming(self) -> bool:
        return self is ResponseMode.STREAM


@dataclass
class MessagePayload:
    """
    Request body for the message-style endpoints.

    Fixed fields are typed; ``extra`` carries any additional vendor fields the
    caller wants to send. On serialisation ``extra`` goes in first and the
    fixed fields are written on top, so they cannot be overridden.
    Optional fields left as None are not sent.
    """
    inputs: Any
    user: str
    response_mode: ResponseMode
    query: Optional[str] = None
    conversation_id: Optional[str] = None
    files: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        body: Dict[str, Any] = dict(self.extra or {})
        body["inputs"] = self.inputs if self.inputs is not None else {}
        if self.query is not None:
            body["query"] = self.query
        body["user"] = self.user
        body["response_mode"] = ResponseMode.parse(self.response_mode).value
        if self.conversation_id is not None:
            body["conversation_id"] = self.conversation_id
        if self.files is not None:
            body["files"] = self.files
        return body
