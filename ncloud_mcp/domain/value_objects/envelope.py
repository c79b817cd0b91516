"""
Response Envelope Value Object

Architectural Intent:
- Uniform wrapper returned for every tool invocation
- Exactly one of two shapes: pretty-printed JSON text, or an error message
  flagged with isError
- Serializes straight into the MCP tools/call result shape
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import json


@dataclass(frozen=True)
class ResponseEnvelope:
    text: str
    is_error: bool = False

    @staticmethod
    def success(payload: Any) -> ResponseEnvelope:
        return ResponseEnvelope(
            text=json.dumps(payload, indent=2, ensure_ascii=False),
            is_error=False,
        )

    @staticmethod
    def failure(message: str) -> ResponseEnvelope:
        return ResponseEnvelope(text=f"Error: {message}", is_error=True)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "content": [
                {
                    "type": "text",
                    "text": self.text,
                }
            ]
        }
        if self.is_error:
            result["isError"] = True
        return result
