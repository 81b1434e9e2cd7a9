"""
Blog API Backend — Response Envelope
=====================================

What:  The uniform wrapper every endpoint returns.
Why:   Clients parse one shape for success and failure alike.

Format:
    Success with payload:   {"code": 200, "message": "Success", "data": {...}}
    Success, message only:  {"code": 200, "message": "Post deleted successfully"}
    Error:                  {"code": 404, "message": "Post with ID '7' was not found"}

`code` always mirrors the HTTP status of the response. `data` is omitted
(not null) whenever there is no payload, so its presence alone tells a
client whether a payload came back.
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    code: int = Field(description="HTTP status code mirror")
    message: str = Field(description="Human-readable outcome")
    data: Optional[DataT] = Field(default=None, description="Payload, present on success")

    @classmethod
    def success(cls, data: Any, message: str = "Success") -> "Envelope":
        return cls(code=200, message=message, data=data)

    @classmethod
    def success_with_message(cls, message: str) -> "Envelope":
        return cls(code=200, message=message)

    @classmethod
    def error(cls, status_code: int, message: str) -> "Envelope":
        return cls(code=status_code, message=message)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict; the `data` key is dropped when there is no payload."""
        payload = self.model_dump(mode="json")
        if self.data is None:
            payload.pop("data", None)
        return payload

    def to_response(self, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        return JSONResponse(status_code=self.code, content=self.to_payload(), headers=headers)


def ok(data: Any, message: str = "Success") -> JSONResponse:
    """Shortcut used by route handlers: 200 + envelope around `data`."""
    return Envelope.success(data, message=message).to_response()


def ok_message(message: str) -> JSONResponse:
    return Envelope.success_with_message(message).to_response()
