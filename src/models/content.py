"""
Message Content Types
Tagged union of payloads a conversation message can carry, discriminated by media type.
"""
from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, ConfigDict, Field


class _Content(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextContent(_Content):
    type: Literal["text/plain"] = "text/plain"
    payload: str


class ImageContent(_Content):
    type: Literal["image/*"] = "image/*"
    payload: bytes


class FileContent(_Content):
    type: Literal["application/octet-stream"] = "application/octet-stream"
    payload: bytes


class JsonContent(_Content):
    type: Literal["application/json"] = "application/json"
    payload: Any


MessageContent = Annotated[
    Union[TextContent, ImageContent, FileContent, JsonContent],
    Field(discriminator="type"),
]


def as_content(value: "str | TextContent | ImageContent | FileContent | JsonContent") -> MessageContent:
    """Wrap bare strings as text content; pass content models through unchanged."""
    if isinstance(value, str):
        return TextContent(payload=value)
    return value
