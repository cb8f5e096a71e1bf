from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .message import Message


class Metadata(BaseModel):
    """Request metadata. `user_id` should be an opaque identifier."""

    user_id: str


class ToolDefinition(BaseModel):
    """A tool the model may call, described by a JSON schema."""

    name: str
    description: Optional[str] = None
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )


class MessagesRequestBody(BaseModel):
    """Request body of `POST /v1/messages`.

    Only schema-level ranges are checked here. Per-model limits (such as the
    maximum `max_tokens` of a given model) are left to the server.
    """

    model: str
    messages: List[Message]
    max_tokens: int = Field(default=4096, gt=0)
    system: Optional[str] = None
    metadata: Optional[Metadata] = None
    stop_sequences: Optional[List[str]] = None
    stream: Optional[bool] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, ge=0)
    tools: Optional[List[ToolDefinition]] = None

    @field_validator('model')
    @classmethod
    def model_non_empty(cls, v):
        if not v:
            raise ValueError("Model cannot be empty")
        return v

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with unset optional fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)
