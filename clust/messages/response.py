from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .content import ResponseContentBlock, TextContentBlock, ToolUseContentBlock
from .message import Message
from .types import Role, StopReason

# 未知的 stop_reason 保留原始字符串，不让整条消息解析失败
StopReasonValue = Annotated[Union[StopReason, str], Field(union_mode="left_to_right")]


class Usage(BaseModel):
    """Token usage of a message."""

    input_tokens: int = 0
    output_tokens: int = 0


class MessagesResponseBody(BaseModel):
    """Response body of `POST /v1/messages`.

    Also used as the envelope of a `message_start` stream event, where
    `content` is empty and `stop_reason` is not yet known.
    """

    id: str = ""
    type: Literal["message"] = "message"
    role: Role = Role.ASSISTANT
    content: List[ResponseContentBlock] = Field(default_factory=list)
    model: str = ""
    stop_reason: Optional[StopReasonValue] = None
    stop_sequence: Optional[str] = None
    usage: Usage = Field(default_factory=Usage)

    def text(self) -> str:
        """Concatenated text of all text blocks."""
        return "".join(
            block.text for block in self.content if isinstance(block, TextContentBlock)
        )

    def tool_uses(self) -> List[ToolUseContentBlock]:
        return [block for block in self.content if isinstance(block, ToolUseContentBlock)]

    def to_message(self) -> Message:
        """Assistant message to append to the history for the next turn."""
        return Message(role=self.role, content=list(self.content))


class ApiErrorBody(BaseModel):
    """Error details: `type` is one of the API error types, `message` is human readable."""

    type: str
    message: str


class ApiErrorResponse(BaseModel):
    """Body of a non-2xx response."""

    type: Literal["error"] = "error"
    error: ApiErrorBody
