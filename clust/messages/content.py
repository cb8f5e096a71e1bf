from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .types import ImageMediaType


class TextContentBlock(BaseModel):
    """Plain text content."""

    type: Literal["text"] = "text"
    text: str = ""


class ImageContentSource(BaseModel):
    """Base64 encoded image data."""

    type: Literal["base64"] = "base64"
    media_type: ImageMediaType = ImageMediaType.JPEG
    data: str = ""


class ImageContentBlock(BaseModel):
    """Image content (vision input)."""

    type: Literal["image"] = "image"
    source: ImageContentSource = Field(default_factory=ImageContentSource)


class ToolUseContentBlock(BaseModel):
    """A tool invocation requested by the assistant."""

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


class ToolResultContentBlock(BaseModel):
    """The result of a tool invocation, sent back in a user message."""

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: Optional[Union[str, List[Union[TextContentBlock, ImageContentBlock]]]] = None
    is_error: Optional[bool] = None


ContentBlock = Annotated[
    Union[
        TextContentBlock,
        ImageContentBlock,
        ToolUseContentBlock,
        ToolResultContentBlock,
    ],
    Field(discriminator="type"),
]

# 响应中只会出现文本和工具调用
ResponseContentBlock = Annotated[
    Union[TextContentBlock, ToolUseContentBlock],
    Field(discriminator="type"),
]

# 单个字符串或内容块列表
Content = Union[str, List[ContentBlock]]
