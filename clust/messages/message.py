from typing import List, Union

from pydantic import BaseModel

from .content import Content, ContentBlock, TextContentBlock
from .types import Role


class Message(BaseModel):
    """一条对话消息（user 或 assistant）"""

    role: Role
    content: Content

    @classmethod
    def user(cls, content: Union[str, List[ContentBlock]]) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: Union[str, List[ContentBlock]]) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    def text(self) -> str:
        """Concatenated text of the message, ignoring non-text blocks."""
        if isinstance(self.content, str):
            return self.content
        return "".join(
            block.text for block in self.content if isinstance(block, TextContentBlock)
        )
