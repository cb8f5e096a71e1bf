from typing import Any, Dict, Iterator, List, Optional, Union

from .client import Client
from .messages.message import Message
from .messages.request import MessagesRequestBody
from .messages.response import MessagesResponseBody
from .messages.types import Role


class Conversation:
    """
    Multi-turn chat on top of a Client.

    Keeps the message history and appends each assistant reply so the next
    call continues the conversation.

    Example:
        >>> conv = Conversation(
        ...     Client.from_env(),
        ...     model="claude-3-haiku-20240307",
        ...     system="You are a helpful assistant."
        ... )
        >>> conv.send("Where is the capital of Japan?").text()
        >>> for text in conv.send("What is the population of the city?", stream=True):
        ...     print(text, end="")
    """

    def __init__(
        self,
        client: Client,
        model: str,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        **params: Any
    ):
        """
        Args:
            client: Client used to send requests
            model: Model name (e.g., "claude-3-opus-20240229")
            system: Optional system prompt sent with every request
            max_tokens: max_tokens of every request
            **params: Extra request fields (temperature, top_p, stop_sequences, tools, ...)
        """
        if system is not None and not isinstance(system, str):
            raise TypeError(f"system must be str, got {type(system)}")

        self.client = client
        self.model = model
        self.system = system or None
        self.max_tokens = max_tokens
        self.params = params
        self.messages: List[Message] = []
        self.responses: List[MessagesResponseBody] = []

    def add_messages(self, messages: List[Union[Message, Dict[str, Any]]]) -> None:
        """
        Batch add messages, e.g. to restore a previous conversation.

        Args:
            messages: Message objects or dicts like {"role": "user", "content": "hello"}
        """
        for msg in messages:
            if isinstance(msg, Message):
                self.messages.append(msg)
            elif isinstance(msg, dict):
                role = msg.get('role')
                if role not in (Role.USER.value, Role.ASSISTANT.value):
                    raise ValueError(f"Invalid role: {role}")
                self.messages.append(Message(role=role, content=msg.get('content') or ""))
            else:
                raise TypeError(f"Message must be Message object or dict, got: {type(msg)}")

    def send(
        self,
        message: Union[str, Message],
        stream: bool = False,
    ) -> Union[MessagesResponseBody, Iterator[str]]:
        """
        Send a user message.

        Returns:
            The response when stream is False, otherwise an iterator of text
            chunks. The user message and the reply are added to the history
            together, after the reply is complete (in streaming mode, once the
            iterator is exhausted). A failed call leaves the history unchanged.
        """
        user_message = message if isinstance(message, Message) else Message.user(message)

        if stream:
            return self._send_stream(user_message)

        response = self.client.create_message(self._build_body(user_message))
        self._record(user_message, response)
        return response

    def _send_stream(self, user_message: Message) -> Iterator[str]:
        with self.client.create_message_stream(self._build_body(user_message)) as stream:
            yield from stream.text_stream()
            response = stream.get_final_message()
        self._record(user_message, response)

    def _build_body(self, user_message: Message) -> MessagesRequestBody:
        return MessagesRequestBody(
            model=self.model,
            messages=self.messages + [user_message],
            system=self.system,
            max_tokens=self.max_tokens,
            **self.params,
        )

    def _record(self, user_message: Message, response: MessagesResponseBody) -> None:
        # 请求成功后才写入历史，失败的轮次不会残留
        self.messages += [user_message, response.to_message()]
        self.responses.append(response)

    def reset(self):
        """Clear the history. The system prompt and parameters are kept."""
        self.messages.clear()
        self.responses.clear()

    def stats(self) -> Dict[str, Any]:
        """
        Get conversation statistics.

        Example:
            >>> conv.stats()
            {'total_messages': 4, 'by_role': {'user': 2, 'assistant': 2},
             'input_tokens': 58, 'output_tokens': 41}
        """
        stats: Dict[str, Any] = {
            'total_messages': len(self.messages),
            'by_role': {},
            'input_tokens': 0,
            'output_tokens': 0,
        }
        for msg in self.messages:
            role = str(msg.role)
            stats['by_role'][role] = stats['by_role'].get(role, 0) + 1
        for response in self.responses:
            stats['input_tokens'] += response.usage.input_tokens
            stats['output_tokens'] += response.usage.output_tokens
        return stats

    def close(self):
        """Close the client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
