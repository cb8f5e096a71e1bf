# clust/client.py
"""
HTTP clients for the Messages API.

Client and AsyncClient share header assembly, request validation and error
mapping; they differ only in the httpx client they drive.
"""
from typing import Any, Dict, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from . import __version__
from .config import ClientConfig
from .exceptions import ApiError, ClientError, ClustError, ConfigError, StreamOptionMismatch
from .messages.decoder import StreamDecoder
from .messages.request import MessagesRequestBody
from .messages.response import ApiErrorResponse, MessagesResponseBody
from .messages.stream import AsyncMessageStream, MessageStream
from .messages.types import ApiErrorType


class _BaseClient:
    """Configuration, headers and response handling shared by both clients."""

    def __init__(
            self,
            api_key: Optional[str] = None,
            *,
            config: Optional[ClientConfig] = None,
            **overrides: Any,
    ):
        if config is not None:
            if api_key is not None or overrides:
                raise ConfigError("Pass either config or api_key/overrides, not both")
            self.config = config
        elif api_key is None:
            self.config = ClientConfig.from_env(**overrides)
        else:
            self.config = ClientConfig._build({"api_key": api_key, **overrides})

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "x-api-key": self.config.api_key,
            "anthropic-version": str(self.config.version),
            "content-type": "application/json",
            "User-Agent": f"clust/{__version__}",
        }
        if self.config.beta is not None:
            headers["anthropic-beta"] = str(self.config.beta)
        headers.update(self.config.headers)
        return headers

    @staticmethod
    def _prepare_body(body: MessagesRequestBody, stream: bool) -> MessagesRequestBody:
        if stream:
            if body.stream is False:
                raise StreamOptionMismatch(
                    "create_message_stream requires stream=True (or unset)"
                )
            if body.stream is None:
                body = body.model_copy(update={"stream": True})
        elif body.stream:
            raise StreamOptionMismatch(
                "create_message does not accept stream=True; use create_message_stream"
            )
        return body

    def _log_request(self, body: MessagesRequestBody) -> None:
        logger.info(
            f"📤 [Client] POST {self.config.messages_url} "
            f"model={body.model} messages={len(body.messages)} stream={bool(body.stream)}"
        )

    @staticmethod
    def _parse_response(status: int, text: str) -> MessagesResponseBody:
        if 200 <= status < 300:
            try:
                return MessagesResponseBody.model_validate_json(text)
            except ValidationError as e:
                raise ClientError(f"Failed to deserialize response as JSON: {e}", text=text) from e
        raise _BaseClient._error_from_response(status, text)

    @staticmethod
    def _error_from_response(status: int, text: str) -> ClustError:
        try:
            error_response = ApiErrorResponse.model_validate_json(text)
        except ValidationError as e:
            return ClientError(
                f"Failed to deserialize error response as JSON (status {status}): {e}", text=text
            )

        error_type = ApiErrorType.from_status(status)
        if error_type is ApiErrorType.UNKNOWN_ERROR:
            error_type = ApiErrorType.from_name(error_response.error.type)
        logger.warning(f"❌ [Client] API error ({status}) {error_type}: {error_response.error.message}")
        return ApiError(status, error_type, error_response)


class Client(_BaseClient):
    """
    Synchronous Messages API client.

    Example:
        >>> client = Client.from_env()
        >>> body = MessagesRequestBody(
        ...     model="claude-3-haiku-20240307",
        ...     messages=[Message.user("Hello!")],
        ...     max_tokens=256,
        ... )
        >>> print(client.create_message(body).text())
    """

    def __init__(
            self,
            api_key: Optional[str] = None,
            *,
            config: Optional[ClientConfig] = None,
            http_client: Optional[httpx.Client] = None,
            **overrides: Any,
    ):
        super().__init__(api_key, config=config, **overrides)
        self._owns_client = http_client is None
        self._client = http_client or self._create_http_client()

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **kwargs: Any) -> "Client":
        """Build a client from ANTHROPIC_* environment variables (and an optional .env file)."""
        return cls(config=ClientConfig.from_env(env_file), **kwargs)

    def _create_http_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.config.timeout,
            transport=httpx.HTTPTransport(retries=self.config.max_retries),
        )

    def create_message(self, body: MessagesRequestBody) -> MessagesResponseBody:
        """
        Send a request and wait for the complete message.

        Raises:
            StreamOptionMismatch: If body.stream is True
            ApiError: If the server answers with a non-2xx status
            ClientError: If the request fails or the body cannot be decoded
        """
        body = self._prepare_body(body, stream=False)
        self._log_request(body)
        try:
            response = self._client.post(
                self.config.messages_url,
                headers=self._build_headers(),
                json=body.to_payload(),
            )
        except httpx.HTTPError as e:
            raise ClientError(f"HTTP request error: {e}") from e
        return self._parse_response(response.status_code, response.text)

    def create_message_stream(
            self,
            body: MessagesRequestBody,
            decoder: Optional[StreamDecoder] = None,
    ) -> MessageStream:
        """
        Send a streaming request.

        Errors reported with a non-2xx status are raised here, before any
        event is yielded.

        Raises:
            StreamOptionMismatch: If body.stream is False
            ApiError: If the server answers with a non-2xx status
            ClientError: If the request fails
        """
        body = self._prepare_body(body, stream=True)
        self._log_request(body)
        request = self._client.build_request(
            "POST",
            self.config.messages_url,
            headers=self._build_headers(),
            json=body.to_payload(),
        )
        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ClientError(f"HTTP request error: {e}") from e

        if response.is_success:
            return MessageStream(response, decoder)

        try:
            response.read()
        except httpx.HTTPError as e:
            raise ClientError(f"Reading response text failed: {e}") from e
        finally:
            response.close()
        raise self._error_from_response(response.status_code, response.text)

    def close(self):
        """Clean up resources."""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AsyncClient(_BaseClient):
    """Asynchronous Messages API client."""

    def __init__(
            self,
            api_key: Optional[str] = None,
            *,
            config: Optional[ClientConfig] = None,
            http_client: Optional[httpx.AsyncClient] = None,
            **overrides: Any,
    ):
        super().__init__(api_key, config=config, **overrides)
        self._owns_client = http_client is None
        self._client = http_client or self._create_http_client()

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **kwargs: Any) -> "AsyncClient":
        return cls(config=ClientConfig.from_env(env_file), **kwargs)

    def _create_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=httpx.AsyncHTTPTransport(retries=self.config.max_retries),
        )

    async def create_message(self, body: MessagesRequestBody) -> MessagesResponseBody:
        body = self._prepare_body(body, stream=False)
        self._log_request(body)
        try:
            response = await self._client.post(
                self.config.messages_url,
                headers=self._build_headers(),
                json=body.to_payload(),
            )
        except httpx.HTTPError as e:
            raise ClientError(f"HTTP request error: {e}") from e
        return self._parse_response(response.status_code, response.text)

    async def create_message_stream(
            self,
            body: MessagesRequestBody,
            decoder: Optional[StreamDecoder] = None,
    ) -> AsyncMessageStream:
        body = self._prepare_body(body, stream=True)
        self._log_request(body)
        request = self._client.build_request(
            "POST",
            self.config.messages_url,
            headers=self._build_headers(),
            json=body.to_payload(),
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ClientError(f"HTTP request error: {e}") from e

        if response.is_success:
            return AsyncMessageStream(response, decoder)

        try:
            await response.aread()
        except httpx.HTTPError as e:
            raise ClientError(f"Reading response text failed: {e}") from e
        finally:
            await response.aclose()
        raise self._error_from_response(response.status_code, response.text)

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
