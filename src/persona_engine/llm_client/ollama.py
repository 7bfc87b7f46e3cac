"""Ollama model manager.

This module provides OllamaModelManager, a ModelManager backed by a local
Ollama service. It checks the service, pulls missing models, and streams chat
completions as newline-delimited JSON, translating httpx failures into the
LLM client error hierarchy.
"""

import time
from collections.abc import AsyncIterator
from typing import Any

import httpx
import orjson

from persona_engine.config.settings import get_settings
from persona_engine.llm_client.models import ModelDefinition
from persona_engine.llm_client.types import (
    ChatChunk,
    ChatMessage,
    ChatOptions,
    LLMConnectionError,
    LLMInvalidResponse,
    LLMServerError,
    LLMTimeout,
    ModelNotInitializedError,
    ProgressCallback,
    UnknownModelError,
)
from persona_engine.telemetry import get_logger
from persona_engine.telemetry.events import (
    MODEL_DISPOSED,
    MODEL_INIT_COMPLETED,
    MODEL_INIT_STARTED,
    MODEL_PULL_STARTED,
    STREAM_LINE_SKIPPED,
)

log = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.7
AVAILABILITY_TIMEOUT_SECONDS = 2.0


def _report(callback: ProgressCallback | None, text: str, progress: float) -> None:
    if callback is not None:
        callback({"text": text, "progress": progress})


def _is_done(data: dict[str, Any]) -> bool:
    done = data.get("done")
    return done is True or done == "true"


class OllamaModelManager:
    """ModelManager that runs chat completions on a local Ollama service.

    Attributes:
        base_url: Ollama base URL (e.g., "http://localhost:11434").
        timeout_seconds: Timeout applied to chat requests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            base_url: Ollama base URL. If None, uses settings.ollama_base_url.
            timeout_seconds: Chat request timeout. If None, uses settings.llm_timeout_seconds.
            transport: Optional httpx transport, used to route requests in tests.
        """
        config = get_settings()
        self.base_url = (base_url or config.ollama_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or config.llm_timeout_seconds
        self._service_check_timeout = config.llm_service_check_timeout_seconds
        self._model_list_timeout = config.llm_model_list_timeout_seconds
        self._pull_timeout = config.llm_pull_timeout_seconds
        self._transport = transport
        self._model: ModelDefinition | None = None
        self._initialized = False

    def _client(self, timeout_s: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_s, connect=min(10.0, timeout_s)),
            transport=self._transport,
        )

    @property
    def current_model(self) -> str | None:
        """Catalog id of the initialized model, if any."""
        return self._model.id if self._model else None

    def is_ready(self) -> bool:
        """Return True once init() has completed."""
        return self._initialized

    async def init(
        self, model: ModelDefinition, progress_callback: ProgressCallback | None = None
    ) -> None:
        """Make sure the backend can serve model, pulling it when missing.

        Args:
            model: Catalog entry to initialize.
            progress_callback: Optional receiver for progress reports.

        Raises:
            UnknownModelError: If the model has no Ollama mapping.
            LLMConnectionError: If the Ollama service is unreachable.
            LLMTimeout: If listing or pulling models times out.
            LLMServerError: If the pull request is rejected.
        """
        if self._initialized and self._model is not None and self._model.id == model.id:
            return

        backend_model = model.backend_model
        if not backend_model:
            raise UnknownModelError(f"Model {model.id} has no Ollama model mapping")

        start_time = time.time()
        log.info(MODEL_INIT_STARTED, model_id=model.id, backend_model=backend_model)
        _report(progress_callback, f"Checking Ollama model: {backend_model}", 0.1)

        try:
            async with self._client(self._service_check_timeout) as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise LLMConnectionError(
                f"Ollama service not available at {self.base_url}. Make sure Ollama is running."
            ) from e

        _report(progress_callback, f"Ensuring model {backend_model} is available...", 0.3)
        installed = await self._list_models()
        if not any(
            name == backend_model or name.startswith(f"{backend_model}:") for name in installed
        ):
            _report(progress_callback, f"Pulling model {backend_model}...", 0.5)
            await self._pull_model(backend_model)

        _report(progress_callback, f"Model {backend_model} ready", 1.0)
        self._model = model
        self._initialized = True
        log.info(
            MODEL_INIT_COMPLETED,
            model_id=model.id,
            backend_model=backend_model,
            duration_ms=int((time.time() - start_time) * 1000),
        )

    async def _list_models(self) -> list[str]:
        try:
            async with self._client(self._model_list_timeout) as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise LLMTimeout("Failed to list Ollama models: timeout") from e
        except httpx.HTTPError as e:
            raise LLMConnectionError(f"Failed to list Ollama models: {e}") from e
        except ValueError as e:
            raise LLMInvalidResponse(f"Ollama returned an invalid model list: {e}") from e

        models = data.get("models") if isinstance(data, dict) else None
        return [m["name"] for m in models or [] if isinstance(m, dict) and "name" in m]

    async def _pull_model(self, backend_model: str) -> None:
        log.info(MODEL_PULL_STARTED, backend_model=backend_model)
        try:
            async with self._client(self._pull_timeout) as client:
                response = await client.post(
                    "/api/pull", json={"name": backend_model, "stream": False}
                )
                if response.is_error:
                    raise LLMServerError(
                        f"Failed to pull model {backend_model}: "
                        f"{response.status_code} {response.reason_phrase}"
                    )
        except httpx.TimeoutException as e:
            raise LLMTimeout(f"Model pull timeout after {self._pull_timeout:.0f} seconds") from e
        except httpx.HTTPError as e:
            raise LLMConnectionError(f"Failed to pull model {backend_model}: {e}") from e

    async def chat(
        self, messages: list[ChatMessage], options: ChatOptions | None = None
    ) -> AsyncIterator[ChatChunk]:
        """Start a streaming chat completion.

        Args:
            messages: Ordered chat messages.
            options: Sampling options; temperature defaults to 0.7.

        Returns:
            Async iterator of chunks. Iterate it to completion to release the connection.

        Raises:
            ModelNotInitializedError: If init() has not completed.
            LLMTimeout: If the request times out before the response starts.
            LLMConnectionError: If the service cannot be reached.
            LLMServerError: If the service answers with an error status.
        """
        if not self._initialized or self._model is None or not self._model.backend_model:
            raise ModelNotInitializedError("Model engine not initialized. Call init() first.")

        options = options or {}
        sampling = {
            "temperature": options.get("temperature", DEFAULT_TEMPERATURE),
            "top_p": options.get("top_p"),
            "num_predict": options.get("max_tokens"),
        }
        payload = {
            "model": self._model.backend_model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "stream": True,
            "options": {key: value for key, value in sampling.items() if value is not None},
        }

        client = self._client(self.timeout_seconds)
        try:
            request = client.build_request("POST", "/api/chat", json=payload)
            response = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            await client.aclose()
            raise LLMTimeout(
                f"Ollama request timeout after {self.timeout_seconds:.0f} seconds"
            ) from e
        except httpx.HTTPError as e:
            await client.aclose()
            raise LLMConnectionError(f"Failed to reach Ollama at {self.base_url}: {e}") from e

        if response.is_error:
            status = f"{response.status_code} {response.reason_phrase}"
            await response.aclose()
            await client.aclose()
            raise LLMServerError(f"Ollama API error: {status}")

        return self._stream_chunks(client, response)

    async def _stream_chunks(
        self, client: httpx.AsyncClient, response: httpx.Response
    ) -> AsyncIterator[ChatChunk]:
        try:
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                try:
                    data = orjson.loads(line)
                except orjson.JSONDecodeError:
                    log.debug(STREAM_LINE_SKIPPED, line_preview=line[:80])
                    continue
                if not isinstance(data, dict):
                    continue

                chunk: ChatChunk = {}
                message = data.get("message")
                content = message.get("content") if isinstance(message, dict) else None
                if content:
                    chunk["content"] = content
                done = _is_done(data)
                if done:
                    chunk["done"] = True
                if chunk:
                    yield chunk
                if done:
                    return
        except httpx.TimeoutException as e:
            raise LLMTimeout("Ollama stream timed out") from e
        except httpx.HTTPError as e:
            raise LLMInvalidResponse(f"Ollama stream interrupted: {e}") from e
        finally:
            await response.aclose()
            await client.aclose()

    async def dispose(self) -> None:
        """Forget the initialized model."""
        if self._model is not None:
            log.info(MODEL_DISPOSED, model_id=self._model.id)
        self._initialized = False
        self._model = None


async def is_ollama_available(
    base_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None
) -> bool:
    """Return True if the Ollama service answers within two seconds."""
    url = (base_url or get_settings().ollama_base_url).rstrip("/")
    try:
        async with httpx.AsyncClient(
            base_url=url, timeout=AVAILABILITY_TIMEOUT_SECONDS, transport=transport
        ) as client:
            response = await client.get("/api/tags")
            return response.is_success
    except httpx.HTTPError:
        return False
