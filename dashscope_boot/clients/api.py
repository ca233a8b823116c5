"""Thin async clients for the DashScope HTTP endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import orjson

from dashscope_boot.clients.exception_mapper import HttpExceptionMapper
from dashscope_boot.config.log import get_logger
from dashscope_boot.config.options import SpeechOptions, TranscriptionOptions, merge_options
from dashscope_boot.connection import ResolvedConnection

logger = get_logger(__name__)

ASYNC_HEADER = {'X-DashScope-Async': 'enable'}

TEXT_GENERATION_PATH = '/api/v1/services/aigc/text-generation/generation'
TEXT_EMBEDDING_PATH = '/api/v1/services/embeddings/text-embedding/text-embedding'
IMAGE_SYNTHESIS_PATH = '/api/v1/services/aigc/text2image/image-synthesis'
SPEECH_SYNTHESIS_PATH = '/api/v1/services/audio/tts'
TRANSCRIPTION_PATH = '/api/v1/services/audio/asr/transcription'
AGENT_COMPLETION_PATH = '/api/v1/apps/{app_id}/completion'
TASK_PATH = '/api/v1/tasks/{task_id}'


class BaseDashScopeClient:
    """Shared request plumbing: error mapping and JSON decoding."""

    def __init__(
        self,
        connection: ResolvedConnection,
        http_client: httpx.AsyncClient,
        exception_mapper: Optional[HttpExceptionMapper] = None,
    ):
        self.connection = connection
        self._client = http_client
        self._mapper = exception_mapper or HttpExceptionMapper()

    @property
    def base_url(self) -> str:
        return self.connection.base_url

    @property
    def workspace_id(self) -> Optional[str]:
        return self.connection.workspace_id

    async def _send(self, method: str, path: str, body: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        logger.debug('DashScope request', method=method, path=path)
        try:
            if body is None:
                response = await self._client.request(method, path, headers=headers)
            else:
                response = await self._client.request(method, path, content=orjson.dumps(body), headers={'Content-Type': 'application/json', **(headers or {})})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            mapped = self._mapper.map_httpx_exception(exc)
            logger.warning('DashScope request failed', method=method, path=path, error=mapped.message)
            raise mapped from exc
        return response

    async def _post_json(self, path: str, body: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        response = await self._send('POST', path, body, headers)
        return orjson.loads(response.content)

    async def task(self, task_id: str) -> Dict[str, Any]:
        """Fetch the status of an asynchronous task."""
        response = await self._send('GET', TASK_PATH.format(task_id=task_id))
        return orjson.loads(response.content)


class DashScopeApi(BaseDashScopeClient):
    """Text generation and text embedding endpoints."""

    async def chat_completion(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post_json(TEXT_GENERATION_PATH, body)

    async def embeddings(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post_json(TEXT_EMBEDDING_PATH, body)


class DashScopeAgentApi(BaseDashScopeClient):
    """Application (agent) completion endpoint."""

    async def call(self, app_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not app_id:
            raise ValueError('app_id is required for agent calls')
        return await self._post_json(AGENT_COMPLETION_PATH.format(app_id=app_id), body)


class DashScopeImageApi(BaseDashScopeClient):
    """Asynchronous text-to-image synthesis."""

    async def submit(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post_json(IMAGE_SYNTHESIS_PATH, body, headers=ASYNC_HEADER)


class SpeechSynthesizer(BaseDashScopeClient):
    """Text-to-speech; returns the encoded audio bytes."""

    def __init__(
        self,
        connection: ResolvedConnection,
        http_client: httpx.AsyncClient,
        options: Optional[SpeechOptions] = None,
        exception_mapper: Optional[HttpExceptionMapper] = None,
    ):
        super().__init__(connection, http_client, exception_mapper)
        self.default_options = options or SpeechOptions()

    async def synthesize(self, text: str, options: Optional[SpeechOptions] = None) -> bytes:
        merged = merge_options(self.default_options, options)
        body = {
            'model': merged.model,
            'input': {'text': text},
            'parameters': {'format': merged.format, 'sample_rate': merged.sample_rate},
        }
        response = await self._send('POST', SPEECH_SYNTHESIS_PATH, body)
        return response.content


class Transcription(BaseDashScopeClient):
    """Asynchronous file transcription; poll the returned task with `task()`."""

    def __init__(
        self,
        connection: ResolvedConnection,
        http_client: httpx.AsyncClient,
        options: Optional[TranscriptionOptions] = None,
        exception_mapper: Optional[HttpExceptionMapper] = None,
    ):
        super().__init__(connection, http_client, exception_mapper)
        self.default_options = options or TranscriptionOptions()

    async def submit(self, file_urls: List[str], options: Optional[TranscriptionOptions] = None) -> Dict[str, Any]:
        if not file_urls:
            raise ValueError('At least one file URL is required')
        merged = merge_options(self.default_options, options)
        body = {
            'model': merged.model,
            'input': {'file_urls': list(file_urls)},
            'parameters': merged.model_dump(include={'language_hints'}, exclude_none=True),
        }
        return await self._post_json(TRANSCRIPTION_PATH, body, headers=ASYNC_HEADER)
