"""Conditional wiring of DashScope clients and models from properties."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import httpx

from dashscope_boot.clients.api import DashScopeAgentApi, DashScopeApi, DashScopeImageApi, SpeechSynthesizer, Transcription
from dashscope_boot.clients.http import build_http_client
from dashscope_boot.config.log import get_logger
from dashscope_boot.config.properties import ConnectionConfig, DashScopeProperties
from dashscope_boot.connection import ConnectionResolver, ResolvedConnection, with_env_api_key
from dashscope_boot.models.chat import ChatModel
from dashscope_boot.models.embedding import EmbeddingModel
from dashscope_boot.models.image import ImageModel
from dashscope_boot.models.retry import RetryPolicy
from dashscope_boot.tools.registry import ToolRegistry

logger = get_logger(__name__)

CHAT_MODEL = 'chat_model'
AGENT_API = 'agent_api'
EMBEDDING_MODEL = 'embedding_model'
IMAGE_MODEL = 'image_model'
SPEECH_SYNTHESIZER = 'speech_synthesizer'
TRANSCRIPTION = 'transcription'
TOOL_REGISTRY = 'tool_registry'
RETRY_POLICY = 'retry_policy'


class DashScopeAutoConfiguration:
    """Builds every enabled DashScope feature from its properties.

    A feature is built when its `enabled` flag is set and no instance was
    supplied under the same name in `overrides`. The connections of all
    features that will be built are resolved before any HTTP client is
    created, so a missing base URL or API key raises `ConfigurationError`
    from `configure()` without leaving open clients behind.
    """

    def __init__(
        self,
        properties: DashScopeProperties,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        resolver: Optional[ConnectionResolver] = None,
    ):
        self.properties = properties
        self.shared: ConnectionConfig = with_env_api_key(properties.connection(), environ)
        self._overrides = dict(overrides or {})
        self._transport = transport
        self._resolver = resolver or ConnectionResolver()

        self.beans: Dict[str, Any] = {}
        self.connections: Dict[str, ResolvedConnection] = {}
        self._prototypes: Dict[str, Callable[[], Any]] = {}
        self._http_clients: List[httpx.AsyncClient] = []
        self._configured = False

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------
    def configure(self) -> 'DashScopeAutoConfiguration':
        if self._configured:
            return self

        props = self.properties
        self._resolve_connections()

        self._register(RETRY_POLICY, True, lambda: RetryPolicy.from_properties(props.retry))
        self._register(TOOL_REGISTRY, True, ToolRegistry)

        self._register(CHAT_MODEL, props.chat.enabled, self._chat_model)
        self._register(AGENT_API, props.chat.enabled, self._agent_api)
        self._register(EMBEDDING_MODEL, props.embedding.enabled, self._embedding_model)
        self._register(IMAGE_MODEL, props.image.enabled, self._image_model)
        self._register(TRANSCRIPTION, props.audio.transcription.enabled, self._transcription)
        self._register(SPEECH_SYNTHESIZER, props.audio.speech.enabled, self._speech_synthesizer_factory, prototype=True)

        self._configured = True
        logger.info('DashScope auto-configuration complete', beans=sorted(self.available()))
        return self

    def _register(self, name: str, enabled: bool, factory: Callable[[], Any], prototype: bool = False) -> None:
        if name in self._overrides:
            logger.debug('Using provided instance', bean=name)
            self.beans[name] = self._overrides[name]
            return

        if not enabled:
            logger.info('Feature disabled, not configuring', bean=name)
            return

        if prototype:
            self._prototypes[name] = factory()
        else:
            self.beans[name] = factory()
        logger.debug('Configured bean', bean=name)

    def _feature_connections(self) -> List[Tuple[str, ConnectionConfig, bool, Tuple[str, ...]]]:
        props = self.properties
        return [
            ('chat', props.chat, props.chat.enabled, (CHAT_MODEL, AGENT_API)),
            ('embedding', props.embedding, props.embedding.enabled, (EMBEDDING_MODEL,)),
            ('image', props.image, props.image.enabled, (IMAGE_MODEL,)),
            ('audio.transcription', props.audio.transcription, props.audio.transcription.enabled, (TRANSCRIPTION,)),
            ('audio.speech', props.audio.speech, props.audio.speech.enabled, (SPEECH_SYNTHESIZER,)),
        ]

    def _resolve_connections(self) -> None:
        for feature_name, specific, enabled, beans in self._feature_connections():
            if enabled and any(bean not in self._overrides for bean in beans):
                self.connections[feature_name] = self._resolver.resolve(self.shared, specific, feature_name)

    def _resolve(self, feature_name: str) -> ResolvedConnection:
        return self.connections[feature_name]

    def _http_client(self, connection: ResolvedConnection) -> httpx.AsyncClient:
        client = build_http_client(connection, self.properties.read_timeout, transport=self._transport)
        self._http_clients.append(client)
        return client

    def _chat_model(self) -> ChatModel:
        chat = self.properties.chat
        connection = self._resolve('chat')
        api = DashScopeApi(connection, self._http_client(connection))

        options = chat.options
        tools = self.beans[TOOL_REGISTRY].callbacks()
        if tools:
            options = options.model_copy(update={'tools': [*options.tools, *tools]})

        return ChatModel(api, options, self.beans[RETRY_POLICY])

    def _agent_api(self) -> DashScopeAgentApi:
        connection = self._resolve('chat')
        return DashScopeAgentApi(connection, self._http_client(connection))

    def _embedding_model(self) -> EmbeddingModel:
        embedding = self.properties.embedding
        connection = self._resolve('embedding')
        api = DashScopeApi(connection, self._http_client(connection))
        return EmbeddingModel(api, embedding.metadata_mode, embedding.options, self.beans[RETRY_POLICY])

    def _image_model(self) -> ImageModel:
        image = self.properties.image
        connection = self._resolve('image')
        api = DashScopeImageApi(connection, self._http_client(connection))
        return ImageModel(api, image.options, self.beans[RETRY_POLICY])

    def _transcription(self) -> Transcription:
        transcription = self.properties.audio.transcription
        connection = self._resolve('audio.transcription')
        return Transcription(connection, self._http_client(connection), transcription.options)

    def _speech_synthesizer_factory(self) -> Callable[[], SpeechSynthesizer]:
        speech = self.properties.audio.speech
        connection = self._resolve('audio.speech')
        http_client = self._http_client(connection)
        return lambda: SpeechSynthesizer(connection, http_client, speech.options)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get(self, name: str) -> Any:
        """Return the bean registered under `name`, building prototypes afresh."""
        if name in self._prototypes:
            return self._prototypes[name]()
        try:
            return self.beans[name]
        except KeyError:
            raise LookupError(f"No '{name}' is configured; the feature is disabled or unknown") from None

    def available(self) -> List[str]:
        return [*self.beans, *self._prototypes]

    def is_available(self, name: str) -> bool:
        return name in self.beans or name in self._prototypes

    @property
    def chat_model(self) -> ChatModel:
        return self.get(CHAT_MODEL)

    @property
    def agent_api(self) -> DashScopeAgentApi:
        return self.get(AGENT_API)

    @property
    def embedding_model(self) -> EmbeddingModel:
        return self.get(EMBEDDING_MODEL)

    @property
    def image_model(self) -> ImageModel:
        return self.get(IMAGE_MODEL)

    @property
    def transcription(self) -> Transcription:
        return self.get(TRANSCRIPTION)

    @property
    def tool_registry(self) -> ToolRegistry:
        return self.get(TOOL_REGISTRY)

    def speech_synthesizer(self) -> SpeechSynthesizer:
        """A new synthesizer per call; they share one HTTP client."""
        return self.get(SPEECH_SYNTHESIZER)

    async def close(self) -> None:
        """Close the HTTP clients created during wiring; provided instances are left alone."""
        for client in self._http_clients:
            await client.aclose()
        self._http_clients.clear()
