"""DashScope connection and per-feature property models.

The YAML layout mirrors the property paths used in error messages::

    dashscope:
      base-url: https://dashscope.aliyuncs.com
      api-key: !env DASHSCOPE_API_KEY
      chat:
        api-key: sk-chat-only
        options:
          model: qwen-max
      audio:
        speech:
          enabled: false
"""

from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dashscope_boot.config.options import (
    ChatOptions,
    EmbeddingOptions,
    ImageOptions,
    MetadataMode,
    SpeechOptions,
    TranscriptionOptions,
)

ROOT_PREFIX = 'dashscope'
DEFAULT_BASE_URL = 'https://dashscope.aliyuncs.com'
DEFAULT_READ_TIMEOUT = 60


class ConnectionConfig(BaseModel):
    """Connection settings shared by the root prefix and every feature prefix."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    base_url: Optional[str] = Field(default=None, alias='base-url', description='Service endpoint')
    api_key: Optional[str] = Field(default=None, alias='api-key', description='DashScope API key')
    workspace_id: Optional[str] = Field(default=None, alias='workspace-id', description='Workspace sent as the DashScope-Workspace header')


class ChatProperties(ConnectionConfig):
    CONFIG_PREFIX: ClassVar[str] = f'{ROOT_PREFIX}.chat'

    enabled: bool = Field(default=True)
    options: ChatOptions = Field(default_factory=ChatOptions)


class EmbeddingProperties(ConnectionConfig):
    CONFIG_PREFIX: ClassVar[str] = f'{ROOT_PREFIX}.embedding'

    enabled: bool = Field(default=True)
    metadata_mode: MetadataMode = Field(default=MetadataMode.EMBED, alias='metadata-mode')
    options: EmbeddingOptions = Field(default_factory=EmbeddingOptions)


class ImageProperties(ConnectionConfig):
    CONFIG_PREFIX: ClassVar[str] = f'{ROOT_PREFIX}.image'

    enabled: bool = Field(default=True)
    options: ImageOptions = Field(default_factory=ImageOptions)


class AudioSpeechProperties(ConnectionConfig):
    CONFIG_PREFIX: ClassVar[str] = f'{ROOT_PREFIX}.audio.speech'

    enabled: bool = Field(default=True)
    options: SpeechOptions = Field(default_factory=SpeechOptions)


class AudioTranscriptionProperties(ConnectionConfig):
    CONFIG_PREFIX: ClassVar[str] = f'{ROOT_PREFIX}.audio.transcription'

    enabled: bool = Field(default=True)
    options: TranscriptionOptions = Field(default_factory=TranscriptionOptions)


class AudioProperties(BaseModel):
    model_config = ConfigDict(frozen=True)

    speech: AudioSpeechProperties = Field(default_factory=AudioSpeechProperties)
    transcription: AudioTranscriptionProperties = Field(default_factory=AudioTranscriptionProperties)


class RetryProperties(BaseModel):
    """Retry settings handed to every model wrapper."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    max_attempts: int = Field(default=3, alias='max-attempts', ge=1)
    backoff_seconds: float = Field(default=1.0, alias='backoff-seconds', ge=0.0)
    retry_on_status: List[int] = Field(default_factory=lambda: [429, 500, 502, 503, 504], alias='retry-on-status')


class DashScopeProperties(ConnectionConfig):
    """Root `dashscope` properties: the shared connection plus every feature block."""

    CONFIG_PREFIX: ClassVar[str] = ROOT_PREFIX

    base_url: Optional[str] = Field(default=DEFAULT_BASE_URL, alias='base-url', description='Service endpoint')
    read_timeout: int = Field(default=DEFAULT_READ_TIMEOUT, alias='read-timeout', gt=0, description='HTTP read timeout in seconds')

    chat: ChatProperties = Field(default_factory=ChatProperties)
    embedding: EmbeddingProperties = Field(default_factory=EmbeddingProperties)
    image: ImageProperties = Field(default_factory=ImageProperties)
    audio: AudioProperties = Field(default_factory=AudioProperties)
    retry: RetryProperties = Field(default_factory=RetryProperties)

    def connection(self) -> ConnectionConfig:
        """Return only the shared connection fields."""
        return ConnectionConfig(base_url=self.base_url, api_key=self.api_key, workspace_id=self.workspace_id)
