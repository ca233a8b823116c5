"""Default request options for each DashScope model type."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from dashscope_boot.tools.registry import ToolCallback

DEFAULT_CHAT_MODEL = 'qwen-plus'
DEFAULT_EMBEDDING_MODEL = 'text-embedding-v1'
DEFAULT_IMAGE_MODEL = 'wanx-v1'
DEFAULT_SPEECH_MODEL = 'sambert-zhichu-v1'
DEFAULT_TRANSCRIPTION_MODEL = 'paraformer-v1'


class MetadataMode(str, Enum):
    """Which document metadata is folded into the text sent for embedding."""

    ALL = 'ALL'
    EMBED = 'EMBED'
    INFERENCE = 'INFERENCE'
    NONE = 'NONE'


class ChatOptions(BaseModel):
    """Text generation parameters."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    model: str = Field(default=DEFAULT_CHAT_MODEL)
    temperature: Optional[float] = Field(default=None, ge=0.0, lt=2.0)
    top_p: Optional[float] = Field(default=None, alias='top-p', gt=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, alias='top-k')
    max_tokens: Optional[int] = Field(default=None, alias='max-tokens', gt=0)
    seed: Optional[int] = Field(default=None)
    stop: Optional[List[str]] = Field(default=None)
    enable_search: bool = Field(default=False, alias='enable-search')
    tools: List[ToolCallback] = Field(default_factory=list, exclude=True, description='Function callbacks offered to the model')

    def to_parameters(self) -> dict:
        """Return the `parameters` object of a generation request."""
        parameters = self.model_dump(exclude={'model'}, exclude_none=True)
        parameters['result_format'] = 'message'
        if self.tools:
            parameters['tools'] = [tool.to_tool_definition() for tool in self.tools]
        return parameters


class EmbeddingOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str = Field(default=DEFAULT_EMBEDDING_MODEL)
    text_type: str = Field(default='document', alias='text-type', pattern='^(document|query)$')


class ImageOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str = Field(default=DEFAULT_IMAGE_MODEL)
    n: int = Field(default=1, ge=1, le=4)
    size: str = Field(default='1024*1024', pattern=r'^\d+\*\d+$')
    style: Optional[str] = Field(default=None)
    seed: Optional[int] = Field(default=None)
    negative_prompt: Optional[str] = Field(default=None, alias='negative-prompt')


class SpeechOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str = Field(default=DEFAULT_SPEECH_MODEL)
    format: str = Field(default='wav')
    sample_rate: int = Field(default=48000, alias='sample-rate', gt=0)


class TranscriptionOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str = Field(default=DEFAULT_TRANSCRIPTION_MODEL)
    language_hints: Optional[List[str]] = Field(default=None, alias='language-hints')


OptionsT = TypeVar('OptionsT', bound=BaseModel)


def merge_options(defaults: OptionsT, overrides: Optional[OptionsT]) -> OptionsT:
    """Overlay explicitly set fields of `overrides` on top of `defaults`.

    Tool callbacks are concatenated rather than replaced.
    """
    if overrides is None:
        return defaults

    update = {name: getattr(overrides, name) for name in overrides.model_fields_set if name != 'tools'}
    merged = defaults.model_copy(update=update)
    extra_tools = getattr(overrides, 'tools', None)
    if extra_tools:
        merged = merged.model_copy(update={'tools': [*getattr(defaults, 'tools', []), *extra_tools]})
    return merged
