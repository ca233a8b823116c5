"""Tests for conditional wiring of DashScope features."""

import httpx
import pytest

from dashscope_boot.clients.api import DashScopeAgentApi, SpeechSynthesizer, Transcription
from dashscope_boot.clients.http import build_http_client
from dashscope_boot.config.properties import DashScopeProperties
from dashscope_boot.connection import DASHSCOPE_API_KEY_ENV, ConfigurationError
from dashscope_boot.di.autoconfig import (
    AGENT_API,
    CHAT_MODEL,
    EMBEDDING_MODEL,
    IMAGE_MODEL,
    RETRY_POLICY,
    SPEECH_SYNTHESIZER,
    TOOL_REGISTRY,
    TRANSCRIPTION,
    DashScopeAutoConfiguration,
)
from dashscope_boot.models.chat import ChatModel
from dashscope_boot.models.embedding import EmbeddingModel
from dashscope_boot.models.image import ImageModel
from dashscope_boot.models.retry import RetryPolicy
from dashscope_boot.tools.registry import ToolCallback, ToolRegistry


def props(**data) -> DashScopeProperties:
    data.setdefault('api-key', 'sk-shared')
    return DashScopeProperties(**data)


def configure(properties: DashScopeProperties, **kwargs) -> DashScopeAutoConfiguration:
    kwargs.setdefault('environ', {})
    return DashScopeAutoConfiguration(properties, **kwargs).configure()


class TestDefaults:
    def test_all_features_built_by_default(self):
        autoconfig = configure(props())

        assert isinstance(autoconfig.chat_model, ChatModel)
        assert isinstance(autoconfig.agent_api, DashScopeAgentApi)
        assert isinstance(autoconfig.embedding_model, EmbeddingModel)
        assert isinstance(autoconfig.image_model, ImageModel)
        assert isinstance(autoconfig.transcription, Transcription)
        assert isinstance(autoconfig.speech_synthesizer(), SpeechSynthesizer)
        assert isinstance(autoconfig.tool_registry, ToolRegistry)
        assert isinstance(autoconfig.get(RETRY_POLICY), RetryPolicy)

    def test_connections_recorded_per_feature(self):
        autoconfig = configure(props(chat={'base-url': 'https://chat.test', 'workspace-id': 'ws-chat'}))

        assert set(autoconfig.connections) == {'chat', 'embedding', 'image', 'audio.speech', 'audio.transcription'}
        assert autoconfig.connections['chat'].base_url == 'https://chat.test'
        assert autoconfig.connections['chat'].headers == {'DashScope-Workspace': ['ws-chat']}
        assert autoconfig.connections['embedding'].base_url == 'https://dashscope.aliyuncs.com'
        assert autoconfig.chat_model.api.base_url == 'https://chat.test'

    def test_configure_is_idempotent(self):
        autoconfig = configure(props())
        chat_model = autoconfig.chat_model
        assert autoconfig.configure().chat_model is chat_model

    def test_models_share_retry_policy_from_properties(self):
        autoconfig = configure(props(retry={'max-attempts': 7}))
        assert autoconfig.chat_model.retry_policy.max_attempts == 7
        assert autoconfig.embedding_model.retry_policy is autoconfig.chat_model.retry_policy

    def test_feature_options_passed_through(self):
        autoconfig = configure(
            props(
                chat={'options': {'model': 'qwen-max'}},
                embedding={'metadata-mode': 'NONE', 'options': {'model': 'text-embedding-v2'}},
                image={'options': {'n': 2}},
            )
        )
        assert autoconfig.chat_model.default_options.model == 'qwen-max'
        assert autoconfig.embedding_model.metadata_mode.value == 'NONE'
        assert autoconfig.embedding_model.default_options.model == 'text-embedding-v2'
        assert autoconfig.image_model.default_options.n == 2


class TestConditions:
    @pytest.mark.parametrize(
        'data,missing',
        [
            ({'chat': {'enabled': False}}, [CHAT_MODEL, AGENT_API]),
            ({'embedding': {'enabled': False}}, [EMBEDDING_MODEL]),
            ({'image': {'enabled': False}}, [IMAGE_MODEL]),
            ({'audio': {'speech': {'enabled': False}}}, [SPEECH_SYNTHESIZER]),
            ({'audio': {'transcription': {'enabled': False}}}, [TRANSCRIPTION]),
        ],
    )
    def test_disabled_features_are_not_built(self, data, missing):
        autoconfig = configure(props(**data))
        for name in missing:
            assert not autoconfig.is_available(name)
            with pytest.raises(LookupError, match=name):
                autoconfig.get(name)

    def test_disabled_feature_needs_no_connection(self):
        data = {
            'api-key': '',
            'chat': {'api-key': 'chat-only'},
            'embedding': {'enabled': False},
            'image': {'enabled': False},
            'audio': {'speech': {'enabled': False}, 'transcription': {'enabled': False}},
        }
        autoconfig = configure(DashScopeProperties(**data))
        assert autoconfig.available() == [RETRY_POLICY, TOOL_REGISTRY, CHAT_MODEL, AGENT_API]

    def test_overrides_are_used_instead_of_building(self):
        custom_chat = object()
        autoconfig = configure(props(), overrides={CHAT_MODEL: custom_chat})
        assert autoconfig.chat_model is custom_chat
        assert isinstance(autoconfig.agent_api, DashScopeAgentApi)

    def test_override_applies_even_when_disabled(self):
        custom = object()
        autoconfig = configure(props(image={'enabled': False}), overrides={IMAGE_MODEL: custom})
        assert autoconfig.image_model is custom

    def test_speech_synthesizer_is_new_per_lookup(self):
        autoconfig = configure(props())
        first = autoconfig.speech_synthesizer()
        second = autoconfig.speech_synthesizer()
        assert first is not second
        assert first.connection == second.connection

    def test_transcription_is_shared(self):
        autoconfig = configure(props())
        assert autoconfig.transcription is autoconfig.get(TRANSCRIPTION)


class TestFailFast:
    def test_missing_api_key_fails_for_enabled_feature(self):
        with pytest.raises(ConfigurationError) as exc_info:
            configure(DashScopeProperties())
        assert exc_info.value.feature_name == 'chat'
        assert exc_info.value.field == 'api-key'

    def test_missing_base_url_names_feature_property(self):
        data = {'base-url': '', 'api-key': 'k', 'chat': {'base-url': 'https://chat.test'}}
        with pytest.raises(ConfigurationError, match=r'dashscope\.embedding\.base-url'):
            configure(DashScopeProperties(**data))

    def test_no_clients_created_when_a_later_feature_fails(self, monkeypatch):
        created = []

        def spy(connection, read_timeout, transport=None):
            client = build_http_client(connection, read_timeout, transport=transport)
            created.append(client)
            return client

        monkeypatch.setattr('dashscope_boot.di.autoconfig.build_http_client', spy)
        data = {'base-url': '', 'api-key': 'k', 'chat': {'base-url': 'https://chat.test'}}
        autoconfig = DashScopeAutoConfiguration(DashScopeProperties(**data), environ={})

        with pytest.raises(ConfigurationError):
            autoconfig.configure()
        assert created == []
        assert autoconfig.beans == {}

    def test_overridden_feature_connection_is_not_resolved(self):
        data = {'base-url': '', 'api-key': 'k', 'chat': {'base-url': 'https://chat.test'}, 'image': {'base-url': 'https://image.test'}}
        data['audio'] = {'speech': {'enabled': False}, 'transcription': {'enabled': False}}
        autoconfig = configure(DashScopeProperties(**data), overrides={EMBEDDING_MODEL: object()})

        assert set(autoconfig.connections) == {'chat', 'image'}

    def test_audio_feature_paths_in_message(self):
        data = {'base-url': '', 'api-key': 'k', 'chat': {'enabled': False}, 'embedding': {'enabled': False}, 'image': {'enabled': False}}
        with pytest.raises(ConfigurationError, match=r'dashscope\.audio\.transcription\.base-url'):
            configure(DashScopeProperties(**data))


class TestEnvironmentTier:
    def test_env_key_used_when_no_property_key(self):
        autoconfig = configure(DashScopeProperties(), environ={DASHSCOPE_API_KEY_ENV: 'sk-env'})
        assert autoconfig.connections['chat'].api_key == 'sk-env'

    def test_property_key_beats_env_key(self):
        autoconfig = configure(props(), environ={DASHSCOPE_API_KEY_ENV: 'sk-env'})
        assert autoconfig.connections['chat'].api_key == 'sk-shared'


class TestTools:
    def test_registered_tools_added_to_chat_options(self):
        registry = ToolRegistry([ToolCallback(name='search', func=lambda q: q)])
        autoconfig = configure(props(), overrides={TOOL_REGISTRY: registry})

        assert autoconfig.tool_registry is registry
        assert [tool.name for tool in autoconfig.chat_model.default_options.tools] == ['search']

    def test_properties_options_not_mutated(self):
        properties = props()
        registry = ToolRegistry([ToolCallback(name='search', func=lambda q: q)])
        configure(properties, overrides={TOOL_REGISTRY: registry})
        assert properties.chat.options.tools == []


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_close_closes_created_clients(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={'output': {'text': 'hi'}})

        autoconfig = configure(props(), transport=httpx.MockTransport(handler))
        assert await autoconfig.chat_model.generate('hello') == 'hi'
        assert calls[0].headers['Authorization'] == 'Bearer sk-shared'

        await autoconfig.close()
        with pytest.raises(RuntimeError):
            await autoconfig.chat_model.generate('hello')
