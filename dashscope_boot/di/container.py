"""Dependency injection container for dashscope-boot services."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from dashscope_boot.config import ConfigurationService
from dashscope_boot.config.log import get_logger
from dashscope_boot.connection import WORKSPACE_HEADER
from dashscope_boot.di.autoconfig import (
    AGENT_API,
    CHAT_MODEL,
    EMBEDDING_MODEL,
    IMAGE_MODEL,
    SPEECH_SYNTHESIZER,
    TOOL_REGISTRY,
    TRANSCRIPTION,
    DashScopeAutoConfiguration,
)

logger = get_logger(__name__)

FEATURE_BEANS = {
    'chat': (CHAT_MODEL, AGENT_API),
    'embedding': (EMBEDDING_MODEL,),
    'image': (IMAGE_MODEL,),
    'audio.speech': (SPEECH_SYNTHESIZER,),
    'audio.transcription': (TRANSCRIPTION,),
}


class ServiceContainer:
    """Loads configuration and holds the auto-configured DashScope services.

    Initialization fails fast: a `ConfigurationError` for any enabled feature
    propagates out of the constructor.
    """

    def __init__(
        self,
        config_service: Optional[ConfigurationService] = None,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config_service = config_service or ConfigurationService()
        self.app_config = self.config_service.get_config()

        self.autoconfig = DashScopeAutoConfiguration(
            self.app_config.dashscope,
            environ=environ,
            overrides=overrides,
            transport=transport,
        ).configure()

        logger.info('Service container initialized', features=self.enabled_features())

    def get(self, name: str) -> Any:
        return self.autoconfig.get(name)

    def enabled_features(self) -> list:
        return [feature for feature, beans in FEATURE_BEANS.items() if any(self.autoconfig.is_available(bean) for bean in beans)]

    def get_system_info(self) -> Dict[str, Any]:
        """Describe wired features and their endpoints; credentials are never included."""
        features = {}
        for feature, beans in FEATURE_BEANS.items():
            connection = self.autoconfig.connections.get(feature)
            features[feature] = {
                'enabled': any(self.autoconfig.is_available(bean) for bean in beans),
                'beans': [bean for bean in beans if self.autoconfig.is_available(bean)],
                'base_url': connection.base_url if connection else None,
                'workspace': connection is not None and WORKSPACE_HEADER in connection.headers,
            }

        tool_registry = self.autoconfig.get(TOOL_REGISTRY)
        return {
            'status': 'initialized',
            'features': features,
            'tools': tool_registry.names(),
            'read_timeout': self.app_config.dashscope.read_timeout,
        }

    async def close(self) -> None:
        """Clean up resources."""
        await self.autoconfig.close()


def build_service_container(config_service: Optional[ConfigurationService] = None) -> ServiceContainer:
    """Factory helper to build a service container."""

    return ServiceContainer(config_service=config_service)
