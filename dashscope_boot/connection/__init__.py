"""Effective connection settings for a DashScope feature."""

from dashscope_boot.connection.environment import DASHSCOPE_API_KEY_ENV, with_env_api_key
from dashscope_boot.connection.exceptions import ConfigurationError
from dashscope_boot.connection.resolver import WORKSPACE_HEADER, ConnectionResolver, ResolvedConnection, resolve_connection

__all__ = [
    'DASHSCOPE_API_KEY_ENV',
    'WORKSPACE_HEADER',
    'ConfigurationError',
    'ConnectionResolver',
    'ResolvedConnection',
    'resolve_connection',
    'with_env_api_key',
]
