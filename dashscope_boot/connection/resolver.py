"""Per-field override-with-fallback resolution of DashScope connection settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dashscope_boot.config.properties import ROOT_PREFIX, ConnectionConfig
from dashscope_boot.connection.exceptions import ConfigurationError

WORKSPACE_HEADER = 'DashScope-Workspace'


def has_text(value: Optional[str]) -> bool:
    """True when the value contains at least one non-whitespace character."""
    return value is not None and value.strip() != ''


@dataclass(frozen=True)
class ResolvedConnection:
    """Validated connection parameters ready to hand to an HTTP client.

    Hashing skips `headers`, which are derived from `workspace_id`.
    """

    base_url: str
    api_key: str
    workspace_id: Optional[str] = None
    headers: Dict[str, List[str]] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if not has_text(self.base_url):
            raise ValueError('ResolvedConnection requires a non-empty base_url')
        if not has_text(self.api_key):
            raise ValueError('ResolvedConnection requires a non-empty api_key')

    def __repr__(self) -> str:
        return f'ResolvedConnection(base_url={self.base_url!r}, api_key=***, workspace_id={self.workspace_id!r}, headers={self.headers!r})'


class ConnectionResolver:
    """Resolves a feature's connection from its own properties and the shared ones.

    Each field is taken from the feature properties when it has text and from
    the shared properties otherwise. The resolver reads nothing but its
    arguments and keeps no state, so one instance can be shared freely.
    """

    def __init__(self, prefix: str = ROOT_PREFIX):
        self.prefix = prefix

    def resolve(self, shared: ConnectionConfig, specific: ConnectionConfig, feature_name: str) -> ResolvedConnection:
        base_url = specific.base_url if has_text(specific.base_url) else shared.base_url
        api_key = specific.api_key if has_text(specific.api_key) else shared.api_key
        workspace_id = specific.workspace_id if has_text(specific.workspace_id) else shared.workspace_id

        headers: Dict[str, List[str]] = {}
        if has_text(workspace_id):
            headers[WORKSPACE_HEADER] = [workspace_id]

        if not has_text(base_url):
            raise self._missing('base-url', 'DashScope base URL', feature_name)
        if not has_text(api_key):
            raise self._missing('api-key', 'DashScope API key', feature_name)

        return ResolvedConnection(base_url=base_url, api_key=api_key, workspace_id=workspace_id, headers=headers)

    def _missing(self, property_name: str, label: str, feature_name: str) -> ConfigurationError:
        shared_property = f'{self.prefix}.{property_name}'
        feature_property = f'{self.prefix}.{feature_name}.{property_name}'
        return ConfigurationError(
            f'{label} must be set. Use the connection property: {shared_property} or {feature_property} property.',
            field=property_name,
            feature_name=feature_name,
            shared_property=shared_property,
            feature_property=feature_property,
        )


_default_resolver = ConnectionResolver()


def resolve_connection(shared: ConnectionConfig, specific: ConnectionConfig, feature_name: str) -> ResolvedConnection:
    """Resolve with the default `dashscope` property prefix."""
    return _default_resolver.resolve(shared, specific, feature_name)
