"""YAML loading with `!env` tags for property files.

`!env DASHSCOPE_API_KEY` requires the variable to be set, while
`!env [DASHSCOPE_WORKSPACE_ID, null]` falls back to the given default.
"""

from __future__ import annotations

import os
from typing import Any

import yaml


class EnvSafeLoader(yaml.SafeLoader):
    """SafeLoader that understands the `!env` tag without touching the global loader."""


def _env_name(loader: EnvSafeLoader, node: yaml.Node, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise yaml.constructor.ConstructorError(
            None,
            None,
            f'!env variable name must be a non-empty string, got {value!r}',
            node.start_mark,
        )
    return value


def _construct_env(loader: EnvSafeLoader, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        name = _env_name(loader, node, loader.construct_scalar(node))
        value = os.getenv(name)
        if value is None:
            raise ValueError(f"Required environment variable '{name}' is not set")
        return value

    if isinstance(node, yaml.SequenceNode):
        items = loader.construct_sequence(node)
        if len(items) != 2:
            raise yaml.constructor.ConstructorError(
                None,
                None,
                f'!env sequence must be [name, default], got {len(items)} items',
                node.start_mark,
            )
        name = _env_name(loader, node, items[0])
        return os.getenv(name, items[1])

    raise yaml.constructor.ConstructorError(
        None,
        None,
        f'!env expects a variable name or [name, default], got {type(node).__name__}',
        node.start_mark,
    )


EnvSafeLoader.add_constructor('!env', _construct_env)


def load_yaml(stream) -> Any:
    """Parse a YAML document, resolving `!env` tags from the process environment."""

    return yaml.load(stream, Loader=EnvSafeLoader)


__all__ = ['EnvSafeLoader', 'load_yaml']
