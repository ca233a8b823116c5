"""Registry of function callbacks exposed to the chat model as tools."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from dashscope_boot.config.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ToolCallback:
    """A named callable plus the JSON schema describing its arguments."""

    name: str
    func: Callable[..., Any]
    description: str = ''
    parameters: Dict[str, Any] = field(default_factory=lambda: {'type': 'object', 'properties': {}})

    def to_tool_definition(self) -> Dict[str, Any]:
        """Render the callback in the `tools` format accepted by the generation API."""
        return {
            'type': 'function',
            'function': {
                'name': self.name,
                'description': self.description,
                'parameters': self.parameters,
            },
        }


class ToolRegistry:
    """Keeps tool callbacks by name in registration order."""

    def __init__(self, callbacks: Optional[List[ToolCallback]] = None):
        self._callbacks: Dict[str, ToolCallback] = {}
        for callback in callbacks or []:
            self.add(callback)

    def add(self, callback: ToolCallback) -> ToolCallback:
        if callback.name in self._callbacks:
            raise ValueError(f"Tool '{callback.name}' is already registered")
        self._callbacks[callback.name] = callback
        logger.debug('Registered tool callback', tool=callback.name)
        return callback

    def register(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a function as a tool.

        The tool name defaults to the function name and the description to its
        docstring.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            callback = ToolCallback(
                name=name or func.__name__,
                func=func,
                description=description if description is not None else (inspect.getdoc(func) or ''),
                parameters=parameters or {'type': 'object', 'properties': {}},
            )
            self.add(callback)
            return func

        return decorator

    def get(self, name: str) -> Optional[ToolCallback]:
        return self._callbacks.get(name)

    def callbacks(self) -> List[ToolCallback]:
        return list(self._callbacks.values())

    def names(self) -> List[str]:
        return list(self._callbacks)

    async def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a registered tool with keyword arguments, awaiting coroutine functions."""
        callback = self._callbacks.get(name)
        if callback is None:
            raise KeyError(f"Unknown tool '{name}'")

        result = callback.func(**(arguments or {}))
        if inspect.isawaitable(result):
            result = await result
        return result

    def __len__(self) -> int:
        return len(self._callbacks)

    def __contains__(self, name: object) -> bool:
        return name in self._callbacks
