"""Common dependency injection functions for FastAPI."""

from fastapi import Request

from dashscope_boot.di.container import ServiceContainer, build_service_container


def get_service_container_dependency(request: Request) -> ServiceContainer:
    """Get the service container, building it on first use if the app has none yet."""
    container = getattr(request.app.state, 'service_container', None)
    if container is None:
        container = build_service_container(request.app.state.config_service)
        request.app.state.service_container = container
    return container
