import logging
from contextlib import asynccontextmanager
from pprint import pprint
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashscope_boot import __version__
from dashscope_boot.config import ConfigurationService, setup_config
from dashscope_boot.config.log import configure_structlog, get_logger
from dashscope_boot.config.models import AppConfig
from dashscope_boot.di.container import ServiceContainer
from dashscope_boot.routers.status import router as status_router

_SECRET_FIELDS = {
    'dashscope': {
        'api_key': True,
        'chat': {'api_key'},
        'embedding': {'api_key'},
        'image': {'api_key'},
        'audio': {'speech': {'api_key'}, 'transcription': {'api_key'}},
    }
}


def create_app(config: Optional[AppConfig] = None, service_container: Optional[ServiceContainer] = None) -> FastAPI:
    """Application factory for creating FastAPI instances.

    Args:
        config: Optional configuration. If None, loads it from config.yaml.
        service_container: Optional pre-built container, mainly for tests.

    Returns:
        Configured FastAPI application instance.

    Raises:
        ConfigurationError: If an enabled feature has no base URL or API key.
    """
    if config is None:
        setup_config()
        config_service = ConfigurationService()
        config = config_service.get_config()
    else:
        config_service = ConfigurationService(config=config)

    configure_structlog(config.logging)
    logger = get_logger(__name__)

    # Build eagerly so missing connection properties stop startup
    if service_container is None:
        service_container = ServiceContainer(config_service)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info('Shutting down, closing DashScope clients')
        await app.state.service_container.close()

    app = FastAPI(title='dashscope-boot', version=__version__, lifespan=lifespan)

    app.state.config = config
    app.state.config_service = config_service
    app.state.service_container = service_container

    for name in ('httpx', 'httpcore', 'uvicorn'):
        logging.getLogger(name).setLevel('INFO')

    app.include_router(status_router, prefix='/api')

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_credentials=True,
        allow_methods=['GET', 'OPTIONS'],
        allow_headers=['*'],
    )

    if config.dev:
        pprint(config.model_dump(exclude=_SECRET_FIELDS))

    return app


def run() -> None:
    """Console entry point: build the app and serve it with uvicorn."""
    import uvicorn

    app = create_app()
    config = app.state.config
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == '__main__':
    run()
