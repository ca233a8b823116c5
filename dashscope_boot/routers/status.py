"""Liveness and wiring status endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from dashscope_boot.config.log import get_logger
from dashscope_boot.di import get_service_container_dependency
from dashscope_boot.di.container import ServiceContainer

router = APIRouter(tags=['status'])
log = get_logger(__name__)


@router.get('/health')
async def health() -> Dict[str, str]:
    return {'status': 'ok'}


@router.get('/features')
async def get_features(service_container: ServiceContainer = Depends(get_service_container_dependency)) -> Dict[str, Any]:
    """Report which features are configured, their endpoints, and registered tools."""
    info = service_container.get_system_info()
    log.debug('Feature status requested', features=[name for name, feature in info['features'].items() if feature['enabled']])
    return info
