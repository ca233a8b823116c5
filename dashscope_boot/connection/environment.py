"""Environment variable tier for the shared API key.

Precedence, highest first: feature `api-key`, shared `api-key`, then the
`DASHSCOPE_API_KEY` environment variable. The variable only fills a shared key
that is missing; it never replaces a configured one.
"""

import os
from typing import Mapping, Optional

from dashscope_boot.config.log import get_logger
from dashscope_boot.config.properties import ConnectionConfig
from dashscope_boot.connection.resolver import has_text

DASHSCOPE_API_KEY_ENV = 'DASHSCOPE_API_KEY'

logger = get_logger(__name__)


def with_env_api_key(shared: ConnectionConfig, environ: Optional[Mapping[str, str]] = None) -> ConnectionConfig:
    """Return the shared connection with its api key filled from the environment when unset."""
    if has_text(shared.api_key):
        return shared

    env = os.environ if environ is None else environ
    env_key = env.get(DASHSCOPE_API_KEY_ENV)
    if not has_text(env_key):
        return shared

    logger.debug('Using shared API key from environment', variable=DASHSCOPE_API_KEY_ENV)
    return shared.model_copy(update={'api_key': env_key})
