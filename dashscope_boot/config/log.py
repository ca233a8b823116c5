import logging
import logging.handlers
import re
from pathlib import Path

import orjson
import structlog
from structlog.types import FilteringBoundLogger

_SIZE_MULTIPLIERS = {'B': 1, 'KB': 1024, 'MB': 1024**2, 'GB': 1024**3, 'TB': 1024**4}
_REDACTED_KEYS = frozenset({'api_key', 'authorization'})


def _orjson_dumps(*args, **kwargs) -> str:
    return orjson.dumps(*args, **kwargs).decode('utf-8')


def parse_size(value: str) -> int:
    """Parse a size such as '10MB' or '512 KB' into bytes, defaulting to 10MB."""
    size_match = re.match(r'^\s*(\d+)\s*([KMGT]?B?)\s*$', value.upper())
    if not size_match:
        return 10 * 1024**2

    size_num = int(size_match.group(1))
    size_unit = size_match.group(2) or 'MB'
    if size_unit in ('K', 'M', 'G', 'T'):
        size_unit += 'B'
    return size_num * _SIZE_MULTIPLIERS[size_unit]


def _create_log_handlers(log_config, log_dir: Path) -> list:
    """Create logging handlers based on configuration."""
    handlers = []

    if log_config.console_enabled:
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, structlog.processors.format_exc_info, structlog.dev.ConsoleRenderer()]
        )
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if log_config.file_enabled:
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(serializer=_orjson_dumps),
            ]
        )
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / 'app.log',
            maxBytes=parse_size(log_config.max_file_size),
            backupCount=log_config.backup_count,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def _redact_secrets(logger, method_name, event_dict):
    """Mask credentials that were passed as structured log fields."""
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = '***'
    return event_dict


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a configured structlog logger."""
    return structlog.get_logger(name)


def configure_structlog(log_config) -> None:
    """Configure structlog with console and optional rotating file output on top of stdlib logging."""
    log_dir = Path(log_config.log_file_dir)
    if log_config.file_enabled:
        if log_dir.exists() and not log_dir.is_dir():
            raise ValueError(f'Log directory {log_dir} is not a directory')
        log_dir.mkdir(exist_ok=True, parents=True)

    level = getattr(logging, log_config.level.upper())
    logging.basicConfig(
        level=level,
        handlers=_create_log_handlers(log_config, log_dir),
        format='%(message)s',  # structlog will handle formatting
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt='ISO', utc=True),
            _redact_secrets,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
