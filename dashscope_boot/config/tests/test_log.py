import logging

import pytest

from dashscope_boot.config.log import _redact_secrets, configure_structlog, get_logger, parse_size
from dashscope_boot.config.models import LoggingConfig


@pytest.mark.parametrize(
    'value,expected',
    [
        ('10MB', 10 * 1024**2),
        ('512 KB', 512 * 1024),
        ('1g', 1024**3),
        ('2048', 2048 * 1024**2),
        ('100B', 100),
        ('not a size', 10 * 1024**2),
    ],
)
def test_parse_size(value, expected):
    assert parse_size(value) == expected


def test_redacts_credential_fields():
    event = _redact_secrets(None, 'info', {'event': 'x', 'api_key': 'sk-secret', 'path': '/a'})
    assert event == {'event': 'x', 'api_key': '***', 'path': '/a'}


def test_file_logging_writes_to_log_dir(tmp_path):
    config = LoggingConfig(level='DEBUG', console_enabled=False, file_enabled=True, log_file_dir=str(tmp_path / 'logs'))
    configure_structlog(config)

    get_logger('dashscope_boot.test').info('hello', feature='chat')
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = (tmp_path / 'logs' / 'app.log').read_text()
    assert 'hello' in content
    assert '"feature":"chat"' in content


def test_log_dir_must_be_a_directory(tmp_path):
    not_a_dir = tmp_path / 'file'
    not_a_dir.write_text('x')
    with pytest.raises(ValueError, match='not a directory'):
        configure_structlog(LoggingConfig(file_enabled=True, log_file_dir=str(not_a_dir)))
