import os
import tempfile
from unittest.mock import patch

import pytest
import yaml

from dashscope_boot.config import ConfigurationService
from dashscope_boot.config.models import AppConfig
from dashscope_boot.config.properties import DEFAULT_BASE_URL


def _write_temp(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(content)
        return f.name


@pytest.mark.parametrize(
    'scenario,content,validation,should_raise,error_match',
    [
        (
            'defaults for non-existent file',
            None,
            lambda c: c.host == '127.0.0.1' and c.port == 8000 and c.dashscope.base_url == DEFAULT_BASE_URL and c.dashscope.api_key is None,
            False,
            None,
        ),
        (
            'values from yaml file',
            'host: 0.0.0.0\nport: 9000\ndashscope:\n  api-key: sk-1\n  read-timeout: 30\n  chat:\n    enabled: false\n',
            lambda c: c.host == '0.0.0.0' and c.port == 9000 and c.dashscope.api_key == 'sk-1' and c.dashscope.read_timeout == 30 and c.dashscope.chat.enabled is False,
            False,
            None,
        ),
        ('invalid yaml', '{ invalid yaml', None, True, 'Invalid YAML'),
        ('non-mapping document', '- just\n- a list\n', None, True, 'must contain a mapping'),
    ],
)
def test_config_loading(scenario, content, validation, should_raise, error_match):
    if content is None:
        config = AppConfig.load('non-existent-config.yaml')
        assert validation(config)
        return

    temp_path = _write_temp(content)
    try:
        if should_raise:
            with pytest.raises(ValueError, match=error_match):
                AppConfig.load(temp_path)
        else:
            assert validation(AppConfig.load(temp_path))
    finally:
        os.unlink(temp_path)


def test_port_validation():
    assert AppConfig(port=8080).port == 8080
    with pytest.raises(ValueError):
        AppConfig(port=0)
    with pytest.raises(ValueError):
        AppConfig(port=65536)


def test_api_key_from_env_tag():
    temp_path = _write_temp('dashscope:\n  api-key: !env TEST_DASHSCOPE_KEY\n  workspace-id: !env [TEST_DASHSCOPE_WS, null]\n')
    try:
        with patch.dict(os.environ, {'TEST_DASHSCOPE_KEY': 'sk-env'}, clear=True):
            config = AppConfig.load(temp_path)
        assert config.dashscope.api_key == 'sk-env'
        assert config.dashscope.workspace_id is None
    finally:
        os.unlink(temp_path)


def test_missing_required_env_tag_fails():
    temp_path = _write_temp('dashscope:\n  api-key: !env TEST_DASHSCOPE_MISSING\n')
    try:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="TEST_DASHSCOPE_MISSING"):
                AppConfig.load(temp_path)
    finally:
        os.unlink(temp_path)


def test_save_round_trips_kebab_case_keys(tmp_path):
    path = tmp_path / 'nested' / 'config.yaml'
    AppConfig(port=9001).save(str(path))

    raw = yaml.safe_load(path.read_text())
    assert 'base-url' in raw['dashscope']
    assert 'read-timeout' in raw['dashscope']
    assert AppConfig.load(str(path)).port == 9001


def test_configuration_service_reload(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('port: 8001\n')
    service = ConfigurationService(str(path))
    assert service.get_config().port == 8001

    path.write_text('port: 8002\n')
    assert service.reload_config().port == 8002
    assert service.get_config().port == 8002


def test_configuration_service_accepts_prebuilt_config():
    config = AppConfig(port=7000)
    assert ConfigurationService(config=config).get_config() is config
