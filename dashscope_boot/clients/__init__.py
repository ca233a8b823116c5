from dashscope_boot.clients.api import (
    DashScopeAgentApi,
    DashScopeApi,
    DashScopeImageApi,
    SpeechSynthesizer,
    Transcription,
)
from dashscope_boot.clients.http import build_http_client

__all__ = [
    'DashScopeAgentApi',
    'DashScopeApi',
    'DashScopeImageApi',
    'SpeechSynthesizer',
    'Transcription',
    'build_http_client',
]
