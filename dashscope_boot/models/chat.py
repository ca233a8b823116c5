from typing import Any, Dict, List, Optional, Union

from dashscope_boot.clients.api import DashScopeApi
from dashscope_boot.config.options import ChatOptions, merge_options
from dashscope_boot.models.retry import RetryPolicy

Message = Dict[str, Any]


class ChatModel:
    """Text generation over `DashScopeApi` with default options and retries."""

    def __init__(self, api: DashScopeApi, options: Optional[ChatOptions] = None, retry_policy: Optional[RetryPolicy] = None):
        self.api = api
        self.default_options = options or ChatOptions()
        self.retry_policy = retry_policy or RetryPolicy()

    def build_request(self, prompt: Union[str, List[Message]], options: Optional[ChatOptions] = None) -> Dict[str, Any]:
        merged = merge_options(self.default_options, options)
        messages = [{'role': 'user', 'content': prompt}] if isinstance(prompt, str) else list(prompt)
        return {
            'model': merged.model,
            'input': {'messages': messages},
            'parameters': merged.to_parameters(),
        }

    async def call(self, prompt: Union[str, List[Message]], options: Optional[ChatOptions] = None) -> Dict[str, Any]:
        """Send a prompt (a string or a list of role/content messages) and return the raw response."""
        body = self.build_request(prompt, options)
        return await self.retry_policy.execute(lambda: self.api.chat_completion(body))

    async def generate(self, prompt: Union[str, List[Message]], options: Optional[ChatOptions] = None) -> str:
        """Return just the content of the first choice."""
        response = await self.call(prompt, options)
        choices = response.get('output', {}).get('choices') or []
        if not choices:
            return response.get('output', {}).get('text', '')
        return choices[0].get('message', {}).get('content', '')
