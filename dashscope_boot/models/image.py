import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from dashscope_boot.clients.api import DashScopeImageApi
from dashscope_boot.clients.exceptions import TaskFailedException
from dashscope_boot.config.log import get_logger
from dashscope_boot.config.options import ImageOptions, merge_options
from dashscope_boot.models.retry import RetryPolicy

logger = get_logger(__name__)

FINISHED_STATUSES = {'SUCCEEDED', 'FAILED', 'CANCELED', 'UNKNOWN'}


class ImageModel:
    """Text-to-image over the asynchronous task API.

    `generate` submits a synthesis task and polls it until it finishes.
    """

    def __init__(
        self,
        api: DashScopeImageApi,
        options: Optional[ImageOptions] = None,
        retry_policy: Optional[RetryPolicy] = None,
        poll_interval: float = 2.0,
        max_polls: int = 60,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.api = api
        self.default_options = options or ImageOptions()
        self.retry_policy = retry_policy or RetryPolicy()
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self._sleep = sleep or asyncio.sleep

    def build_request(self, prompt: str, options: Optional[ImageOptions] = None) -> Dict[str, Any]:
        merged = merge_options(self.default_options, options)
        input_body = {'prompt': prompt}
        if merged.negative_prompt:
            input_body['negative_prompt'] = merged.negative_prompt
        return {
            'model': merged.model,
            'input': input_body,
            'parameters': merged.model_dump(include={'n', 'size', 'style', 'seed'}, exclude_none=True),
        }

    async def generate(self, prompt: str, options: Optional[ImageOptions] = None) -> List[str]:
        """Return the URLs of the generated images."""
        body = self.build_request(prompt, options)
        submitted = await self.retry_policy.execute(lambda: self.api.submit(body))
        task_id = submitted['output']['task_id']
        logger.info('Image synthesis task submitted', task_id=task_id)

        for _ in range(self.max_polls):
            result = await self.retry_policy.execute(lambda: self.api.task(task_id))
            output = result.get('output', {})
            status = output.get('task_status')
            if status == 'SUCCEEDED':
                return [item['url'] for item in output.get('results', []) if 'url' in item]
            if status in FINISHED_STATUSES:
                raise TaskFailedException(f"Image task {task_id} finished with status {status}: {output.get('message', '')}", request_id=result.get('request_id'))
            await self._sleep(self.poll_interval)

        raise TaskFailedException(f'Image task {task_id} did not finish after {self.max_polls} polls')
