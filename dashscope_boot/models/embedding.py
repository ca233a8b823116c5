from typing import Any, Dict, List, Optional

from dashscope_boot.clients.api import DashScopeApi
from dashscope_boot.config.options import EmbeddingOptions, MetadataMode, merge_options
from dashscope_boot.models.retry import RetryPolicy


def format_document(content: str, metadata: Optional[Dict[str, Any]], mode: MetadataMode) -> str:
    """Prefix document content with its metadata unless the mode excludes it."""
    if mode == MetadataMode.NONE or not metadata:
        return content
    header = '\n'.join(f'{key}: {value}' for key, value in metadata.items())
    return f'{header}\n\n{content}'


class EmbeddingModel:
    """Text embeddings over `DashScopeApi`."""

    def __init__(
        self,
        api: DashScopeApi,
        metadata_mode: MetadataMode = MetadataMode.EMBED,
        options: Optional[EmbeddingOptions] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.api = api
        self.metadata_mode = metadata_mode
        self.default_options = options or EmbeddingOptions()
        self.retry_policy = retry_policy or RetryPolicy()

    async def embed(self, texts: List[str], options: Optional[EmbeddingOptions] = None) -> List[List[float]]:
        """Embed texts, returning vectors in input order."""
        if not texts:
            return []

        merged = merge_options(self.default_options, options)
        body = {
            'model': merged.model,
            'input': {'texts': texts},
            'parameters': {'text_type': merged.text_type},
        }
        response = await self.retry_policy.execute(lambda: self.api.embeddings(body))
        embeddings = sorted(response.get('output', {}).get('embeddings', []), key=lambda item: item.get('text_index', 0))
        return [item['embedding'] for item in embeddings]

    async def embed_documents(self, documents: List[Dict[str, Any]], options: Optional[EmbeddingOptions] = None) -> List[List[float]]:
        """Embed `{'content': ..., 'metadata': {...}}` documents according to the metadata mode."""
        texts = [format_document(doc.get('content', ''), doc.get('metadata'), self.metadata_mode) for doc in documents]
        return await self.embed(texts, options)
