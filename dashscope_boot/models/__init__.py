from dashscope_boot.models.chat import ChatModel
from dashscope_boot.models.embedding import EmbeddingModel
from dashscope_boot.models.image import ImageModel
from dashscope_boot.models.retry import RetryPolicy

__all__ = [
    'ChatModel',
    'EmbeddingModel',
    'ImageModel',
    'RetryPolicy',
]
