from dashscope_boot.tools.registry import ToolCallback, ToolRegistry

__all__ = ['ToolCallback', 'ToolRegistry']
