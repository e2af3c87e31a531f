"""Tool protocol and provider toolsets."""

from .base import BaseTool, FunctionTool, ToolHandler
from .providers import GetConfigTool, GetTokenTool, SaveReportTool, build_provider_tools

__all__ = [
    "BaseTool",
    "FunctionTool",
    "ToolHandler",
    "GetConfigTool",
    "GetTokenTool",
    "SaveReportTool",
    "build_provider_tools",
]
