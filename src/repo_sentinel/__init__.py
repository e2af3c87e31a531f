"""RepoSentinel agent core: conversation session, tool registry and agent loop."""

from .agent import create_tool_registry, run_repo_sentinel
from .config import AgentSettings
from .credentials import CredentialStore, Credentials, Provider, bootstrap_credentials
from .errors import (
    AgentError,
    ArgumentParseError,
    AuthenticationError,
    ConfigError,
    DuplicateToolError,
    ToolExecutionError,
    TransportError,
    UnknownToolError,
)
from .hooks import AgentHooks, LoggingHooks
from .loop import AgentLoop, AgentOptions, AgentState, run_agent
from .models import AgentResult, Message, ToolCallRequest, ToolDef, ToolOutcome, ToolResult
from .registry import ToolRegistry
from .session import ConversationSession, merge_choices
from .tools import BaseTool, FunctionTool

__version__ = "0.1.0"

__all__ = [
    "run_agent",
    "run_repo_sentinel",
    "create_tool_registry",
    "AgentLoop",
    "AgentOptions",
    "AgentState",
    "AgentResult",
    "AgentSettings",
    "AgentHooks",
    "LoggingHooks",
    "ConversationSession",
    "merge_choices",
    "ToolRegistry",
    "BaseTool",
    "FunctionTool",
    "Message",
    "ToolDef",
    "ToolCallRequest",
    "ToolResult",
    "ToolOutcome",
    "CredentialStore",
    "Credentials",
    "Provider",
    "bootstrap_credentials",
    "AgentError",
    "ConfigError",
    "TransportError",
    "AuthenticationError",
    "ArgumentParseError",
    "UnknownToolError",
    "ToolExecutionError",
    "DuplicateToolError",
]
