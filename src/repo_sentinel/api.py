"""FastAPI router for the agent."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from .agent import run_repo_sentinel
from .config import AgentSettings
from .errors import (
    AgentError,
    AuthenticationError,
    ConfigError,
    TransportError,
)

router = APIRouter(prefix="/agent", tags=["agent"])


class RunRequest(BaseModel):
    """Request body for POST /agent/run."""

    message: str | None = Field(
        None, description="Optional user message; defaults to the repository analysis prompt"
    )
    system_prompt: str | None = Field(None, description="Optional system prompt override")
    model: str | None = Field(None, description="Chat model identifier override")
    provider: str | None = Field(
        None, description="Repository provider override: git, github, ado or gerrit"
    )


class RunResponse(BaseModel):
    """Response for POST /agent/run."""

    reply: str
    rounds: int = 0
    message_count: int = 0
    tool_calls: int = 0
    failed_tool_calls: int = 0


def get_settings(request: RunRequest) -> AgentSettings:
    try:
        return AgentSettings.from_env(model=request.model, provider=request.provider)
    except (ValueError, ConfigError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("/run", response_model=RunResponse)
async def run(request: RunRequest) -> RunResponse:
    """Run the agent loop once and return the final reply."""
    settings = get_settings(request)
    try:
        result = await run_repo_sentinel(
            settings,
            user_prompt=request.message,
            system_prompt=request.system_prompt,
        )
    except (ConfigError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except AgentError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return RunResponse(
        reply=result.content,
        rounds=result.rounds,
        message_count=len(result.messages),
        tool_calls=len(result.tool_outcomes),
        failed_tool_calls=result.failed_tool_calls,
    )
