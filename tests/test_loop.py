"""Unit tests for the agent loop with a mocked model endpoint."""
from __future__ import annotations

import asyncio
import json
import unittest
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import httpx
import openai

from repo_sentinel.errors import ConfigError, TransportError
from repo_sentinel.hooks import AgentHooks
from repo_sentinel.loop import (
    AgentLoop,
    AgentOptions,
    AgentState,
    collect_tool_calls,
    execute_tool_calls,
    run_agent,
)
from repo_sentinel.models import ToolCallRequest, ToolDef
from repo_sentinel.registry import ToolRegistry
from repo_sentinel.session import ConversationSession

from support import choice, completion, fake_client, sent_messages, text_completion, tool_call


def make_registry(**handlers: Any) -> ToolRegistry:
    registry = ToolRegistry()
    for name, handler in handlers.items():
        registry.register(ToolDef(name=name, description=name), handler)
    return registry


def tool_messages(client: MagicMock, call_index: int = -1) -> dict[str, str]:
    return {
        m["tool_call_id"]: m["content"]
        for m in sent_messages(client, call_index)
        if m["role"] == "tool"
    }


class TestCollectToolCalls(unittest.TestCase):
    def test_collects_across_choices(self) -> None:
        resp = completion(
            choice(tool_calls=[tool_call("1", "a")]),
            choice(tool_calls=[tool_call("2", "b", {"x": 1})]),
        )
        requests = collect_tool_calls(resp)
        self.assertEqual(
            requests,
            [ToolCallRequest("1", "a", "{}"), ToolCallRequest("2", "b", '{"x": 1}')],
        )

    def test_non_function_calls_ignored(self) -> None:
        fn_call = SimpleNamespace(
            id="1", type="function", function=SimpleNamespace(name="a", arguments="{}")
        )
        custom_call = SimpleNamespace(id="2", type="custom", custom=SimpleNamespace(name="c"))
        resp = SimpleNamespace(
            choices=[
                SimpleNamespace(message=SimpleNamespace(tool_calls=[custom_call, fn_call]))
            ]
        )
        self.assertEqual([r.id for r in collect_tool_calls(resp)], ["1"])


class TestExecuteToolCalls(unittest.IsolatedAsyncioTestCase):
    async def test_runs_concurrently_and_waits_for_all(self) -> None:
        started = asyncio.Event()
        order: list[str] = []

        async def slow(args: dict[str, Any]) -> str:
            await started.wait()
            order.append("slow")
            return "slow"

        async def fast(args: dict[str, Any]) -> str:
            started.set()
            order.append("fast")
            return "fast"

        async def broken(args: dict[str, Any]) -> str:
            raise ValueError("bad input")

        registry = make_registry(slow=slow, fast=fast, broken=broken)
        outcomes = await execute_tool_calls(
            registry,
            [
                ToolCallRequest("1", "slow", "{}"),
                ToolCallRequest("2", "fast", "{}"),
                ToolCallRequest("3", "broken", "{}"),
            ],
        )
        self.assertEqual(order, ["fast", "slow"])
        self.assertEqual([o.request.id for o in outcomes], ["1", "2", "3"])
        self.assertEqual([o.ok for o in outcomes], [True, True, False])
        self.assertEqual(json.loads(outcomes[2].to_result().content), {"error": "bad input"})

    async def test_hooks_fire_and_cannot_break_execution(self) -> None:
        events: list[tuple] = []

        def explode(*args: str) -> None:
            raise RuntimeError("hook failure")

        async def ok(args: dict[str, Any]) -> str:
            return "fine"

        hooks = AgentHooks(
            on_tool_start=lambda *a: events.append(("start",) + a),
            on_tool_end=explode,
            on_tool_error=lambda *a: events.append(("error",) + a),
        )
        registry = make_registry(ok=ok)
        outcomes = await execute_tool_calls(
            registry,
            [ToolCallRequest("1", "ok", "{}"), ToolCallRequest("2", "missing", "{}")],
            hooks,
        )
        self.assertEqual(outcomes[0].output, "fine")
        self.assertIn(("start", "ok", "1", "{}"), events)
        self.assertIn(("error", "missing", "2", "Unknown tool: missing"), events)

    async def test_unexpected_registry_failure_becomes_error_outcome(self) -> None:
        class BrokenRegistry(ToolRegistry):
            async def execute(self, name: str, raw_arguments: str | None) -> str:
                raise KeyError(name)

        errors: list[str] = []
        hooks = AgentHooks(on_tool_error=lambda name, call_id, message: errors.append(message))
        outcomes = await execute_tool_calls(
            BrokenRegistry(), [ToolCallRequest("1", "lookup", "{}")], hooks
        )
        self.assertFalse(outcomes[0].ok)
        self.assertEqual(outcomes[0].error, "'lookup'")
        self.assertEqual(errors, ["'lookup'"])


class TestRunAgent(unittest.IsolatedAsyncioTestCase):
    async def test_final_answer_without_tools(self) -> None:
        called = False

        async def get_x(args: dict[str, Any]) -> str:
            nonlocal called
            called = True
            return "42"

        client = fake_client(text_completion("Hello"))
        options = AgentOptions(registry=make_registry(get_x=get_x), model="m", system_prompt="sys")

        result = await run_agent(options, "Hi", client=client)

        self.assertEqual(result.content, "Hello")
        self.assertEqual(result.rounds, 1)
        self.assertFalse(called)
        self.assertEqual(client.chat.completions.create.await_count, 1)
        client.close.assert_not_awaited()

    async def test_tool_result_submitted(self) -> None:
        async def get_x(args: dict[str, Any]) -> str:
            return "42"

        client = fake_client(
            completion(choice(tool_calls=[tool_call("1", "get_x", "{}")])),
            text_completion("x is 42"),
        )
        options = AgentOptions(registry=make_registry(get_x=get_x), model="m")

        result = await run_agent(options, "What is x?", client=client)

        self.assertEqual(tool_messages(client), {"1": "42"})
        self.assertEqual(result.content, "x is 42")
        self.assertEqual(result.rounds, 2)
        self.assertEqual(len(result.tool_outcomes), 1)
        self.assertEqual(result.failed_tool_calls, 0)

    async def test_handler_error_reported_and_run_continues(self) -> None:
        async def get_x(args: dict[str, Any]) -> str:
            raise Exception("boom")

        client = fake_client(
            completion(choice(tool_calls=[tool_call("1", "get_x")])),
            text_completion("could not get x"),
        )
        options = AgentOptions(registry=make_registry(get_x=get_x), model="m")

        result = await run_agent(options, "go", client=client)

        self.assertEqual(json.loads(tool_messages(client)["1"]), {"error": "boom"})
        self.assertEqual(result.content, "could not get x")
        self.assertEqual(result.failed_tool_calls, 1)

    async def test_unknown_tool_reported(self) -> None:
        client = fake_client(
            completion(choice(tool_calls=[tool_call("9", "nope")])),
            text_completion("sorry"),
        )
        options = AgentOptions(registry=make_registry(), model="m")

        await run_agent(options, "go", client=client)

        payload = json.loads(tool_messages(client)["9"])
        self.assertIn("Unknown tool: nope", payload["error"])

    async def test_malformed_arguments_reported(self) -> None:
        async def get_x(args: dict[str, Any]) -> str:
            return "42"

        client = fake_client(
            completion(choice(tool_calls=[tool_call("1", "get_x", "{not json")])),
            text_completion("retrying later"),
        )
        options = AgentOptions(registry=make_registry(get_x=get_x), model="m")

        await run_agent(options, "go", client=client)

        self.assertIn("error", json.loads(tool_messages(client)["1"]))

    async def test_unparseable_arguments_answered_and_run_continues(self) -> None:
        async def get_x(args: dict[str, Any]) -> str:
            return "42"

        client = fake_client(
            completion(
                choice(
                    tool_calls=[
                        tool_call("1", "get_x", "[" * 100000),
                        tool_call("2", "get_x", '{"a": ' + "1" * 5000 + "}"),
                        tool_call("3", "get_x"),
                    ]
                )
            ),
            text_completion("partial report"),
        )
        options = AgentOptions(registry=make_registry(get_x=get_x), model="m")

        result = await run_agent(options, "go", client=client)

        answered = tool_messages(client)
        self.assertEqual(set(answered), {"1", "2", "3"})
        self.assertIn("error", json.loads(answered["1"]))
        self.assertEqual(answered["3"], "42")
        self.assertEqual(result.content, "partial report")

    async def test_every_tool_call_answered_across_choices(self) -> None:
        async def echo(args: dict[str, Any]) -> str:
            return args.get("v", "")

        calls = [tool_call(str(i), "echo", {"v": f"r{i}"}) for i in range(4)]
        client = fake_client(
            completion(
                choice(content="Working on it", tool_calls=calls[:3]),
                choice(tool_calls=calls[3:]),
            ),
            text_completion("done"),
        )
        options = AgentOptions(registry=make_registry(echo=echo), model="m")

        result = await run_agent(options, "go", client=client)

        answered = tool_messages(client)
        self.assertEqual(set(answered), {"0", "1", "2", "3"})
        self.assertEqual(answered["2"], "r2")
        self.assertEqual(result.content, "Working on it\ndone")

    async def test_multiple_rounds_then_done(self) -> None:
        async def step(args: dict[str, Any]) -> str:
            return "stepped"

        client = fake_client(
            completion(choice(tool_calls=[tool_call("a", "step")])),
            completion(choice(tool_calls=[tool_call("b", "step")])),
            text_completion("finished"),
        )
        registry = make_registry(step=step)
        session = ConversationSession(
            client, "m", system_prompt="sys", tools=registry.get_tool_definitions()
        )
        loop = AgentLoop(session, registry)

        result = await loop.run("go")

        self.assertIs(loop.state, AgentState.DONE)
        self.assertEqual(result.rounds, 3)
        self.assertEqual(tool_messages(client, 1), {"a": "stepped"})
        self.assertEqual(tool_messages(client, 2), {"a": "stepped", "b": "stepped"})
        roles = [m.role for m in result.messages]
        self.assertEqual(
            roles,
            ["system", "user", "assistant", "tool", "assistant", "tool", "assistant"],
        )

    async def test_content_hook_sees_every_round(self) -> None:
        async def step(args: dict[str, Any]) -> str:
            return "ok"

        seen: list[str] = []
        client = fake_client(
            completion(choice(content="first", tool_calls=[tool_call("a", "step")])),
            text_completion("second"),
        )
        options = AgentOptions(
            registry=make_registry(step=step),
            model="m",
            hooks=AgentHooks(on_content=seen.append),
        )
        await run_agent(options, "go", client=client)
        self.assertEqual(seen, ["first", "second"])

    async def test_transport_error_ends_run(self) -> None:
        async def get_x(args: dict[str, Any]) -> str:
            return "42"

        request = httpx.Request("POST", "https://example.invalid/v1/chat/completions")
        client = fake_client(
            completion(choice(tool_calls=[tool_call("1", "get_x")])),
            openai.APIConnectionError(request=request),
        )
        options = AgentOptions(registry=make_registry(get_x=get_x), model="m")

        with self.assertRaises(TransportError):
            await run_agent(options, "go", client=client)
        self.assertEqual(client.chat.completions.create.await_count, 2)

    async def test_api_key_required_without_client(self) -> None:
        with self.assertRaises(ConfigError):
            await run_agent(AgentOptions(registry=make_registry()), "go")


if __name__ == "__main__":
    unittest.main()
