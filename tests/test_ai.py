"""Tests for the LLM move resolver and its random fallback."""

import asyncio
import random
from types import SimpleNamespace

from tttagent.ai import (
    SYSTEM_PROMPT,
    Failed,
    MoveResolver,
    OpenAIOracle,
    Suggested,
    build_prompt,
    build_resolver,
    parse_move,
    render_board,
)
from tttagent.config import Settings
from tttagent.game import new_board

BOARD = ("X", None, None, None, "O", None, None, None, "X")


class ScriptedOracle:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    async def complete(self, system, prompt):
        self.prompts.append((system, prompt))
        return self.reply


class BrokenOracle:
    async def complete(self, system, prompt):
        raise ConnectionError("service unavailable")


class SlowOracle:
    async def complete(self, system, prompt):
        await asyncio.sleep(1)
        return "1"


def test_render_board_shows_indices_and_marks():
    assert render_board(new_board()) == (
        "| 0 | 1 | 2 |\n|---|---|---|\n| 3 | 4 | 5 |\n|---|---|---|\n| 6 | 7 | 8 |"
    )
    assert render_board(BOARD).splitlines()[2] == "| 3 | O | 5 |"


def test_prompt_embeds_board_and_answer_format():
    prompt = build_prompt(BOARD)
    assert render_board(BOARD) in prompt
    assert "as O" in prompt
    assert "single digit (0-8)" in prompt


def test_parse_move_accepts_first_standalone_digit():
    assert parse_move("5", BOARD) == Suggested(5)
    assert parse_move("I will take position 7.", BOARD) == Suggested(7)
    assert parse_move("Position 9, so 3", BOARD) == Suggested(3)


def test_parse_move_rejects_unusable_replies():
    assert isinstance(parse_move("", BOARD), Failed)
    assert isinstance(parse_move("123", BOARD), Failed)
    assert isinstance(parse_move("nine", BOARD), Failed)
    assert isinstance(parse_move("4", BOARD), Failed)


def test_choose_uses_oracle_answer():
    oracle = ScriptedOracle("2")
    resolver = MoveResolver(oracle=oracle)
    assert asyncio.run(resolver.choose(BOARD)) == 2
    system, prompt = oracle.prompts[0]
    assert system == SYSTEM_PROMPT
    assert prompt == build_prompt(BOARD)


def test_choose_always_returns_empty_cell():
    oracles = [
        None,
        ScriptedOracle(""),
        ScriptedOracle("12 34 56"),
        ScriptedOracle("0"),
        ScriptedOracle(None),
        BrokenOracle(),
    ]
    for oracle in oracles:
        resolver = MoveResolver(oracle=oracle, rng=random.Random(1))
        for _ in range(20):
            assert BOARD[asyncio.run(resolver.choose(BOARD))] is None


def test_timeout_takes_fallback_path():
    resolver = MoveResolver(oracle=SlowOracle(), timeout=0.01, rng=random.Random(0))
    outcome = asyncio.run(resolver.suggest(BOARD))
    assert isinstance(outcome, Failed)
    assert "timed out" in outcome.reason
    assert BOARD[asyncio.run(resolver.choose(BOARD))] is None


def test_fallback_covers_every_empty_cell():
    resolver = MoveResolver(rng=random.Random(42))
    seen = {resolver.fallback(BOARD) for _ in range(300)}
    assert seen == {1, 2, 3, 5, 6, 7}


def test_openai_oracle_sends_chat_completion():
    calls = []

    async def create(**kwargs):
        calls.append(kwargs)
        message = SimpleNamespace(content="6")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    oracle = OpenAIOracle(client=client, model="test-model", max_completion_tokens=10)

    reply = asyncio.run(oracle.complete("system text", "prompt text"))

    assert reply == "6"
    assert calls == [
        {
            "model": "test-model",
            "messages": [
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "prompt text"},
            ],
            "max_completion_tokens": 10,
        }
    ]


def test_build_resolver_without_key_has_no_oracle():
    resolver = build_resolver(Settings(openai_api_key=None, oracle_timeout=3.0))
    assert resolver.oracle is None
    assert resolver.timeout == 3.0


def test_build_resolver_with_key_uses_openai():
    resolver = build_resolver(Settings(openai_api_key="sk-test", model="gpt-test"))
    assert isinstance(resolver.oracle, OpenAIOracle)
    assert resolver.oracle.model == "gpt-test"
