"""Pytest fixtures for CellMate tests."""

import asyncio
from typing import List

import logfire
import pytest

logfire.configure(send_to_logfire=False, console=False)


class ScriptedClient:
    """Text generator that replays canned answers and records prompts.

    When ``gate`` is set, every call waits on it before answering, which lets
    a test observe the controller while a request is in flight.
    """

    def __init__(self, *answers, gate: asyncio.Event = None):
        self.answers = list(answers)
        self.prompts: List[str] = []
        self.gate = gate

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        answer = self.answers.pop(0) if self.answers else "ok"
        if isinstance(answer, BaseException):
            raise answer
        return answer


class RecordingDiagnostics:
    def __init__(self):
        self.events = []

    def generation_failure(self, cause):
        self.events.append(("generation-failure", cause))

    def frame_callback_failure(self, cause):
        self.events.append(("frame-callback-failure", cause))

    def observer_failure(self, cause):
        self.events.append(("observer-failure", cause))


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def diagnostics() -> RecordingDiagnostics:
    return RecordingDiagnostics()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
