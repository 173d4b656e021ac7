"""Shared fakes for the interview tests."""

import contextlib
from typing import Any

import pytest


class ScriptedClient:
    """Completion client double: replies (or raises) from a script, records every request."""

    def __init__(self, replies: list[Any]):
        self.replies = list(replies)
        self.requests: list[tuple] = []
        self.closed = False

    async def send(self, messages):
        self.requests.append(tuple(messages))
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def close(self):
        self.closed = True


class ScriptedIO:
    """Terminal double: answers from a script, records what was shown."""

    def __init__(self, answers: list[Any], retry_answers: list[bool] | None = None):
        self.answers = list(answers)
        self.retry_answers = list(retry_answers or [])
        self.questions: list[tuple[int, str]] = []
        self.retry_prompts: list[str] = []
        self.progress_events: list[str] = []

    def show_question(self, turn, question):
        self.questions.append((turn, question))

    def ask(self, prompt):
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def confirm_retry(self, message):
        self.retry_prompts.append(message)
        return self.retry_answers.pop(0) if self.retry_answers else False

    @contextlib.asynccontextmanager
    async def progress(self, message):
        self.progress_events.append(f"start:{message}")
        try:
            yield
        finally:
            self.progress_events.append(f"stop:{message}")


@pytest.fixture
def make_client():
    return ScriptedClient


@pytest.fixture
def make_io():
    return ScriptedIO
