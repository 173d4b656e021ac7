"""Transcript — the append-only record of the interview, in request order."""

from __future__ import annotations

from specgen.common.errors import InvalidInput
from specgen.common.protocol import Message, Role
from specgen.interview import prompts


class Transcript:
    """Ordered, append-only list of role-tagged messages.

    The first message is always the user-role framing instruction built by
    :meth:`seed`. :meth:`render` hands out a snapshot tuple, so callers can
    never reorder or edit what has already been recorded.
    """

    def __init__(self):
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    # ─── Appends ──────────────────────────────────────────────────────

    def seed(self, idea: str) -> None:
        if not idea or not idea.strip():
            raise InvalidInput("The idea must not be empty")
        if self._messages:
            raise RuntimeError("Transcript has already been seeded")
        self._messages.append(Message(Role.USER, prompts.framing_prompt(idea)))

    def append_assistant(self, text: str) -> None:
        self._messages.append(Message(Role.ASSISTANT, text))

    def append_user(self, text: str) -> None:
        if not text or not text.strip():
            raise InvalidInput("An answer must not be empty")
        if prompts.is_termination(text):
            raise InvalidInput(f"{prompts.TERMINATION_COMMAND} is a command, not an answer")
        self._messages.append(Message(Role.USER, text))

    # ─── Rendering ────────────────────────────────────────────────────

    def render(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def append_and_render_final_request(self, instruction: str) -> tuple[Message, ...]:
        """Append the closing synthesis instruction and return the full request."""
        if not self._messages:
            raise RuntimeError("Cannot request a synthesis before the transcript is seeded")
        self._messages.append(Message(Role.USER, instruction))
        return self.render()
