"""
Interaction Controller — drives the interview from idea to written spec.

The controller is the sole owner of the session. It:
1. Seeds the transcript with the framing instruction and the idea
2. Asks the completion client for the next question
3. Shows it and reads the user's answer
4. Loops until the user sends the termination command
5. Requests the final synthesis and hands it to the artifact writer

Any failure after seeding is terminal: the state becomes FAILED and the
exception propagates. Nothing is retried unless ``allow_retry`` is set, in
which case the user is asked before the same request is sent again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import AsyncContextManager, Callable, Protocol, Sequence

from specgen.common.artifact import ArtifactWriter, SpecificationArtifact
from specgen.common.errors import CompletionError, InvalidInput
from specgen.common.llm_client import CompletionClient
from specgen.common.protocol import Message
from specgen.interview import prompts
from specgen.interview.transcript import Transcript

ANSWER_PROMPT = f"Your answer ({prompts.TERMINATION_COMMAND} to generate the spec):"
QUESTION_PROGRESS = "Thinking about the next question..."
SYNTHESIS_PROGRESS = "Compiling the specification..."


class State(Enum):
    AWAITING_IDEA = "awaiting_idea"
    QUESTIONING = "questioning"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Session:
    """In-memory state of one run. Never persisted."""
    transcript: Transcript = field(default_factory=Transcript)
    turn: int = 0
    finished: bool = False


class InterviewIO(Protocol):
    """The terminal surface the controller talks to."""

    def show_question(self, turn: int, question: str) -> None: ...

    def ask(self, prompt: str) -> str: ...

    def confirm_retry(self, message: str) -> bool: ...

    def progress(self, message: str) -> AsyncContextManager[None]: ...


class InteractionController:

    def __init__(
        self,
        client: CompletionClient,
        io: InterviewIO,
        writer: ArtifactWriter,
        *,
        logger: logging.Logger | None = None,
        extended_synthesis: bool = False,
        allow_retry: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.io = io
        self.writer = writer
        self.log = logger or logging.getLogger(__name__)
        self.extended_synthesis = extended_synthesis
        self.allow_retry = allow_retry
        self._clock = clock
        self.session = Session()
        self.state = State.AWAITING_IDEA
        self.artifact: SpecificationArtifact | None = None

    # ─── Public API ───────────────────────────────────────────────────

    async def run(self, idea: str) -> Path:
        """Run the whole interview and return the path of the written spec."""
        if self.state is not State.AWAITING_IDEA:
            raise RuntimeError(f"Controller already ran (state: {self.state.value})")

        try:
            self._start(idea)
            await self._question_loop()
            body = await self._synthesize()
            return self._finish(body)
        except BaseException as e:
            self._transition(State.FAILED)
            self.log.debug("Run aborted: %s: %s", type(e).__name__, e)
            raise

    # ─── States ───────────────────────────────────────────────────────

    def _start(self, idea: str) -> None:
        if not idea or not idea.strip():
            raise InvalidInput("The idea must not be empty")
        self.session.transcript.seed(idea.strip())
        self._transition(State.QUESTIONING)

    async def _question_loop(self) -> None:
        transcript = self.session.transcript
        while True:
            question = await self._request(transcript.render(), QUESTION_PROGRESS)
            transcript.append_assistant(question)
            self.session.turn += 1
            self.io.show_question(self.session.turn, question)

            answer = self._read_answer()
            if prompts.is_termination(answer):
                self.log.debug("Termination command received after %d question(s)", self.session.turn)
                self._transition(State.SYNTHESIZING)
                return
            transcript.append_user(answer)

    async def _synthesize(self) -> str:
        request = self.session.transcript.append_and_render_final_request(
            prompts.synthesis_prompt(self.extended_synthesis)
        )
        return await self._request(request, SYNTHESIS_PROGRESS)

    def _finish(self, body: str) -> Path:
        self.artifact = SpecificationArtifact.create(body, now=self._clock())
        path = self.writer.write(self.artifact)
        self.session.finished = True
        self._transition(State.DONE)
        return path

    # ─── Helpers ──────────────────────────────────────────────────────

    async def _request(self, messages: Sequence[Message], progress: str) -> str:
        """One completion call; with ``allow_retry`` the user may resend it after a failure."""
        while True:
            try:
                async with self.io.progress(progress):
                    return await self.client.send(messages)
            except CompletionError as e:
                self.log.debug("Completion failed in %s: %s", self.state.value, e.user_message())
                if self.allow_retry and self.io.confirm_retry(e.user_message()):
                    continue
                raise

    def _read_answer(self) -> str:
        try:
            answer = self.io.ask(ANSWER_PROMPT)
        except EOFError:
            raise InvalidInput("No input received") from None
        if not answer or not answer.strip():
            raise InvalidInput("An answer must not be empty")
        return answer

    def _transition(self, state: State) -> None:
        self.log.debug("State: %s -> %s", self.state.value, state.value)
        self.state = state
