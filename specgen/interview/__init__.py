"""Interview engine: transcript accumulation and the question/answer state machine."""

from specgen.interview.controller import InteractionController, Session, State
from specgen.interview.transcript import Transcript

__all__ = ["InteractionController", "Session", "State", "Transcript"]
