"""Terminal I/O — colored status lines, the answer prompt and a cooperative spinner."""

from __future__ import annotations

import asyncio
import contextlib
from typing import AsyncIterator

from rich.console import Console
from rich.markdown import Markdown
from rich.prompt import Confirm

from specgen.common.logging_setup import CLEAR_LINE

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
SPINNER_INTERVAL = 0.1


class ConsoleUI:
    """Everything the interview shows to or reads from the user."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    # ─── Status lines ─────────────────────────────────────────────────

    def success(self, message: str) -> None:
        self.console.print(f"✅ {message}", style="green", markup=False)

    def error(self, message: str) -> None:
        self.console.print(f"❌ {message}", style="red", markup=False)

    def warning(self, message: str) -> None:
        self.console.print(f"⚠️ {message}", style="yellow", markup=False)

    def info(self, message: str) -> None:
        self.console.print(f"ℹ️ {message}", style="blue", markup=False)

    # ─── Interview surface ────────────────────────────────────────────

    def show_question(self, turn: int, question: str) -> None:
        self.console.print()
        self.console.print(f"Question {turn}", style="bold cyan")
        self.console.print(Markdown(question))

    def ask(self, prompt: str) -> str:
        """Read one line. Raises ``EOFError`` at end of input."""
        return self.console.input(f"[bold magenta]{prompt}[/] ")

    def confirm_retry(self, message: str) -> bool:
        self.error(message)
        try:
            return Confirm.ask("Retry the same request?", console=self.console, default=False)
        except EOFError:
            return False

    @contextlib.asynccontextmanager
    async def progress(self, message: str) -> AsyncIterator[None]:
        async with spinner(self.console, message):
            yield


async def _spin(console: Console, message: str) -> None:
    frame = 0
    while True:
        console.file.write(f"\r{SPINNER_FRAMES[frame]} {message}")
        console.file.flush()
        frame = (frame + 1) % len(SPINNER_FRAMES)
        await asyncio.sleep(SPINNER_INTERVAL)


@contextlib.asynccontextmanager
async def spinner(console: Console, message: str) -> AsyncIterator[None]:
    """Animate *message* while the body awaits; the line is cleared on every exit path."""
    if not console.is_terminal:
        yield
        return

    task = asyncio.create_task(_spin(console, message))
    try:
        yield
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        console.file.write(CLEAR_LINE)
        console.file.flush()
