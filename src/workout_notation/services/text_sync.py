"""Text <-> state synchronization for one editing session.

Text to state is push: every keystroke re-arms a short debounce, and when it
fires the current buffer is parsed and replaces the structured state. This
keeps checkboxes and derived numbers live while the user types.

State to text is pull: the buffer is regenerated only when a caller asks
(e.g. switching from the structured editor to the text view), and never
while the user is typing, so in-progress formatting and cursor position are
not overwritten.

The session owns its timers. leave_text_view() and close() cancel them.
"""

import asyncio
import logging
from typing import Callable, Optional

from workout_notation.config import settings
from workout_notation.models import WorkoutExecutionState
from workout_notation.parsers.text_parser import WorkoutTextParser
from workout_notation.services.execution_state import WorkoutExecution
from workout_notation.services.text_serializer import generate_workout_text

logger = logging.getLogger(__name__)


class SessionClosedError(RuntimeError):
    """Raised when a closed TextSyncSession is used."""


class TextSyncSession:
    """Binds a text buffer to a WorkoutExecution."""

    def __init__(
        self,
        execution: WorkoutExecution,
        *,
        debounce_ms: Optional[int] = None,
        typing_idle_ms: Optional[int] = None,
        realtime: Optional[bool] = None,
        embed_ids: Optional[bool] = None,
        complete_all: bool = False,
        on_state_change: Optional[Callable[[WorkoutExecutionState], None]] = None,
        on_text_overwrite: Optional[Callable[[str], None]] = None,
        on_typing_change: Optional[Callable[[bool], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.execution = execution
        self.debounce_seconds = (debounce_ms if debounce_ms is not None else settings.TEXT_SYNC_DEBOUNCE_MS) / 1000
        self.typing_idle_seconds = (typing_idle_ms if typing_idle_ms is not None else settings.TYPING_IDLE_MS) / 1000
        self.realtime = settings.REALTIME_TEXT_SYNC if realtime is None else realtime
        self.embed_ids = settings.EMBED_EXERCISE_IDS if embed_ids is None else embed_ids
        self.complete_all = complete_all  # gap-recovery mode: everything parsed counts as done

        self.on_state_change = on_state_change
        self.on_text_overwrite = on_text_overwrite
        self.on_typing_change = on_typing_change

        self._loop = loop
        self._parser = WorkoutTextParser()

        self._text = ""
        self._last_parsed_text = ""
        self._is_user_typing = False
        self._is_updating_from_ui = False
        self._closed = False

        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self._idle_handle: Optional[asyncio.TimerHandle] = None

    def __enter__(self) -> "TextSyncSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Observable state

    @property
    def text(self) -> str:
        return self._text

    @property
    def last_parsed_text(self) -> str:
        return self._last_parsed_text

    @property
    def is_user_typing(self) -> bool:
        return self._is_user_typing

    @property
    def is_updating_from_ui(self) -> bool:
        return self._is_updating_from_ui

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_pending_parse(self) -> bool:
        return self._debounce_handle is not None

    # Text -> state

    def on_text_changed(self, new_text: str) -> None:
        """Handle a change of the text buffer (keystroke or programmatic echo)."""
        self._ensure_open()
        self._text = new_text

        if self._is_updating_from_ui:
            return

        self._mark_typing()

        if new_text == self._last_parsed_text:
            # Back to what the current state was parsed from
            self._cancel_debounce()
            return

        if not self.realtime:
            return

        self._cancel_debounce()
        loop = self._get_loop()
        if loop is None:
            self._parse_buffer()
            return
        self._debounce_handle = loop.call_later(self.debounce_seconds, self._on_debounce_fired)

    def sync_text_to_state(self) -> bool:
        """Parse the buffer now, dropping any pending debounce."""
        self._ensure_open()
        self._cancel_debounce()
        return self._parse_buffer(force=True)

    def _on_debounce_fired(self) -> None:
        self._debounce_handle = None
        if self._closed:
            return
        self._parse_buffer()

    def _parse_buffer(self, force: bool = False) -> bool:
        text = self._text
        if not force and text == self._last_parsed_text:
            return False

        try:
            state = self._parser.parse_to_state(
                text,
                existing_workout=self.execution.workout,
                complete_all=self.complete_all,
            )
        except Exception:
            logger.exception("Failed to parse workout text; keeping previous state")
            return False

        self.execution.replace_state(state.workout, state.progress)
        self._last_parsed_text = text
        logger.debug(f"Parsed {len(state.workout.exercises)} exercises from text buffer")

        if self.on_state_change is not None:
            self.on_state_change(self.execution.state)
        return True

    # State -> text

    def generate_text(self) -> str:
        return generate_workout_text(
            self.execution.workout,
            self.execution.progress,
            include_ids=self.embed_ids,
        )

    def request_ui_to_text_sync(self) -> bool:
        """
        Overwrite the buffer with text generated from the current state.

        Refused while the user is typing.

        Returns:
            True if the buffer was overwritten
        """
        self._ensure_open()
        if self._is_user_typing:
            logger.debug("Skipping UI -> text sync while user is typing")
            return False

        self._is_updating_from_ui = True
        try:
            try:
                generated = self.generate_text()
            except Exception:
                logger.exception("Failed to generate workout text; leaving buffer untouched")
                return False

            self._cancel_debounce()
            self._text = generated
            self._last_parsed_text = generated
            if self.on_text_overwrite is not None:
                self.on_text_overwrite(generated)
        finally:
            self._is_updating_from_ui = False

        return True

    # Timers and teardown

    def leave_text_view(self) -> None:
        """Cancel pending timers when the text view goes away."""
        self._cancel_debounce()
        self._cancel_idle()
        self._set_typing(False)

    def close(self) -> None:
        """Tear down the session. Safe to call more than once."""
        if self._closed:
            return
        self.leave_text_view()
        self._closed = True
        logger.debug("Text sync session closed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Text sync session is closed")

    def _get_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; syncing without timers")
            return None

    def _mark_typing(self) -> None:
        self._set_typing(True)
        self._cancel_idle()
        loop = self._get_loop()
        if loop is None:
            # Nothing can clear the flag later, so don't hold it
            self._set_typing(False)
            return
        self._idle_handle = loop.call_later(self.typing_idle_seconds, self._on_idle_fired)

    def _on_idle_fired(self) -> None:
        self._idle_handle = None
        self._set_typing(False)

    def _set_typing(self, value: bool) -> None:
        if self._is_user_typing == value:
            return
        self._is_user_typing = value
        if self.on_typing_change is not None:
            self.on_typing_change(value)

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _cancel_idle(self) -> None:
        if self._idle_handle is not None:
            self._idle_handle.cancel()
            self._idle_handle = None
