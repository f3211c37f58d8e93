"""Conversation store and the controller that runs one turn per submission."""

from __future__ import annotations as _annotations

from typing import Callable, List, Optional, Tuple

from typing_extensions import Protocol

from cellmate.client import render_prompt
from cellmate.diagnostics import Diagnostics
from cellmate.models import ConversationSnapshot, Message
from cellmate.utils import create_assistant_message, create_user_message

GREETING = (
    "Hello! I'm your AI Biology Tutor. Ask me anything about biology - from basic "
    "cell structure to complex genetic processes. How can I help you learn today?"
)

FALLBACK_REPLY = (
    "I apologize, but I'm having trouble connecting right now. "
    "Please try again in a moment!"
)

SUGGESTED_QUESTIONS = (
    "What is the difference between mitosis and meiosis?",
    "How does photosynthesis work?",
    "Explain the structure of DNA",
    "What happens during cellular respiration?",
)

Observer = Callable[[ConversationSnapshot], None]


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class ConversationStore:
    """Append-only, ordered log of messages."""

    def __init__(self, messages: Optional[List[Message]] = None):
        self._messages: List[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def all(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


class ConversationController:
    """Runs one request/response cycle per user turn.

    Only one generation may be in flight; submissions made while it is
    pending are dropped. Every completed turn ends with exactly one
    assistant message, either the generated answer or ``FALLBACK_REPLY``.
    """

    def __init__(
        self,
        client: TextGenerator,
        store: Optional[ConversationStore] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.client = client
        self.store = store or ConversationStore()
        self.diagnostics = diagnostics or Diagnostics()
        self.draft = ""
        self._pending = False
        self._alive = True
        self._observers: List[Observer] = []
        if not len(self.store):
            self.store.append(create_assistant_message(GREETING))

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def conversation(self) -> Tuple[Message, ...]:
        return self.store.all()

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def suggestions(self) -> Tuple[str, ...]:
        """Starter questions, offered only before the first turn."""
        return SUGGESTED_QUESTIONS if len(self.store) == 1 else ()

    def use_suggestion(self, index: int) -> str:
        self.draft = SUGGESTED_QUESTIONS[index]
        return self.draft

    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(messages=self.store.all(), pending=self._pending)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def close(self) -> None:
        """Tear down: replies that arrive later are dropped."""
        self._alive = False
        self._observers.clear()

    async def submit(self, text: Optional[str] = None) -> None:
        question = (self.draft if text is None else text).strip()
        if not question or self._pending or not self._alive:
            return

        self._append(create_user_message(question))
        self.draft = ""
        try:
            self._set_pending(True)
            try:
                answer = await self.client.generate(render_prompt(question))
            except Exception as exc:
                self.diagnostics.generation_failure(exc)
                answer = FALLBACK_REPLY
            if self._alive:
                self._append(create_assistant_message(answer))
        finally:
            self._set_pending(False)

    def _append(self, message: Message) -> None:
        self.store.append(message)
        self._notify()

    def _set_pending(self, value: bool) -> None:
        self._pending = value
        self._notify()

    def _notify(self) -> None:
        if not self._alive:
            return
        snapshot = self.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as exc:
                self.diagnostics.observer_failure(exc)
