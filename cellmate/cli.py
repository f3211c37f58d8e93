"""Console version of the tutor conversation."""

from __future__ import annotations as _annotations

import asyncio

from cellmate.client import TutorClient
from cellmate.config import Settings
from cellmate.conversation import ConversationController
from cellmate.diagnostics import configure_logging
from cellmate.models import ConversationSnapshot


class ConsoleRenderer:
    """Prints each new message as it lands in the conversation."""

    def __init__(self, seen: int = 0):
        self.seen = seen
        self.was_pending = False

    def __call__(self, snapshot: ConversationSnapshot) -> None:
        for message in snapshot.messages[self.seen:]:
            if not message.is_user:
                print(f"🧬 CellMate: {message.text}\n")
        self.seen = len(snapshot.messages)
        if snapshot.pending and not self.was_pending:
            print("… thinking")
        self.was_pending = snapshot.pending


async def chat_loop(controller: ConversationController) -> None:
    print(f"🧬 CellMate: {controller.conversation[0].text}\n")
    print("Try asking about:")
    for number, question in enumerate(controller.suggestions, start=1):
        print(f"  {number}. {question}")
    print("Type a number to use a suggestion, or 'quit' to exit\n")

    controller.subscribe(ConsoleRenderer(seen=len(controller.conversation)))
    while True:
        user_input = (await asyncio.to_thread(input, "🎓 You: ")).strip()
        if user_input.lower() == "quit":
            print("Happy studying!")
            break

        if user_input.isdigit() and controller.suggestions:
            index = int(user_input) - 1
            if 0 <= index < len(controller.suggestions):
                print(f"🎓 You: {controller.use_suggestion(index)}")
                user_input = controller.draft

        await controller.submit(user_input)
    controller.close()


def main() -> None:
    configure_logging()
    controller = ConversationController(TutorClient.from_settings(Settings.from_env()))
    try:
        asyncio.run(chat_loop(controller))
    except (KeyboardInterrupt, EOFError):
        print("\nHappy studying!")


if __name__ == "__main__":
    main()
