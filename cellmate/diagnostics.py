"""Structured diagnostic events, emitted through logfire."""

from __future__ import annotations as _annotations

import logfire


def configure_logging() -> None:
    """Configure logfire; spans are only shipped when a token is present."""
    logfire.configure(send_to_logfire="if-token-present")
    logfire.instrument_pydantic_ai()


class Diagnostics:
    """Sink for failures that are recovered locally but worth seeing."""

    def generation_failure(self, cause: BaseException) -> None:
        logfire.error(
            "generation failure: {cause}",
            kind="generation-failure",
            cause=repr(cause),
        )

    def frame_callback_failure(self, cause: BaseException) -> None:
        logfire.error(
            "frame callback failure: {cause}",
            kind="frame-callback-failure",
            cause=repr(cause),
        )

    def observer_failure(self, cause: BaseException) -> None:
        logfire.error(
            "conversation observer failure: {cause}",
            kind="observer-failure",
            cause=repr(cause),
        )
