"""Text-generation adapter around a pydantic-ai agent."""

from __future__ import annotations as _annotations

from typing import Union

from pydantic_ai import Agent
from pydantic_ai.models import Model

from cellmate.config import Settings

TUTOR_PERSONA = """
You are CellMate, an expert AI biology tutor. Your goal is to help students understand biology concepts clearly and engagingly.

Guidelines:
- Provide clear, accurate explanations appropriate for high school to college level biology
- Use analogies and examples to make complex concepts understandable
- Break down complex processes into step-by-step explanations
- Encourage curiosity and deeper learning
- If asked about non-biology topics, gently redirect to biology-related aspects
- Be encouraging and supportive in your teaching approach
"""

PROMPT_TEMPLATE = "Student question: {question}"


def render_prompt(question: str) -> str:
    """Interpolate a student question into the tutor prompt template."""
    return PROMPT_TEMPLATE.format(question=question)


# model-name prefixes that an OpenAI-compatible endpoint cannot serve
FOREIGN_PROVIDERS = frozenset(
    {"anthropic", "bedrock", "cohere", "google-gla", "google-vertex", "groq", "mistral"}
)


class GenerationError(Exception):
    """Raised when the backend fails to produce an answer, for any reason."""


def build_model(settings: Settings) -> Union[Model, str]:
    """Resolve the configured model.

    With an explicit endpoint or credential the model is an OpenAI-compatible
    chat model bound to them; otherwise the name is handed to pydantic-ai,
    which picks the provider and reads its credentials from the environment.
    """
    if not (settings.api_key or settings.base_url):
        return settings.model

    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    provider_name, sep, name = settings.model.partition(":")
    if not sep or provider_name not in FOREIGN_PROVIDERS | {"openai"}:
        name = settings.model
    elif provider_name != "openai":
        raise ValueError(
            f"CELLMATE_API_KEY/CELLMATE_BASE_URL bind an OpenAI-compatible endpoint; "
            f"model {settings.model!r} must use the openai: prefix or none"
        )
    provider = OpenAIProvider(base_url=settings.base_url, api_key=settings.api_key)
    return OpenAIChatModel(name, provider=provider)


class TutorClient:
    """Single-call adapter: one prompt in, one answer out.

    No retries, caching or rate limiting happen here; the conversation
    controller decides what a failure means for the student.
    """

    def __init__(self, model: Union[Model, str]):
        self.agent = Agent(model, system_prompt=TUTOR_PERSONA)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TutorClient":
        return cls(build_model(settings))

    async def generate(self, prompt: str) -> str:
        try:
            result = await self.agent.run(prompt)
        except Exception as exc:
            raise GenerationError(f"generation failed: {exc}") from exc

        text = result.output
        if not isinstance(text, str) or not text.strip():
            raise GenerationError("backend returned an empty response")
        return text
