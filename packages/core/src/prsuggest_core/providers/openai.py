from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from prsuggest_core.exceptions import SuggestionError
from prsuggest_core.providers.base import BaseSuggester


class OpenAISuggester(BaseSuggester):
    MODEL = "gpt-4o"
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, model_name: str = ""):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. "
                "Install it with: pip install openai"
            )
        super().__init__(model_name)
        self.client = _OpenAI(api_key=api_key)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        # JSON mode guarantees a single parseable object, the commentsToAdd envelope.
        response = self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            response_format={"type": "json_object"},
        )
        choice = response.choices[0]
        if choice.finish_reason == "length":
            raise SuggestionError("Too many tokens: the response was cut off before completion")
        refusal = getattr(choice.message, "refusal", None)
        if refusal:
            raise SuggestionError(f"the model refused to generate suggestions - {refusal}")
        return choice.message.content
