from __future__ import annotations

import json

from prsuggest_core.providers.base import BaseSuggester

# Forcing this tool makes Claude return the payload as structured tool input
# rather than free text.
_STRUCTURED_OUTPUT_TOOL = {
    "name": "structuredOutput",
    "description": "Structured Output",
    "input_schema": {
        "type": "object",
        "properties": {
            "commentsToAdd": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "path": {"type": "string"},
                        "line": {"type": "integer"},
                        "suggestions": {"type": "string"},
                    },
                    "required": ["path", "line"],
                },
            }
        },
        "required": ["commentsToAdd"],
    },
}


class AnthropicSuggester(BaseSuggester):
    MODEL = "claude-sonnet-4-20250514"
    TEMPERATURE = 0.3

    def __init__(self, api_key: str, model_name: str = ""):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install anthropic"
            )
        super().__init__(model_name)
        self.client = Anthropic(api_key=api_key)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.messages.create(
            model=self.model_name,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            tools=[_STRUCTURED_OUTPUT_TOOL],
            tool_choice={"type": "tool", "name": _STRUCTURED_OUTPUT_TOOL["name"]},
        )
        for block in response.content:
            if getattr(block, "type", None) == "tool_use":
                return json.dumps(block.input)
        text_blocks = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        return "".join(text_blocks).strip()
