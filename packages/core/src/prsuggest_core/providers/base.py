"""Base suggestion source implementing the Template Method pattern.

All providers share the same algorithm:
    suggest() → _build_system_prompt() + _build_user_prompt()
              → _call_with_retry() → _call_api()   ← only this differs per provider
              → _parse()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

The reconciler never trusts what comes back, so _parse validates shape only
(path, line, optional body) and anything else in the payload is ignored.
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod

from prsuggest_core.exceptions import SuggestionError
from prsuggest_core.models import CandidateSuggestion, ChangeRecord

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_MAX_TOKENS = 8192

# Keys a provider may use for the review text of an entry, in priority order.
_BODY_KEYS = ("suggestions", "suggestion", "body")

SYSTEM_PROMPT = """You are an experienced senior engineer reviewing a pull request.
You receive a JSON list of changed lines. Each entry has the file `path`, the
`line` number, the `kind` of change (add or delete), the line `content` and,
for modified lines, the `previous_content` it replaced.

Rules:
- Only comment on lines that appear in the payload, using their exact `path` and `line`.
- Comment only where something should change: bugs, security issues, missing
  error handling, unclear naming, dead code. Do not praise code.
- Keep each suggestion short and actionable. Use GitHub-flavored markdown and
  fence code with a language tag.

Respond with a JSON object of this shape and nothing else:
{"commentsToAdd": [{"path": "<path>", "line": <line>, "suggestions": "<review comment>"}]}
If there is nothing to say, respond with {"commentsToAdd": []}."""


class BaseSuggester(ABC):
    MODEL: str = ""
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model_name: str = ""):
        self.model_name = model_name or self.MODEL

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def suggest(
        self,
        change_records: list[ChangeRecord],
        rules: str = "",
        description: str = "",
    ) -> list[CandidateSuggestion]:
        """Ask the provider for review suggestions on the given change records.

        Raises SuggestionError when every attempt fails.
        """
        if not change_records:
            return []
        user = self._build_user_prompt(change_records, rules, description)
        raw = self._call_with_retry(self._build_system_prompt(), user)
        return self._parse(raw)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        It should raise on failure; _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, system_prompt: str, user_prompt: str) -> str:
        last_error: Exception | None = None
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(system_prompt, user_prompt)
            except SuggestionError:
                # Truncation and refusals repeat on every attempt.
                raise
            except Exception as e:
                last_error = e
                if attempt == self.MAX_RETRIES - 1:
                    break
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)

        logger.error(
            "%s API failed after %d attempts: %s",
            self.__class__.__name__,
            self.MAX_RETRIES,
            last_error,
        )
        raise SuggestionError(f"Could not generate suggestions: {last_error}") from last_error

    def _build_system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def _build_user_prompt(self, change_records: list[ChangeRecord], rules: str, description: str) -> str:
        payload = json.dumps([r.to_dict() for r in change_records], indent=2)
        rules_part = f" by including the following rules: {rules}" if rules else ""
        prompt = f"Code review the following PR diff payload{rules_part}. Here's the diff payload:\n{payload}\n"
        if description:
            prompt += (
                "\nAlso, here's the PR description on what it's trying to do "
                f"to give some more context: {description}\n"
            )
        return prompt

    def _parse(self, raw: str | None) -> list[CandidateSuggestion]:
        """Parse the raw response into candidates, keeping only well-shaped entries."""
        if not raw:
            return []
        try:
            cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
            cleaned = re.sub(r"\s*```$", "", cleaned.strip())
            payload = json.loads(cleaned)
        except json.JSONDecodeError:
            logger.warning(
                "%s: failed to parse response as JSON: %s",
                self.__class__.__name__,
                raw[:200],
            )
            return []
        return parse_candidates(payload)


def parse_candidates(payload) -> list[CandidateSuggestion]:
    """Turn a loosely-typed generator payload into CandidateSuggestion objects.

    Accepts ``{"commentsToAdd": [...]}`` or a bare list of entries. Entries
    without a string ``path`` and an integer ``line`` are skipped.
    """
    if isinstance(payload, dict):
        payload = payload.get("commentsToAdd", [])
    if not isinstance(payload, list):
        return []

    candidates = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        path = entry.get("path")
        line = entry.get("line")
        if not isinstance(path, str) or not path:
            continue
        if isinstance(line, bool) or not isinstance(line, int):
            continue
        body = next((entry[k] for k in _BODY_KEYS if isinstance(entry.get(k), str)), None)
        candidates.append(CandidateSuggestion(path=path, line=line, suggestion_body=body))
    return candidates
