"""Content generator — produces replacement draft content from a seed draft."""
from __future__ import annotations
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from wiki_authoring.domain.wiki.models import DraftContent
from wiki_authoring.domain.wiki.rules import validate_draft_content

logger = logging.getLogger(__name__)


class GeneratorError(Exception):
    """The external content generator failed, timed out, or was cancelled."""


class ContentGenerator(ABC):

    @abstractmethod
    def generate(self, project_id: int, seed: DraftContent) -> DraftContent:
        """Return new draft content derived from seed. Raises GeneratorError on failure."""
        ...


def _strip_markdown_fence(text: str) -> str:
    if "```json" in text:
        return text.split("```json")[1].split("```")[0].strip()
    if "```" in text:
        return text.split("```")[1].split("```")[0].strip()
    return text.strip()


_SYSTEM_PROMPT = (
    "You maintain a project's wiki page. You output only structured JSON "
    "with the keys 'sections', 'counters' and 'hidden_section_ids'."
)


class OpenRouterContentGenerator(ContentGenerator):
    """Calls an OpenAI-compatible chat completions endpoint (OpenRouter by default)."""

    def __init__(self, url: str, api_key: str, model: str, timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        self._url = url
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._session = session or requests.Session()

    def _build_prompt(self, project_id: int, seed: DraftContent) -> str:
        return f"""
        Regenerate the wiki page for project {project_id}.
        Keep section ids stable where a section still applies, refresh stale text,
        and keep 'hidden_section_ids' limited to ids that exist in 'sections'.

        OUTPUT FORMAT:
        Return ONLY valid JSON with exactly this structure:
        {{
            "sections": [{{"id": "...", "title": "...", "body": "..."}}],
            "counters": {{"name": "scalar value"}},
            "hidden_section_ids": ["..."]
        }}

        CURRENT DRAFT JSON:
        {json.dumps(seed.to_dict(), indent=2)}
        """

    def generate(self, project_id: int, seed: DraftContent) -> DraftContent:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": self._build_prompt(project_id, seed)},
            ],
        }

        try:
            response = self._session.post(self._url, headers=headers, json=payload, timeout=self._timeout)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except requests.RequestException as e:
            raise GeneratorError(f"Content generator request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GeneratorError(f"Content generator returned an unexpected response: {e}") from e

        try:
            data = json.loads(_strip_markdown_fence(content))
        except (TypeError, ValueError) as e:
            raise GeneratorError(f"Content generator returned invalid JSON: {e}") from e

        result = validate_draft_content(data)
        if not result.is_success:
            raise GeneratorError(f"Content generator returned malformed content: {result.error}")
        return result.value
