"""Client for the language-model service used to enrich slot analysis.

The service is best effort: any failure here is reported as
:class:`EnrichmentUnavailable` and the caller falls back to local matching.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx

from .config import Settings
from .models import Student

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {"temperature": 0.1, "maxOutputTokens": 2048}


class EnrichmentUnavailable(Exception):
    """The enrichment service could not produce a reply."""


@dataclass(frozen=True)
class Ok:
    data: List[Any]


@dataclass(frozen=True)
class Malformed:
    reason: str


ParseResult = Union[Ok, Malformed]


def build_prompt(students: List[Student]) -> str:
    student_data = [
        {
            "name": s.name,
            "regNo": s.reg_no,
            "timeSlots": [entry.to_dict() for entry in s.time_slots],
        }
        for s in students
    ]

    return (
        f"I have data from {len(students)} students about their free time slots.\n"
        f"Here is the data: {json.dumps(student_data)}\n\n"
        "Please analyze this data and find common time slots when all students "
        "are free for each day of the week.\n"
        "Return the result as a JSON array where each object has:\n"
        "- day: the name of the day\n"
        "- availableSlots: array of time slots when ALL students are free\n"
        "- students: array of student names who are free in these slots\n\n"
        "Return ONLY the JSON without any additional text."
    )


def extract_array(text: Optional[str]) -> ParseResult:
    """Decode the first well-formed JSON array found in ``text``.

    Prose around the array is ignored. The array's contents are not checked.
    """
    if not text:
        return Malformed("empty response")

    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            data, _ = decoder.raw_decode(text, start)
        except ValueError:
            start = text.find("[", start + 1)
            continue
        except RecursionError:
            return Malformed("response nested too deeply")
        return Ok(data)

    return Malformed("no JSON array in response")


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.enrichment_timeout,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` once and return the generated text."""
        if not self.api_key:
            raise EnrichmentUnavailable("GEMINI_API_KEY is not configured")

        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": GENERATION_CONFIG,
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=body, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise EnrichmentUnavailable(
                f"enrichment service returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise EnrichmentUnavailable(f"error calling enrichment service: {e!r}") from e
        except ValueError as e:
            raise EnrichmentUnavailable("enrichment service returned invalid JSON") from e

        logger.debug("Enrichment response: %s", data)
        return _generated_text(data)


def _generated_text(data: Dict[str, Any]) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise EnrichmentUnavailable("unexpected enrichment response envelope") from e
    if not isinstance(text, str):
        raise EnrichmentUnavailable("enrichment response text is not a string")
    return text
