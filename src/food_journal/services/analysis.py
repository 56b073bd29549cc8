"""Food analysis service using LLMs."""

import asyncio
import base64
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from food_journal.domain.analysis import AnalysisMode, AnalysisResult
from food_journal.domain.errors import (
    AnalysisBusyError,
    AnalysisError,
    AnalysisInputError,
)

MISSING_KEY_MESSAGE = (
    "OpenAI API key is missing. Set OPENAI_API_KEY in the environment or .env file."
)

_NUMBER = {"type": "number", "minimum": 0}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foodName": {"type": "string"},
        "description": {"type": "string"},
        "healthTip": {"type": "string"},
        "calories": _NUMBER,
        "protein": _NUMBER,
        "carbs": _NUMBER,
        "fat": _NUMBER,
        "fiber": _NUMBER,
        "sugar": _NUMBER,
        "water": _NUMBER,
    },
    "required": [
        "foodName",
        "description",
        "healthTip",
        "calories",
        "protein",
        "carbs",
        "fat",
        "fiber",
        "sugar",
        "water",
    ],
    "additionalProperties": False,
}

_FIELDS_HINT = (
    "Return the dish name, a short description (max 10 words), one short "
    "health tip, and calories plus grams of protein, carbs, fat, fiber and "
    "sugar, and water in ml."
)

PROMPTS: dict[AnalysisMode, str] = {
    AnalysisMode.PHOTO: (
        "Analyze this food image. Identify the dish and estimate its "
        "nutritional content for the serving size shown. " + _FIELDS_HINT
    ),
    AnalysisMode.LABEL: (
        "Read the nutrition facts label in this image and report the values "
        "for one serving. " + _FIELDS_HINT
    ),
    AnalysisMode.TEXT: (
        "Estimate the nutritional content of the meal described below. "
        + _FIELDS_HINT
    ),
}


class AnalysisClient(Protocol):
    """Interface for LLM food analysis."""

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None,
    ) -> dict[str, object]:
        """Return structured analysis data."""


@dataclass
class AnalysisService:
    """Service that prepares analysis prompts and validates results.

    Only one analysis runs at a time; nothing here touches the journal.
    """

    client: AnalysisClient | None
    model: str
    reasoning_effort: str | None
    store: bool
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def analyze(
        self,
        mode: AnalysisMode,
        *,
        image_bytes: bytes | None = None,
        text: str | None = None,
    ) -> AnalysisResult:
        """Analyze a photo, a label photo or a text description."""
        prompt, data_url = _prepare_request(mode, image_bytes, text)
        if self.client is None:
            raise AnalysisError(MISSING_KEY_MESSAGE)
        if self._lock.locked():
            raise AnalysisBusyError("An analysis is already in progress.")

        async with self._lock:
            try:
                raw = await self.client.analyze(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    prompt=prompt,
                    schema=ANALYSIS_SCHEMA,
                    image_data_url=data_url,
                )
            except AnalysisError:
                raise
            except Exception as exc:
                raise AnalysisError(str(exc) or type(exc).__name__) from exc

        try:
            return AnalysisResult.model_validate(raw)
        except ValidationError as exc:
            raise AnalysisError("The analysis returned an unusable result.") from exc


def _prepare_request(
    mode: AnalysisMode, image_bytes: bytes | None, text: str | None
) -> tuple[str, str | None]:
    if mode is AnalysisMode.TEXT:
        description = (text or "").strip()
        if not description:
            raise AnalysisInputError("Please describe what you ate.")
        return f"{PROMPTS[mode]}\n\nMeal: {description}", None
    if not image_bytes:
        raise AnalysisInputError("Please attach a photo to analyze.")
    return PROMPTS[mode], to_data_url(image_bytes)


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
