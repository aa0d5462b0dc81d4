# app/services/evaluator.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from loguru import logger
from openai import AsyncOpenAI
from pydantic import ValidationError

from app.core.config import Settings
from app.core.errors import (
    InvalidRequest,
    PayloadTooLarge,
    UpstreamFormatError,
    UpstreamParseError,
    UpstreamSchemaError,
)
from app.schemas.analysis import (
    PHOTO_EVALUATION_SCHEMA,
    PHOTO_EVALUATION_SCHEMA_NAME,
    EvaluationResult,
)
from app.services.rubric import build_photo_prompt


def build_openai_client(settings: Settings) -> AsyncOpenAI:
    # raises openai.OpenAIError when no key is configured anywhere
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY)


def extract_output_text(response: Any) -> str:
    """Return the text of the first ``output_text`` part in a Responses API envelope."""
    for item in getattr(response, "output", None) or []:
        for part in getattr(item, "content", None) or []:
            text = getattr(part, "text", None)
            if getattr(part, "type", None) == "output_text" and isinstance(text, str):
                return text
    logger.error("Unexpected model response format: {!r}", response)
    raise UpstreamFormatError()


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"non-standard JSON constant {name}")


def parse_result(text: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error("Could not parse JSON returned by the model: {} | text={!r}", e, text[:500])
        raise UpstreamParseError() from e
    if not isinstance(parsed, dict):
        logger.error("Model returned JSON that is not an object: {!r}", text[:500])
        raise UpstreamParseError()
    return parsed


class PhotoEvaluator:
    """
    Sends one photo plus the fixed rubric to the model and returns its JSON verdict.

    The instance holds only read-only configuration and a shared client, so a single
    one serves every request.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4.1-mini",
        max_image_chars: int = 4_000_000,
        image_detail: str = "auto",
        validate_result: bool = False,
    ) -> None:
        self.client = client
        self.model = model
        self.max_image_chars = max_image_chars
        self.image_detail = image_detail
        self.validate_result = validate_result

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[AsyncOpenAI] = None) -> "PhotoEvaluator":
        return cls(
            client or build_openai_client(settings),
            model=settings.OPENAI_MODEL,
            max_image_chars=settings.MAX_IMAGE_CHARS,
            image_detail=settings.OPENAI_IMAGE_DETAIL,
            validate_result=settings.VALIDATE_RESULT,
        )

    def check_image(self, image_encoded: Any) -> str:
        if not image_encoded or not isinstance(image_encoded, str):
            raise InvalidRequest()
        if len(image_encoded) > self.max_image_chars:
            raise PayloadTooLarge()
        return image_encoded

    def build_input(self, image_encoded: str) -> List[Dict[str, Any]]:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": build_photo_prompt()},
                    {"type": "input_image", "image_url": image_encoded, "detail": self.image_detail},
                ],
            }
        ]

    def text_format(self) -> Dict[str, Any]:
        return {
            "format": {
                "type": "json_schema",
                "name": PHOTO_EVALUATION_SCHEMA_NAME,
                "schema": PHOTO_EVALUATION_SCHEMA,
                "strict": True,
            }
        }

    async def evaluate(self, image_encoded: str) -> Dict[str, Any]:
        image_encoded = self.check_image(image_encoded)

        response = await self.client.responses.create(
            model=self.model,
            input=self.build_input(image_encoded),
            text=self.text_format(),
        )

        result = parse_result(extract_output_text(response))

        if self.validate_result:
            try:
                EvaluationResult.model_validate(result)
            except ValidationError as e:
                logger.error("Model output failed schema validation: {}", e.errors())
                raise UpstreamSchemaError() from e

        return result
