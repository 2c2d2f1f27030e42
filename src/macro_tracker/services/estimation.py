"""Nutrition and exercise estimation through a generative AI model."""

import base64
import json
import logging
import re
from dataclasses import dataclass
from typing import Protocol, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from macro_tracker.domain.estimates import (
    ExerciseEstimate,
    MealEstimate,
    NutritionEstimate,
)
from macro_tracker.domain.profile import Profile
from macro_tracker.errors import (
    EstimationFailedError,
    NotConfiguredError,
    ValidationError,
)

_logger = logging.getLogger(__name__)

EstimateT = TypeVar("EstimateT", bound=BaseModel)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)

MEAL_IMAGE_PROMPT = (
    "You are an expert clinical dietitian. Analyze the photo of this meal in "
    "detail. Identify the visible ingredients and estimate their portion sizes. "
    "Then, using the USDA nutrition database as your reference, calculate the "
    "total calories and macronutrients as accurately as possible. "
    'Return ONLY a valid JSON object with the keys "name" (string, a short '
    'descriptive dish name), "calories" (number), "protein" (number, grams), '
    '"carbs" (number, grams) and "fats" (number, grams). Do not return any '
    "extra text or code fences."
)

MEAL_NAME_PROMPT = (
    "Act as an expert clinical dietitian. Using the USDA nutrition database as "
    "your main reference, calculate as accurately as possible the nutrition "
    'values for: "{description}". If no quantity is given, assume one '
    "standard average serving (e.g. 100 g, 1 cup, 1 medium unit). "
    'Return ONLY a valid JSON object with the keys "calories" (number), '
    '"protein" (number, grams), "carbs" (number, grams) and "fats" (number, '
    "grams). Do not return any extra text or code fences."
)

EXERCISE_PROMPT = (
    "Act as an exercise physiologist. The user has the following profile:\n"
    "- Weight: {weight} kg\n"
    "- Age: {age} years\n"
    "- Sex: {gender}\n"
    'The user just performed this physical activity: "{description}".\n'
    "Estimate how many kilocalories in total were burned during the session. "
    'Return ONLY a valid JSON object with the key "burnedCalories" (number). '
    "Do not return any extra text or code fences."
)


@dataclass(frozen=True)
class InlineImage:
    """Image payload sent inline with a prompt."""

    mime_type: str
    data: bytes

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class EstimatorClient(Protocol):
    """Interface for a generative model that answers a prompt with text."""

    async def generate(
        self,
        *,
        api_key: str,
        model: str,
        prompt: str,
        image: InlineImage | None = None,
    ) -> str:
        """Return the raw text produced for the prompt."""


@dataclass
class EstimationService:
    """Service that builds estimation prompts and validates the answers."""

    client: EstimatorClient
    model: str

    async def estimate_meal_from_image(
        self, api_key: str | None, image_bytes: bytes, mime_type: str | None = None
    ) -> MealEstimate:
        """Estimate a meal's name, calories and macros from a photo."""
        key = _require_key(api_key)
        if not image_bytes:
            raise ValidationError("No image was provided.")
        image = InlineImage(
            mime_type=mime_type or detect_mime_type(image_bytes), data=image_bytes
        )
        return await self._estimate(
            key, MEAL_IMAGE_PROMPT, MealEstimate, image=image, action="meal_image"
        )

    async def estimate_meal_from_name(
        self, api_key: str | None, description: str
    ) -> NutritionEstimate:
        """Estimate calories and macros for a described food."""
        key = _require_key(api_key)
        cleaned = description.strip()
        if not cleaned:
            raise ValidationError("Enter a food name first.")
        prompt = MEAL_NAME_PROMPT.format(description=cleaned)
        return await self._estimate(key, prompt, NutritionEstimate, action="meal_name")

    async def estimate_exercise_burn(
        self, api_key: str | None, profile: Profile, description: str
    ) -> ExerciseEstimate:
        """Estimate calories burned by an activity for the given profile."""
        key = _require_key(api_key)
        cleaned = description.strip()
        if not cleaned:
            raise ValidationError("Describe the activity first.")
        prompt = EXERCISE_PROMPT.format(
            weight=profile.weight,
            age=profile.age,
            gender=profile.gender,
            description=cleaned,
        )
        return await self._estimate(key, prompt, ExerciseEstimate, action="exercise")

    async def _estimate(
        self,
        api_key: str,
        prompt: str,
        result_type: type[EstimateT],
        *,
        action: str,
        image: InlineImage | None = None,
    ) -> EstimateT:
        try:
            text = await self.client.generate(
                api_key=api_key, model=self.model, prompt=prompt, image=image
            )
        except Exception as exc:
            _logger.warning("Estimation %s failed: %s", action, exc)
            message = f"The estimation request failed: {exc}"
            raise EstimationFailedError(message) from exc
        payload = parse_json_object(text)
        try:
            return result_type.model_validate(payload)
        except PydanticValidationError as exc:
            _logger.warning("Estimation %s returned invalid fields: %s", action, exc)
            message = "Could not read the estimation result."
            raise EstimationFailedError(message) from exc


def parse_json_object(text: object) -> dict[str, object]:
    """Parse a JSON object out of model output, ignoring code fences."""
    if not isinstance(text, str) or not text:
        raise EstimationFailedError("The estimator returned an empty response.")
    cleaned = _CODE_FENCE.sub("", text).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        _logger.warning("Failed to parse estimator output: %s", text)
        raise EstimationFailedError("Could not read the estimation result.") from exc
    if not isinstance(payload, dict):
        raise EstimationFailedError("Could not read the estimation result.")
    return payload


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _require_key(api_key: str | None) -> str:
    if not api_key or not api_key.strip():
        raise NotConfiguredError("Set your AI API key in settings first.")
    return api_key.strip()
