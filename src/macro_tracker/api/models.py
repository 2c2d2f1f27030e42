"""Pydantic models for the command API payloads."""

from typing import Literal

from pydantic import BaseModel, Field


class ProfileRequest(BaseModel):
    """Onboarding payload."""

    name: str
    age: int
    weight: float
    height: int
    gender: str
    activity: float
    goal: str
    reset_history: bool


class MealRequest(BaseModel):
    """Meal to log on the selected date."""

    name: str = ""
    calories: float | None = 0
    protein: float | None = 0
    carbs: float | None = 0
    fats: float | None = 0


class NameEstimateRequest(BaseModel):
    """Food description to estimate."""

    description: str


class ImageEstimateRequest(BaseModel):
    """Base64-encoded meal photo to estimate."""

    image_base64: str
    mime_type: str | None = None


class ExerciseRequest(BaseModel):
    """Free-text activity description."""

    description: str


class WaterRequest(BaseModel):
    """Water adjustment by one glass."""

    delta: Literal[-1, 1]


class WeightRequest(BaseModel):
    """Weight in kilograms."""

    weight: float = Field(gt=0)


class SettingsRequest(BaseModel):
    """User settings update."""

    ai_api_key: str | None = None
