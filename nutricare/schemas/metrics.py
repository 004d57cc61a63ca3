"""
Pydantic schemas for derived health metrics.
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Sex(str, Enum):
    """Patient sex, as used by the ideal-weight formula."""

    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, value: "str | Sex") -> "Sex":
        """
        Parse a sex value entered on a form.

        Accepts the enum values plus the short and Portuguese forms
        ("m", "f", "masculino", "feminino"), case-insensitively.

        Raises:
            ValueError: If the value is not recognised.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        alias = _SEX_ALIASES.get(normalized)
        if alias is None:
            raise ValueError(f"Unknown sex: {value!r}")
        return alias


_SEX_ALIASES = {
    "male": Sex.MALE,
    "m": Sex.MALE,
    "masculino": Sex.MALE,
    "female": Sex.FEMALE,
    "f": Sex.FEMALE,
    "feminino": Sex.FEMALE,
}


class BMIClassification(str, Enum):
    """BMI bands."""

    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        return _CLASSIFICATION_LABELS[self]


_CLASSIFICATION_LABELS = {
    BMIClassification.UNDERWEIGHT: "Underweight",
    BMIClassification.NORMAL: "Normal weight",
    BMIClassification.OVERWEIGHT: "Overweight",
    BMIClassification.OBESE: "Obesity",
}


class BMIResult(BaseModel):
    """Result of a BMI computation."""

    model_config = ConfigDict(frozen=True)

    value: float = Field(..., description="BMI rounded to two decimals", examples=[22.86])
    classification: BMIClassification
