"""
Pure functions mapping raw measurements to derived health metrics.

Callers validate inputs. Results that are not finite numbers raise
decimal.InvalidOperation when rounded.
"""
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Union

from nutricare.schemas.metrics import BMIClassification, BMIResult, Sex

# Upper bounds (exclusive) of each band; anything above the last is obese
UNDERWEIGHT_LIMIT = 18.5
NORMAL_LIMIT = 24.9
OVERWEIGHT_LIMIT = 29.9

_CENT = Decimal("0.01")
# Wide enough to hold any finite float to the cent
_ROUNDING = Context(prec=400, rounding=ROUND_HALF_UP)


def round_half_up(value: float) -> float:
    """
    Round to two decimals, ties away from zero.

    Works on the exact binary value of the float, so 18.125 becomes 18.13
    where the built-in round() would give 18.12.

    Raises:
        decimal.InvalidOperation: If the value is not finite.
    """
    return float(Decimal(value).quantize(_CENT, context=_ROUNDING))


def classify_bmi(value: float) -> BMIClassification:
    """
    Classify a BMI value.

    Bands: below 18.5 underweight, below 24.9 normal, below 29.9 overweight,
    otherwise obese.
    """
    if value < UNDERWEIGHT_LIMIT:
        return BMIClassification.UNDERWEIGHT
    if value < NORMAL_LIMIT:
        return BMIClassification.NORMAL
    if value < OVERWEIGHT_LIMIT:
        return BMIClassification.OVERWEIGHT
    return BMIClassification.OBESE


def compute_bmi(weight_kg: float, height_m: float) -> BMIResult:
    """
    Compute Body Mass Index.

    Args:
        weight_kg: Weight in kilograms.
        height_m: Height in meters. Must not be zero.

    Returns:
        BMIResult: Value rounded to two decimals, and its classification.
            The classification uses the unrounded value.
    """
    bmi = weight_kg / height_m ** 2
    return BMIResult(value=round_half_up(bmi), classification=classify_bmi(bmi))


def compute_ideal_weight(height_m: float, sex: Union[Sex, str]) -> float:
    """
    Estimate ideal weight from height and sex.

    Uses ``(cm - 100) - (cm - 150) / k`` with k = 4 for men and 2 for women.

    Args:
        height_m: Height in meters.
        sex: Patient sex.

    Returns:
        float: Ideal weight in kilograms, rounded to two decimals.
    """
    height_cm = height_m * 100
    divisor = 4 if Sex.parse(sex) is Sex.MALE else 2
    return round_half_up((height_cm - 100) - ((height_cm - 150) / divisor))
