"""
Pydantic schemas for patient records and the registration form.
"""
from pydantic import BaseModel, ConfigDict, Field, computed_field

from nutricare.schemas.metrics import BMIClassification, BMIResult, Sex


class PatientForm(BaseModel):
    """Raw registration form input.

    Every field is the text the user typed. Validation and number parsing
    happen at the store boundary, not here. ``PatientForm()`` is a cleared form.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    name: str = ""
    weight: str = Field("", description="Weight in kilograms", examples=["70.5"])
    height: str = Field("", description="Height in meters", examples=["1.75"])
    age: str = ""
    sex: str = Sex.MALE.value
    phone: str = ""
    email: str = ""
    address: str = ""


class PatientRecord(BaseModel):
    """A registered patient.

    ``bmi_value``, ``bmi_classification`` and ``ideal_weight_kg`` are computed
    from the measurements every time they are read, and are included when
    the record is serialized. Values found in stored data are ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    name: str = Field(..., min_length=1, examples=["Maria Silva"])
    weight_kg: float = Field(..., gt=0, examples=[70.5])
    height_m: float = Field(..., gt=0, examples=[1.75])
    age: int = Field(..., ge=0, examples=[34])
    sex: Sex = Sex.MALE
    phone: str = ""
    email: str = ""
    address: str = ""

    def _bmi(self) -> BMIResult:
        # Imported here to avoid a circular import with the services package
        from nutricare.services.metrics_calculator import compute_bmi

        return compute_bmi(self.weight_kg, self.height_m)

    @computed_field
    @property
    def bmi_value(self) -> float:
        return self._bmi().value

    @computed_field
    @property
    def bmi_classification(self) -> BMIClassification:
        return self._bmi().classification

    @computed_field
    @property
    def ideal_weight_kg(self) -> float:
        from nutricare.services.metrics_calculator import compute_ideal_weight

        return compute_ideal_weight(self.height_m, self.sex)

    @property
    def bmi(self) -> BMIResult:
        """BMI value and classification together."""
        return self._bmi()
