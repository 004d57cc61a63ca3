"""
Service layer for the patient collection.

PatientStore owns the ordered, in-memory list of patients and keeps it in
sync with one durable key-value slot. It is the only component that mutates
the collection; callers get read-only views.

Architecture:
    Presentation → PatientStore → KeyValueRepository → Database
                        ↓
                  metrics_calculator (via PatientRecord)

Dependency Injection:
    PatientStore receives its repository via constructor injection.
    Use nutricare.core.dependencies.get_patient_store() for the app-wide instance.
"""
import logging
import math
import uuid
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from nutricare.core.config import PATIENTS_STORAGE_KEY
from nutricare.core.exceptions import (
    PatientNotFoundError,
    PatientValidationError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
)
from nutricare.repositories import KeyValueRepository
from nutricare.schemas import PatientForm, PatientRecord, Sex

logger = logging.getLogger(__name__)

_RECORD_LIST = TypeAdapter(List[PatientRecord])

REQUIRED_FIELDS = ("name", "weight", "height", "age", "sex")

FormInput = Union[PatientForm, Mapping[str, Any]]


# =============================================================================
# FORM VALIDATION
# =============================================================================

def _parse_positive_number(field: str, raw: str) -> float:
    text = raw.strip().replace(",", ".")
    try:
        value = float(text)
    except ValueError:
        raise PatientValidationError(field=field, reason="must be a number", value=raw)
    if not math.isfinite(value):
        raise PatientValidationError(field=field, reason="must be a number", value=raw)
    if value <= 0:
        raise PatientValidationError(field=field, reason="must be greater than zero", value=raw)
    return value


def _check_bmi_in_range(weight_kg: float, height_m: float, raw_weight: str, raw_height: str) -> None:
    # Positive floats can still underflow or overflow once squared and divided
    try:
        squared = height_m ** 2
    except OverflowError:
        squared = math.inf
    if squared == 0 or not math.isfinite(squared):
        raise PatientValidationError(field="height", reason="out of range", value=raw_height)
    if not math.isfinite(weight_kg / squared):
        raise PatientValidationError(field="weight", reason="out of range", value=raw_weight)


def _parse_age(raw: str) -> int:
    try:
        age = int(raw.strip())
    except ValueError:
        raise PatientValidationError(field="age", reason="must be a whole number", value=raw)
    if age < 0:
        raise PatientValidationError(field="age", reason="must not be negative", value=raw)
    return age


def coerce_form(form: FormInput) -> PatientForm:
    """
    Turn form input into a PatientForm.

    Raises:
        PatientValidationError: If a field has a type that cannot be read as text.
    """
    if isinstance(form, PatientForm):
        return form
    try:
        return PatientForm.model_validate(dict(form))
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        raise PatientValidationError(field=field, reason=error["msg"]) from e


def validate_form(form: FormInput) -> dict:
    """
    Validate registration form input.

    Checks that the required fields are present, that weight and height parse
    as positive numbers (a decimal comma is accepted), that age is a
    non-negative whole number, that sex is recognised and that the BMI
    computed from weight and height is a finite number.

    Args:
        form: A PatientForm or a mapping of form fields.

    Returns:
        dict: Clean values keyed by PatientRecord field name (without ``id``).

    Raises:
        PatientValidationError: Naming the first missing or invalid field.
    """
    form = coerce_form(form)

    for field in REQUIRED_FIELDS:
        if not getattr(form, field).strip():
            raise PatientValidationError(field=field, reason="required")

    try:
        sex = Sex.parse(form.sex)
    except ValueError:
        raise PatientValidationError(field="sex", reason="must be male or female", value=form.sex)

    weight_kg = _parse_positive_number("weight", form.weight)
    height_m = _parse_positive_number("height", form.height)
    age = _parse_age(form.age)
    _check_bmi_in_range(weight_kg, height_m, form.weight, form.height)

    return {
        "name": form.name.strip(),
        "weight_kg": weight_kg,
        "height_m": height_m,
        "age": age,
        "sex": sex,
        "phone": form.phone.strip(),
        "email": form.email.strip(),
        "address": form.address.strip(),
    }


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _new_patient_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# STORE
# =============================================================================

class PatientStore:
    """
    Owner of the patient collection.

    The collection keeps insertion order. Every mutation is followed by a
    full save of the collection to the durable slot. A failed save leaves the
    in-memory collection as it is; the next successful save reconciles storage.
    """

    def __init__(
        self,
        repository: KeyValueRepository,
        storage_key: Optional[str] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize the patient store.

        Args:
            repository: KeyValueRepository holding the durable slot.
            storage_key: Slot name. Defaults to config PATIENTS_STORAGE_KEY.
            id_factory: Callable producing new patient ids. Defaults to uuid4 hex.
        """
        self._repo = repository
        self._key = storage_key or PATIENTS_STORAGE_KEY
        self._new_id = id_factory or _new_patient_id
        self._records: List[PatientRecord] = []
        self.last_error: Optional[PersistenceError] = None

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def records(self) -> Tuple[PatientRecord, ...]:
        """Snapshot of the collection in insertion order."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PatientRecord]:
        return iter(self.records)

    def get(self, patient_id: str) -> PatientRecord:
        """
        Get a patient by id.

        Raises:
            PatientNotFoundError: If no patient has this id.
        """
        index = self._index_of(patient_id)
        if index is None:
            raise PatientNotFoundError(patient_id=patient_id)
        return self._records[index]

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> List[PatientRecord]:
        """
        Replace the in-memory collection with the stored one.

        An absent slot yields an empty list. An unreadable or corrupt slot also
        yields an empty list; the error is kept in ``last_error`` and logged
        instead of being raised.

        Returns:
            List[PatientRecord]: The loaded patients.
        """
        try:
            raw = self._repo.get(self._key)
            records = [] if raw is None else self._parse(raw)
        except PersistenceReadError as e:
            logger.warning(
                f"Could not load patients, starting empty: {e.detail}",
                extra={"storage_key": self._key, "context": e.context},
            )
            self._records = []
            self.last_error = e
            return []

        self._records = records
        self.last_error = None
        logger.info(f"Loaded {len(records)} patients", extra={"storage_key": self._key})
        return list(records)

    def save(self, records: Optional[Iterable[PatientRecord]] = None) -> None:
        """
        Write the whole collection to the durable slot.

        Args:
            records: If given, becomes the in-memory collection before writing.

        Raises:
            PatientValidationError: If the given records repeat an id or have
                measurements whose BMI is out of range. Nothing changes.
            PersistenceWriteError: If the write fails. The in-memory collection
                is not rolled back.
        """
        if records is not None:
            records = list(records)
            self._check_unique_ids(records)
            for record in records:
                _check_bmi_in_range(record.weight_kg, record.height_m, str(record.weight_kg), str(record.height_m))
            self._records = records

        payload = _RECORD_LIST.dump_json(self._records).decode("utf-8")
        try:
            self._repo.set(self._key, payload)
        except PersistenceWriteError as e:
            logger.warning(
                f"Could not save patients: {e.detail}",
                extra={"storage_key": self._key, "context": e.context},
            )
            self.last_error = e
            raise

        self.last_error = None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, form: FormInput) -> PatientRecord:
        """
        Register a new patient from form input.

        Args:
            form: A PatientForm or a mapping of form fields.

        Returns:
            PatientRecord: The created patient, with derived metrics.

        Raises:
            PatientValidationError: If the form is invalid. Nothing changes.
            PersistenceWriteError: If saving fails. The patient stays in memory.
        """
        record = self._build_record(self._unused_id(), form)
        self._records.append(record)
        logger.info(
            f"Patient added: {record.name} (id={record.id})",
            extra={"patient_id": record.id, "bmi": record.bmi_value},
        )
        self.save()
        return record

    def update(self, patient_id: str, form: FormInput) -> PatientRecord:
        """
        Replace a patient's data, keeping its id and position.

        Raises:
            PatientNotFoundError: If no patient has this id.
            PatientValidationError: If the form is invalid. Nothing changes.
            PersistenceWriteError: If saving fails. The change stays in memory.
        """
        index = self._index_of(patient_id)
        if index is None:
            raise PatientNotFoundError(patient_id=patient_id)

        record = self._build_record(patient_id, form)
        self._records[index] = record
        logger.info(f"Patient updated: {record.name} (id={patient_id})", extra={"patient_id": patient_id})
        self.save()
        return record

    def remove(self, patient_id: str) -> bool:
        """
        Remove a patient and save the collection.

        Removing an unknown id changes nothing but still saves.

        Returns:
            bool: True if a patient was removed.

        Raises:
            PersistenceWriteError: If saving fails.
        """
        index = self._index_of(patient_id)
        if index is not None:
            removed = self._records.pop(index)
            logger.info(f"Patient removed: {removed.name} (id={patient_id})", extra={"patient_id": patient_id})
        else:
            logger.debug(f"Remove ignored, unknown patient id: {patient_id}")
        self.save()
        return index is not None

    @staticmethod
    def edit_initiate(record: PatientRecord) -> PatientForm:
        """
        Project a patient back into form input for editing.

        Does not change the collection.
        """
        return PatientForm(
            name=record.name,
            weight=_format_number(record.weight_kg),
            height=_format_number(record.height_m),
            age=str(record.age),
            sex=record.sex.value,
            phone=record.phone or "",
            email=record.email or "",
            address=record.address or "",
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _build_record(self, patient_id: str, form: FormInput) -> PatientRecord:
        try:
            values = validate_form(form)
        except PatientValidationError as e:
            logger.warning(f"Patient form rejected: {e.detail}", extra={"field": e.field})
            raise
        return PatientRecord(id=patient_id, **values)

    def _parse(self, raw: str) -> List[PatientRecord]:
        try:
            records = _RECORD_LIST.validate_json(raw)
        except ValidationError as e:
            raise PersistenceReadError(
                key=self._key,
                reason=f"{e.error_count()} invalid value(s) in stored patients",
            ) from e

        unique: List[PatientRecord] = []
        seen = set()
        for record in records:
            if record.id in seen:
                logger.warning(f"Dropping stored patient with duplicate id: {record.id}")
                continue
            try:
                _check_bmi_in_range(record.weight_kg, record.height_m, str(record.weight_kg), str(record.height_m))
            except PatientValidationError as e:
                raise PersistenceReadError(key=self._key, reason=f"patient {record.id}: {e.detail}") from e
            seen.add(record.id)
            unique.append(record)
        return unique

    def _index_of(self, patient_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == patient_id:
                return index
        return None

    def _unused_id(self) -> str:
        patient_id = self._new_id()
        while self._index_of(patient_id) is not None:
            patient_id = self._new_id()
        return patient_id

    @staticmethod
    def _check_unique_ids(records: List[PatientRecord]) -> None:
        ids = [record.id for record in records]
        if len(ids) != len(set(ids)):
            raise PatientValidationError(field="id", reason="patient ids must be unique")
