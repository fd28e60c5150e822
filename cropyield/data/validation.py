"""
Input validation for the prediction form.

validate_input() is the gate in front of the network: a candidate that
fails here never produces a gateway call. Checks run in a fixed order and
stop at the first failure:

    1. cropType, then soilType, must be non-empty strings
    2. humidity, moisture, temperature, rainfall, area must each be present
       and parse as a finite number

check_ranges() is advisory only. It reports values outside the typical
agronomic ranges but never blocks a request.
"""

import math
import logging
from typing import Any, List, Mapping, Union

from cropyield.data.schema import (
    CATEGORICAL_FIELDS, ENVIRONMENTAL_FIELDS, WIRE_TO_ATTR,
    TYPICAL_RANGES, FIELD_UNITS,
)
from cropyield.prediction.errors import ValidationError
from cropyield.prediction.types import PredictionInput

logger = logging.getLogger(__name__)

_MISSING = object()


def _lookup(candidate: Mapping[str, Any], wire_name: str) -> Any:
    """Fetch a field by its wire name, falling back to the snake_case name."""
    if wire_name in candidate:
        return candidate[wire_name]
    return candidate.get(WIRE_TO_ATTR[wire_name], _MISSING)


def _is_blank(value: Any) -> bool:
    if value is _MISSING or value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _parse_number(name: str, value: Any) -> float:
    """Parse a form value into a finite float or raise ValidationError."""
    # bool is an int subclass; a checkbox value is not a measurement
    if isinstance(value, bool):
        raise ValidationError(
            f"{name} must be a number, got {value!r}",
            field=name, field_class="environmental",
        )
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            raise ValidationError(
                f"{name} must be a finite number, got an integer too large to represent",
                field=name, field_class="environmental",
            )
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(
                f"{name} must be a number, got {value!r}",
                field=name, field_class="environmental",
            )
    else:
        raise ValidationError(
            f"{name} must be a number, got {type(value).__name__}",
            field=name, field_class="environmental",
        )

    if not math.isfinite(number):
        raise ValidationError(
            f"{name} must be a finite number, got {value!r}",
            field=name, field_class="environmental",
        )
    return number


def validate_input(candidate: Union[Mapping[str, Any], PredictionInput]) -> PredictionInput:
    """
    Validate a submitted form into a PredictionInput.

    Args:
        candidate: Mapping keyed by wire names (cropType, soilType, ...) or
            snake_case attribute names, or an existing PredictionInput
            (re-checked, not trusted).

    Returns:
        PredictionInput with numeric fields as floats and categorical
        fields stripped of surrounding whitespace.

    Raises:
        ValidationError naming the first offending field.
    """
    if isinstance(candidate, PredictionInput):
        candidate = candidate.to_dict()
    if not isinstance(candidate, Mapping):
        raise ValidationError(
            "Prediction input must be an object", field=None, field_class=None
        )

    for name in CATEGORICAL_FIELDS:
        value = _lookup(candidate, name)
        if _is_blank(value) or not isinstance(value, str):
            raise ValidationError(
                f"Please select crop type and soil type ({name} is missing)",
                field=name, field_class="categorical",
            )

    numbers = {}
    for name in ENVIRONMENTAL_FIELDS:
        value = _lookup(candidate, name)
        if _is_blank(value):
            raise ValidationError(
                f"Please fill in all environmental factors ({name} is missing)",
                field=name, field_class="environmental",
            )
        numbers[name] = _parse_number(name, value)

    return PredictionInput(
        crop_type=_lookup(candidate, "cropType").strip(),
        soil_type=_lookup(candidate, "soilType").strip(),
        humidity=numbers["humidity"],
        moisture=numbers["moisture"],
        temperature=numbers["temperature"],
        rainfall=numbers["rainfall"],
        area=numbers["area"],
    )


def check_ranges(prediction_input: PredictionInput) -> List[str]:
    """Return advisory warnings for values outside their typical range."""
    warnings = []
    for name, (lo, hi, lo_inclusive) in TYPICAL_RANGES.items():
        value = getattr(prediction_input, WIRE_TO_ATTR[name])
        unit = FIELD_UNITS.get(name, "")
        if lo is not None:
            below = value < lo if lo_inclusive else value <= lo
            if below:
                bound = f">= {lo:g}" if lo_inclusive else f"> {lo:g}"
                warnings.append(f"{name}={value:g}{unit} is outside the typical range ({bound})")
                continue
        if hi is not None and value > hi:
            warnings.append(f"{name}={value:g}{unit} is outside the typical range (<= {hi:g})")
    return warnings
