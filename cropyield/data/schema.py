"""
Canonical field definitions, label sets and lookup helpers for the
yield prediction form.
"""

from typing import Dict, List, Optional, Tuple


# ---------- Form options ----------
CROP_OPTIONS: List[Dict[str, str]] = [
    {"value": "Canne à Sucre", "label": "Canne à Sucre (Sugar Cane)"},
    {"value": "Banane", "label": "Banane (Banana)"},
    {"value": "Ananas", "label": "Ananas (Pineapple)"},
    {"value": "Igname", "label": "Igname (Yam)"},
    {"value": "Madère", "label": "Madère (Taro)"},
    {"value": "Christophine", "label": "Christophine (Chayote)"},
]

SOIL_OPTIONS: List[Dict[str, str]] = [
    {"value": "Argileux", "label": "Argileux (Clay)"},
    {"value": "Limoneux", "label": "Limoneux (Loamy)"},
    {"value": "Sableux", "label": "Sableux (Sandy)"},
    {"value": "Volcanique", "label": "Volcanique (Volcanic)"},
    {"value": "Humifère", "label": "Humifère (Humus-rich)"},
]


# ---------- Wire field names ----------
CATEGORICAL_FIELDS = ["cropType", "soilType"]
ENVIRONMENTAL_FIELDS = ["humidity", "moisture", "temperature", "rainfall", "area"]

# Wire name -> PredictionInput attribute
WIRE_TO_ATTR = {
    "cropType": "crop_type",
    "soilType": "soil_type",
    "humidity": "humidity",
    "moisture": "moisture",
    "temperature": "temperature",
    "rainfall": "rainfall",
    "area": "area",
}

FIELD_UNITS = {
    "humidity": "%",
    "moisture": "%",
    "temperature": "°C",
    "rainfall": "mm",
    "area": "ha",
}


# ---------- Typical ranges (advisory only, never enforced) ----------
# (low, high, low_inclusive); None means unbounded
TYPICAL_RANGES: Dict[str, Tuple[Optional[float], Optional[float], bool]] = {
    "humidity":    (0.0, 100.0, True),
    "moisture":    (0.0, 100.0, True),
    "temperature": (0.0, 50.0, True),
    "rainfall":    (0.0, None, True),
    "area":        (0.0, None, False),
}


# ---------- Result label sets ----------
QUALITY_GRADES: List[str] = ["Excellente", "Bonne", "Moyenne", "Faible"]
RISK_LEVELS: List[str] = ["Low", "Moderate", "High", "Critical"]

_GRADE_LOOKUP = {g.lower(): g for g in QUALITY_GRADES}
_RISK_LOOKUP = {r.lower(): r for r in RISK_LEVELS}

# Display markers used by the CLI
RISK_MARKERS = {
    "Critical": "[!!!]",
    "High": "[!! ]",
    "Moderate": "[!  ]",
    "Low": "[   ]",
}


def lookup_quality_grade(grade: str) -> Optional[str]:
    """Case-insensitive match against the grade set; None if unknown."""
    if not isinstance(grade, str):
        return None
    return _GRADE_LOOKUP.get(grade.strip().lower())


def lookup_risk_level(level: str) -> Optional[str]:
    """Case-insensitive match against the risk-level set; None if unknown."""
    if not isinstance(level, str):
        return None
    return _RISK_LOOKUP.get(level.strip().lower())


def risk_marker(level: str) -> str:
    canonical = lookup_risk_level(level)
    return RISK_MARKERS.get(canonical, "[ ? ]")
