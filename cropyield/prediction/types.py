"""
Immutable records passed along the prediction pipeline.

PredictionInput and PredictionResult use snake_case attributes in Python
and camelCase names on the wire; ``to_dict`` produces the wire shape.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class PredictionInput:
    """Validated field conditions for one prediction."""
    crop_type: str
    soil_type: str
    humidity: float
    moisture: float
    temperature: float
    rainfall: float
    area: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cropType": self.crop_type,
            "soilType": self.soil_type,
            "humidity": self.humidity,
            "moisture": self.moisture,
            "temperature": self.temperature,
            "rainfall": self.rainfall,
            "area": self.area,
        }


@dataclass(frozen=True)
class DiseaseRisk:
    name: str
    risk_level: str
    conditions: str
    yield_impact: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "riskLevel": self.risk_level,
            "conditions": self.conditions,
            "yieldImpact": self.yield_impact,
        }


@dataclass(frozen=True)
class PredictionResult:
    """
    Structured model output for one request.

    Values are kept exactly as the model returned them: total_production is
    not re-derived from yield_per_hectare x area and label casing is not
    canonicalized.
    """
    yield_per_hectare: float
    total_production: float
    confidence_level: float
    quality_grade: str
    key_factors: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    analysis: str
    disease_risks: Tuple[DiseaseRisk, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "yieldPerHectare": self.yield_per_hectare,
            "totalProduction": self.total_production,
            "confidenceLevel": self.confidence_level,
            "qualityGrade": self.quality_grade,
            "diseaseRisks": [r.to_dict() for r in self.disease_risks],
            "keyFactors": list(self.key_factors),
            "recommendations": list(self.recommendations),
            "analysis": self.analysis,
        }


@dataclass(frozen=True)
class PromptPair:
    """Rendered system and user prompts for one request."""
    system: str
    user: str
