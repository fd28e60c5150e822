"""
Pydantic request/response schemas for the yield prediction function.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, Field


class PredictionRequest(BaseModel):
    """
    Input schema for /predict-yield.

    Every field is optional at this layer so that incomplete forms reach the
    input validator, which reports the first missing field by name.
    """
    cropType: Optional[str] = Field(None, description="Crop, e.g. 'Banane'")
    soilType: Optional[str] = Field(None, description="Soil, e.g. 'Argileux'")
    humidity: Optional[Union[float, str]] = Field(None, description="Relative humidity (%)")
    moisture: Optional[Union[float, str]] = Field(None, description="Soil moisture (%)")
    temperature: Optional[Union[float, str]] = Field(None, description="Temperature (°C)")
    rainfall: Optional[Union[float, str]] = Field(None, description="Rainfall (mm)")
    area: Optional[Union[float, str]] = Field(None, description="Cultivation area (ha)")

    model_config = {"json_schema_extra": {
        "examples": [{
            "cropType": "Banane", "soilType": "Argileux",
            "humidity": 90, "moisture": 85, "temperature": 30,
            "rainfall": 250, "area": 4,
        }]
    }}


class DiseaseRiskModel(BaseModel):
    name: str
    riskLevel: str
    conditions: str
    yieldImpact: str


class PredictionResponse(BaseModel):
    """Output schema for /predict-yield (the normalized model reply)."""
    yieldPerHectare: float
    totalProduction: float
    confidenceLevel: float
    qualityGrade: str
    diseaseRisks: List[DiseaseRiskModel] = []
    keyFactors: List[str]
    recommendations: List[str]
    analysis: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    credential_configured: bool
    model: str
    version: str


class OptionModel(BaseModel):
    value: str
    label: str


class OptionsResponse(BaseModel):
    """Form options for crop and soil selectors."""
    crops: List[OptionModel]
    soils: List[OptionModel]
    quality_grades: List[str]
    risk_levels: List[str]
