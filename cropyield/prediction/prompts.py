"""
Prompt rendering for the yield prediction request.

SYSTEM_PROMPT is a constant so the model sees the same instruction context
on every call. The user prompt is a fixed template filled with the validated
inputs; numbers are rendered without locale formatting so the same input
always yields the same bytes.
"""

from cropyield.prediction.types import PredictionInput, PromptPair


SYSTEM_PROMPT = """You are an expert agricultural AI specialized in crop yield prediction for tropical crops in Guadeloupe.
Based on environmental factors, provide accurate yield predictions with confidence levels, detailed recommendations, and disease risk analysis.

Consider typical yields for Guadeloupe crops:
- Canne à Sucre (Sugar Cane): 60-100 t/ha
- Banane (Banana): 25-40 t/ha
- Ananas (Pineapple): 40-60 t/ha
- Igname (Yam): 12-25 t/ha
- Madère (Taro): 15-30 t/ha
- Christophine (Chayote): 20-35 t/ha

Also analyze disease risks based on environmental conditions:
- High humidity + high rainfall → fungal diseases (Black Sigatoka for bananas, leaf blight, root rot)
- Excess moisture → bacterial diseases, crown rot
- High temperature + low moisture → stress-related diseases, pest infestations
- Poor drainage → Phytophthora, pythium
- Optimal conditions for pests → viral diseases spread by insects

Factor in how identified diseases would impact the predicted yield.

Analyze how the provided environmental factors (soil type, humidity, moisture, temperature, rainfall) affect both yield potential and disease susceptibility."""


USER_PROMPT_TEMPLATE = """Predict the yield for {crop_type} with these conditions:
- Soil Type: {soil_type}
- Humidity: {humidity}%
- Soil Moisture: {moisture}%
- Temperature: {temperature}°C
- Rainfall: {rainfall}mm
- Cultivation Area: {area} hectares

Provide:
1. Predicted yield (in tonnes per hectare) - adjusted for disease impact if applicable
2. Total production (yield × area)
3. Confidence level (0-100%)
4. Quality grade (Excellente/Bonne/Moyenne/Faible)
5. Disease risks - identify potential diseases based on conditions with risk level (Low/Moderate/High/Critical)
6. Disease impact on yield - how identified diseases reduce potential yield
7. Key factors affecting the prediction
8. Specific recommendations to optimize yield and prevent/manage diseases

Format your response as JSON with this structure:
{{
  "yieldPerHectare": number,
  "totalProduction": number,
  "confidenceLevel": number,
  "qualityGrade": string,
  "diseaseRisks": [{{"name": string, "riskLevel": string, "conditions": string, "yieldImpact": string}}],
  "keyFactors": [string],
  "recommendations": [string],
  "analysis": string
}}"""


def format_number(value: float) -> str:
    """
    Render a number the same way on every machine.

    Integral values drop the fractional part (90.0 -> "90"); everything
    else uses the shortest repr that round-trips (28.5 -> "28.5").
    """
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def build_user_prompt(prediction_input: PredictionInput) -> str:
    return USER_PROMPT_TEMPLATE.format(
        crop_type=prediction_input.crop_type,
        soil_type=prediction_input.soil_type,
        humidity=format_number(prediction_input.humidity),
        moisture=format_number(prediction_input.moisture),
        temperature=format_number(prediction_input.temperature),
        rainfall=format_number(prediction_input.rainfall),
        area=format_number(prediction_input.area),
    )


def build_prompts(prediction_input: PredictionInput) -> PromptPair:
    """Render the (system, user) prompt pair for a validated input."""
    return PromptPair(system=SYSTEM_PROMPT, user=build_user_prompt(prediction_input))
