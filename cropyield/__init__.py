"""
AI crop yield prediction for tropical field conditions.

Sub-packages:
    data        — Crop/soil catalogue, label sets, input validation
    prediction  — Prompt building, gateway client, reply normalization,
                  error taxonomy and the request state machine
    api         — FastAPI forwarding function in front of the gateway
"""

__version__ = "1.0.0"
