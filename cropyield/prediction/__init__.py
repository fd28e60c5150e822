"""
Prediction request/response pipeline.

Modules:
    types       — Immutable input, result and prompt records
    errors      — Error taxonomy and classification
    prompts     — Deterministic system/user prompt rendering
    gateway     — Single-shot client for the model completion endpoint
    normalizer  — Extract a PredictionResult from the model's free-form reply
    service     — Validate -> prompt -> gateway -> normalize
    client      — Client for the forwarding function's HTTP envelope
    state       — Idle/InFlight/Succeeded/Failed request state machine
"""
