"""
One-command yield prediction: describe a field, get a forecast.

Usage:
    python scripts/predict.py
    python scripts/predict.py --crop Banane --soil Argileux --humidity 90 \
        --moisture 85 --temperature 30 --rainfall 250 --area 4
    python scripts/predict.py ... --endpoint http://localhost:8000
    python scripts/predict.py ... --json
"""

import argparse
import json
from dataclasses import replace
import sys
import logging
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cropyield.config import GatewayConfig
from cropyield.data.schema import (
    CROP_OPTIONS, SOIL_OPTIONS, ENVIRONMENTAL_FIELDS, FIELD_UNITS,
    lookup_quality_grade, risk_marker,
)
from cropyield.data.validation import check_ranges, validate_input
from cropyield.prediction.client import FunctionClient
from cropyield.prediction.errors import VALIDATION
from cropyield.prediction.service import PredictionService
from cropyield.prediction.state import PredictionController

logging.basicConfig(level=logging.WARNING)


def print_banner():
    print("=" * 60)
    print("   CROP YIELD PREDICTION")
    print("   Describe your field -> Get yield, quality and disease risks")
    print("=" * 60)
    print()


def _choose(prompt: str, options: list) -> str:
    for i, opt in enumerate(options, 1):
        print(f"  {i}. {opt['label']}")
    while True:
        raw = input(f"{prompt} [1-{len(options)}]: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return options[int(raw) - 1]["value"]
        print("  Please enter a number from the list.")


def prompt_for_form() -> dict:
    """Collect the form interactively."""
    form = {}
    print("Crop type:")
    form["cropType"] = _choose("Select crop", CROP_OPTIONS)
    print("Soil type:")
    form["soilType"] = _choose("Select soil", SOIL_OPTIONS)
    for name in ENVIRONMENTAL_FIELDS:
        form[name] = input(f"{name.capitalize()} ({FIELD_UNITS[name]}): ").strip()
    print()
    return form


def print_results(form: dict, state, warnings):
    """Pretty-print the outcome of a prediction."""
    print()
    print("-" * 60)
    print("  FIELD")
    print("-" * 60)
    print(f"  Crop: {form.get('cropType')}   Soil: {form.get('soilType')}")
    for name in ENVIRONMENTAL_FIELDS:
        print(f"  {name:12s} {form.get(name)} {FIELD_UNITS[name]}")
    for w in warnings:
        print(f"  [!] {w}")

    if state.is_failed:
        print()
        print("-" * 60)
        print(f"  PREDICTION FAILED ({state.error.kind})")
        print("-" * 60)
        print(f"  {state.error.message}")
        return

    result = state.result
    grade = lookup_quality_grade(result.quality_grade) or result.quality_grade

    print()
    print("-" * 60)
    print("  PREDICTION")
    print("-" * 60)
    print(f"  Yield:            {result.yield_per_hectare} t/ha")
    print(f"  Total production: {result.total_production} t")
    print(f"  Confidence:       {result.confidence_level}%")
    print(f"  Quality grade:    {grade}")

    if result.disease_risks:
        print()
        print("  Disease risks:")
        for risk in result.disease_risks:
            print(f"    {risk_marker(risk.risk_level)} {risk.name} ({risk.risk_level})"
                  f" impact {risk.yield_impact}")
            print(f"          {risk.conditions}")

    print()
    print("  Key factors:")
    for factor in result.key_factors:
        print(f"    - {factor}")
    print()
    print("  Recommendations:")
    for i, rec in enumerate(result.recommendations, 1):
        print(f"    {i}. {rec}")
    print()
    print("  Analysis:")
    print(f"    {result.analysis}")
    print()


def main():
    parser = argparse.ArgumentParser(description="AI crop yield prediction")
    parser.add_argument("--crop", help="Crop type, e.g. Banane")
    parser.add_argument("--soil", help="Soil type, e.g. Argileux")
    parser.add_argument("--humidity", help="Relative humidity (%%)")
    parser.add_argument("--moisture", help="Soil moisture (%%)")
    parser.add_argument("--temperature", help="Temperature (C)")
    parser.add_argument("--rainfall", help="Rainfall (mm)")
    parser.add_argument("--area", help="Cultivation area (ha)")
    parser.add_argument("--endpoint", default=None,
                        help="Forwarding function base URL (default: call the gateway directly)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Request timeout in seconds (default: none)")
    parser.add_argument("--json", action="store_true", help="Print the raw result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    cli_values = {
        "cropType": args.crop, "soilType": args.soil,
        "humidity": args.humidity, "moisture": args.moisture,
        "temperature": args.temperature, "rainfall": args.rainfall,
        "area": args.area,
    }
    if all(v is None for v in cli_values.values()):
        print_banner()
        form = prompt_for_form()
    else:
        form = cli_values

    if args.endpoint:
        predictor = FunctionClient(args.endpoint, timeout=args.timeout)
    else:
        config = GatewayConfig.from_env()
        if args.timeout is not None:
            config = replace(config, timeout=args.timeout)
        predictor = PredictionService(config)

    controller = PredictionController(predictor)
    if not args.json:
        controller.subscribe(
            lambda s: print("  Generating prediction...") if s.is_in_flight else None
        )
    state = controller.submit(form)

    warnings = []
    if not state.is_failed or state.error.kind != VALIDATION:
        warnings = check_ranges(validate_input(form))

    if args.json:
        if state.is_failed:
            print(json.dumps({"error": state.error.to_dict()}, indent=2, ensure_ascii=False))
        else:
            print(json.dumps(state.result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_results(form, state, warnings)

    return 1 if state.is_failed else 0


if __name__ == "__main__":
    sys.exit(main())
