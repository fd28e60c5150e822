"""
Inspect and edit persisted application settings.

Usage:
    python scripts/settings.py show
    python scripts/settings.py set darkMode true
    python scripts/settings.py set-nested notifications email false
    python scripts/settings.py reset
    python scripts/settings.py --storage /tmp/storage.json show
"""

import argparse
import json
import sys
import logging
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cropyield.settings import JsonFileStorage, SettingsStore

logging.basicConfig(level=logging.WARNING)


def parse_value(raw: str):
    """Interpret a CLI value as JSON when possible (true, 3, {...}), else a string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def main():
    parser = argparse.ArgumentParser(description="Manage application settings")
    parser.add_argument("--storage", default=None, help="Path to the storage JSON file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print current settings")

    p_set = sub.add_parser("set", help="Set a top-level setting")
    p_set.add_argument("key")
    p_set.add_argument("value")

    p_nested = sub.add_parser("set-nested", help="Set a key inside an existing section")
    p_nested.add_argument("section")
    p_nested.add_argument("key")
    p_nested.add_argument("value")

    sub.add_parser("reset", help="Restore defaults")

    args = parser.parse_args()

    store = SettingsStore(JsonFileStorage(args.storage) if args.storage else None)
    settings = store.load()

    if args.command == "set":
        settings = settings.set(args.key, parse_value(args.value))
        store.save(settings)
    elif args.command == "set-nested":
        updated = settings.set_nested(args.section, args.key, parse_value(args.value))
        if updated is settings:
            print(f"[!] Section '{args.section}' does not exist; nothing changed")
            return 1
        settings = updated
        store.save(settings)
    elif args.command == "reset":
        settings = store.reset()

    print(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
