#!/usr/bin/env python3
"""Validate service record files and cycle tables against their schemas."""
import argparse
import sys
from pathlib import Path

from servicetrack.loader import load_schema, validate_file


def main(argv=None):
    """Validate each given YAML file; cycle tables are detected by name."""
    parser = argparse.ArgumentParser(description="Validate service-track YAML files")
    parser.add_argument("files", type=Path, nargs="+", help="YAML files to validate")
    parser.add_argument(
        "--kind",
        choices=["records", "cycles", "auto"],
        default="auto",
        help="Schema to use (default: 'cycles' if the filename contains 'cycle')",
    )
    args = parser.parse_args(argv)

    schemas = {"records": load_schema("records"), "cycles": load_schema("cycles")}

    all_valid = True
    for filepath in args.files:
        kind = args.kind
        if kind == "auto":
            kind = "cycles" if "cycle" in filepath.name.lower() else "records"
        errors = validate_file(filepath, schemas[kind])
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
