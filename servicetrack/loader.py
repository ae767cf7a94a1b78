"""YAML loading and schema validation for cycle tables and record files."""

from pathlib import Path
from typing import List, Union

import yaml
from jsonschema import ValidationError, validate

from .cycle import CycleTable

SCHEMA_DIR = Path(__file__).parent / "schemas"


def load_schema(name: str) -> dict:
    """Load a JSON schema ('cycles' or 'records') from the schemas directory."""
    with open(SCHEMA_DIR / f"{name}.yaml") as f:
        return yaml.safe_load(f)


def validate_file(filepath: Union[str, Path], schema: dict) -> List[str]:
    """Validate a single YAML file against a schema. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def load_cycle_table(filename: Union[str, Path]) -> CycleTable:
    """
    Load a cycle table from a YAML file.

    Expected shape::

        cycles:
          exterior-paint: {early: 8, standard: 10, late: 12}
          other: {early: 8, standard: 10, late: 12}

    Raises jsonschema.ValidationError for a malformed file and ValueError
    for thresholds out of order.
    """
    with open(filename, "rb") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)
    validate(instance=data, schema=load_schema("cycles"))
    return CycleTable(data["cycles"])
