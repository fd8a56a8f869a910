"""Validate farm documents against the JSON schema."""

import json
from pathlib import Path
from typing import List, Union

import yaml
from jsonschema import ValidationError, validate

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def validate_document(document: dict, schema: dict) -> List[str]:
    """Validate an already-loaded farm document. Returns list of errors."""
    errors = []
    try:
        validate(instance=document, schema=schema)
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    return errors


def validate_farm_file(filepath: Union[str, Path], schema: dict) -> List[str]:
    """Validate a single farm YAML file. Returns list of errors."""
    try:
        with open(filepath) as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]
    if document is None:
        return ["Error: empty document"]
    return validate_document(normalize_document(document), schema)


def normalize_document(document: dict) -> dict:
    """
    Turn YAML-native values (dates, timestamps) into the plain JSON types
    the schema expects.
    """
    return json.loads(json.dumps(document, default=str))
