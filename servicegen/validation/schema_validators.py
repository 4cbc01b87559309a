"""
Schema drift checking.

A previously emitted artifact is compared with one regenerated from the
current model. Structured documents (JSON / YAML) are compared as data and
produce (json-path, expected, actual) entries; IDL and source text is
compared line by line and produces unified diff lines.
"""

import difflib
import json
from pathlib import Path

import yaml

from servicegen.errors import SchemaMismatch

MISSING = "<missing>"

STRUCTURED_SUFFIXES = {".json", ".yaml", ".yml"}


def _child(path, key):
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}"


def diff_documents(expected, actual, path="$"):
    """Return a list of (path, expected, actual) differences."""
    if isinstance(expected, dict) and isinstance(actual, dict):
        differences = []
        for key in expected:
            if key not in actual:
                differences.append((_child(path, key), expected[key], MISSING))
            else:
                differences.extend(diff_documents(expected[key], actual[key], _child(path, key)))
        for key in actual:
            if key not in expected:
                differences.append((_child(path, key), MISSING, actual[key]))
        return differences

    if isinstance(expected, list) and isinstance(actual, list):
        differences = []
        for index in range(max(len(expected), len(actual))):
            child = _child(path, index)
            if index >= len(actual):
                differences.append((child, expected[index], MISSING))
            elif index >= len(expected):
                differences.append((child, MISSING, actual[index]))
            else:
                differences.extend(diff_documents(expected[index], actual[index], child))
        return differences

    if expected != actual or type(expected) is not type(actual):
        return [(path, expected, actual)]
    return []


def diff_text(expected: str, actual: str, expected_name="expected", actual_name="generated"):
    """Unified diff lines, ignoring trailing whitespace and blank-line noise."""
    def normalize(text):
        return [line.rstrip() for line in text.strip().splitlines()]

    return list(difflib.unified_diff(
        normalize(expected),
        normalize(actual),
        fromfile=expected_name,
        tofile=actual_name,
        lineterm="",
    ))


def load_document(text: str, suffix: str):
    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def compare_artifact(expected_text: str, actual_text: str, filename: str):
    """Return the differences between two renderings of the same artifact."""
    suffix = Path(filename).suffix.lower()
    if suffix in STRUCTURED_SUFFIXES:
        return diff_documents(load_document(expected_text, suffix), load_document(actual_text, suffix))
    return diff_text(expected_text, actual_text, expected_name=filename)


def format_difference(entry) -> str:
    if isinstance(entry, tuple):
        path, expected, actual = entry
        return f"{path}: expected {expected!r}, got {actual!r}"
    return entry


def verify_schema(expected_text: str, actual_text: str, filename: str, target: str):
    """Raise SchemaMismatch when the regenerated artifact drifted."""
    differences = compare_artifact(expected_text, actual_text, filename)
    if differences:
        shown = [format_difference(d) for d in differences[:20]]
        if len(differences) > 20:
            shown.append(f"... and {len(differences) - 20} more")
        raise SchemaMismatch(
            f"The '{target}' artifact '{filename}' no longer matches the service model "
            f"({len(differences)} difference(s)).",
            hints=shown,
            differences=differences,
        )
