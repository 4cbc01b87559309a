"""Shared jinja2 environment for template-based backends."""

import json
import pprint
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"


def _pyrepr(value, indent=0):
    """Render a value as a Python literal, re-indented for nesting."""
    text = pprint.pformat(value, width=100, sort_dicts=False)
    if indent:
        text = text.replace("\n", "\n" + " " * indent)
    return text


def _json(value, indent=None):
    return json.dumps(value, indent=indent)


def _pystr(value):
    """A string literal safe to embed in generated Python."""
    return repr(value if value is not None else "")


@lru_cache(maxsize=None)
def get_environment(templates_dir: str = str(TEMPLATES_DIR)) -> Environment:
    env = Environment(
        loader=FileSystemLoader(templates_dir),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["pyrepr"] = _pyrepr
    env.filters["json"] = _json
    env.filters["pystr"] = _pystr
    return env


def render_template(name: str, **context) -> str:
    return get_environment().get_template(name).render(**context)
