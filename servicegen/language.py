"""
Metamodel and model builders for the servicegen description language.

This module provides the main entry points for parsing `.svc` files.
Turning the parsed model into ServiceDescriptors is the job of
servicegen.api.pipeline; only model-wide name checks run here.
"""

import inspect
import os
import re
from os.path import join, dirname, abspath
from pathlib import Path
from textx import (
    metamodel_from_file,
    get_children_of_type,
    get_location,
    TextXSemanticError,
)

from servicegen.api.gen_logging import get_logger

logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# Constants
THIS_DIR = dirname(abspath(__file__))
GRAMMAR_DIR = join(THIS_DIR, "grammar")
MODEL_SUFFIX = ".svc"


# ------------------------------------------------------------------------------
# Public model builders

def build_model(model_path: str):
    """Parse & validate a model from a file path, resolving imports by inlining."""
    expanded_content = _expand_imports(model_path)
    return ServiceDSLMetaModel.model_from_str(
        expanded_content, file_name=str(Path(model_path).resolve())
    )


def build_model_str(model_str: str):
    """Parse & validate a model from a string."""
    return ServiceDSLMetaModel.model_from_str(model_str)


# ------------------------------------------------------------------------------
# Model element getters

def get_model_services(model):
    return get_children_of_type("Service", model)


def get_model_records(model):
    return get_children_of_type("Record", model)


# ------------------------------------------------------------------------------
# Model-wide validation (runs after all objects are constructed)

def verify_unique_names(model):
    """Ensure services and records have unique names within the model."""
    def ensure_unique(objs, kind):
        seen = set()
        for o in objs:
            if o.name in seen:
                raise TextXSemanticError(
                    f"{kind} with name '{o.name}' already exists.",
                    **get_location(o),
                )
            seen.add(o.name)

    ensure_unique(get_model_services(model), "Service")
    ensure_unique(get_model_records(model), "Record")


def model_processor(model, metamodel=None):
    """
    Main model processor - runs after parsing.

    Signature-level checks live in the extraction pipeline so that every
    problem of a service block can be reported at once.
    """
    verify_unique_names(model)


# ------------------------------------------------------------------------------
# Object processors

def _clean_docstring(text):
    """Strip the triple quotes and common indentation from a docstring."""
    if not text:
        return None
    body = text[3:-3] if text.startswith('"""') else text
    cleaned = inspect.cleandoc(body)
    return cleaned or None


def get_obj_processors():
    return {
        "Docstring": _clean_docstring,
    }


# ------------------------------------------------------------------------------
# Imports

def _expand_imports(model_path: str, visited=None) -> str:
    """
    Recursively expand import statements by inlining the content of imported files.
    Returns the fully expanded file content with all imports resolved.
    """
    if visited is None:
        visited = set()

    model_file = Path(model_path).resolve()

    # Prevent circular imports
    if model_file in visited:
        return ""
    visited.add(model_file)

    if not model_file.exists():
        raise FileNotFoundError(f"File not found: {model_file}")

    content = model_file.read_text(encoding="utf-8")
    base_dir = model_file.parent

    import_pattern = r'^\s*import\s+([a-zA-Z_][a-zA-Z0-9_.]*)\s*$'

    def replace_import(match):
        imp_uri = match.group(1)
        # "records" -> "records.svc", "shop.records" -> "shop/records.svc"
        rel_path = imp_uri.replace(".", os.sep) + MODEL_SUFFIX
        import_path = (base_dir / rel_path).resolve()

        if not import_path.exists():
            raise FileNotFoundError(f"Import not found: {import_path}")

        logger.debug(f"[IMPORT] Inlining {import_path.name}")

        imported_content = _expand_imports(str(import_path), visited)

        return f"# ========== Imported from {import_path.name} ==========\n{imported_content}\n# ========== End of {import_path.name} ==========\n"

    return re.sub(import_pattern, replace_import, content, flags=re.MULTILINE)


# ------------------------------------------------------------------------------
# Metamodel creation

def get_metamodel(debug: bool = False, global_repo: bool = False):
    """
    Load the textX metamodel from grammar/service.tx.
    Registers object processors and the model processor.
    """
    mm = metamodel_from_file(
        join(GRAMMAR_DIR, "service.tx"),
        auto_init_attributes=True,
        autokwd=True,
        textx_tools_support=True,
        global_repository=global_repo,
        debug=debug,
    )

    mm.register_obj_processors(get_obj_processors())
    mm.register_model_processor(model_processor)

    return mm


# Create the global metamodel instance
ServiceDSLMetaModel = get_metamodel(debug=False)
