"""
CLI backend.

Produces a click command group with one subcommand per exposed method
(kebab-cased method name) and the same structure as a JSON grammar tree:

    svc create-user --name Ada --email ada@example.com
    svc get-user 42

PathIdentifier parameters become positional arguments; everything else is an
option named after the kebab-cased wire name. Structured values (lists,
mappings, records) are passed as JSON text.
"""

import json

from servicegen.api.conventions import kebab_case, snake_case
from servicegen.api.extractors.type_mapper import FLOATS, INTEGERS, canonical_scalar
from servicegen.lib.descriptors import Role

from ..dispatch_generator import build_dispatch_context
from ..templating import render_template

CLICK_TYPES = {"str": "str", "int": "int", "float": "float", "bool": "bool", "json": "str"}


def value_kind(param) -> str:
    scalar = canonical_scalar(param.value_type)
    if scalar in ("str", "bytes"):
        return "str"
    if scalar == "bool":
        return "bool"
    if scalar in INTEGERS:
        return "int"
    if scalar in FLOATS:
        return "float"
    return "json"


def _argument(param):
    kind = value_kind(param)
    return {
        "name": param.name,
        "wire_name": param.wire_name,
        "kind": kind,
        "click_type": CLICK_TYPES[kind],
        "type": str(param.value_type),
    }


def _option(param):
    kind = value_kind(param)
    flag = kebab_case(param.wire_name)
    return {
        "name": param.name,
        "wire_name": param.wire_name,
        "flag": f"--{flag}",
        "decl": f"--{flag}/--no-{flag}" if kind == "bool" else f"--{flag}",
        "kind": kind,
        "click_type": CLICK_TYPES[kind],
        "type": str(param.value_type),
        "required": param.is_required,
        "default": param.default_value,
    }


def build_command_tree(service):
    """The CLI grammar tree: group metadata plus one entry per subcommand."""
    commands = []
    for method, op in service.exposed():
        arguments = [_argument(p) for p in method.caller_params if p.role == Role.PATH_IDENTIFIER]
        options = [_option(p) for p in method.caller_params if p.role != Role.PATH_IDENTIFIER]
        commands.append({
            "name": op.cli_command,
            "method": method.name,
            "help": op.summary or "",
            "hidden": not op.in_schema,
            "streaming": method.return_shape.is_streaming,
            "arguments": arguments,
            "options": options,
        })
    return {
        "name": service.option("cli", "name", kebab_case(service.name)),
        "version": service.option("cli", "version", "0.1.0"),
        "about": service.option("cli", "about", service.documentation or ""),
        "commands": commands,
    }


def render_cli(service, settings):
    tree = build_command_tree(service)
    code = render_template(
        "cli/cli_app.py.jinja",
        ctx=build_dispatch_context(service),
        tree=tree,
    )
    base = snake_case(service.name)
    return {
        f"{base}_cli.py": code,
        f"{base}.cli.json": json.dumps(tree, indent=2) + "\n",
    }
