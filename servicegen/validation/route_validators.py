"""
Duplicate-operation detection.

HTTP-shaped operations are grouped by (verb, normalized path), where every
`{slot}` is replaced by `{*}` so that `/users/{id}` and `/users/{user_id}`
collide. Each group with more than one method yields exactly one
DuplicateRouteConflict naming all of them.
"""

from servicegen.errors import DuplicateRouteConflict


def normalize_path(path: str) -> str:
    return "/".join(
        "{*}" if segment.startswith("{") and segment.endswith("}") else segment
        for segment in path.split("/")
    )


def route_key(op):
    return op.verb.upper(), normalize_path(op.path)


def verify_unique_routes(methods, operations):
    groups = {}
    for method, op in zip(methods, operations):
        if op.is_suppressed:
            continue
        groups.setdefault(route_key(op), []).append((method, op))

    errors = []
    for (verb, _), members in groups.items():
        if len(members) < 2:
            continue
        names = [m.name for m, _ in members]
        listing = ", ".join(f"'{n}'" for n in names)
        errors.append(DuplicateRouteConflict(
            f"Methods {listing} all resolve to {verb} {members[0][1].path}.",
            members[1][0].location,
            hints=[
                f"{m.name}: {op.verb} {op.path} (at {m.location})" for m, op in members
            ] + ["Rename a method or give it a distinct @route(path=...)."],
            methods=names,
        ))
    return errors
