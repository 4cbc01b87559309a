"""
Connect (buf) service backend.

Connect speaks plain HTTP/1.1 or HTTP/2 with protobuf or JSON bodies and is
wire-compatible with gRPC clients, so the schema is the gRPC one: same
messages, same rpcs. What differs is the package (`@connect(package=...)`,
falling back to `@grpc(package=...)`) and the procedure paths, which are
fixed by the protocol:

    POST /<package>.<Service>/<Method>

They are listed beside each rpc in `<service>.connect.proto` and as a
manifest in `<service>.connect.json` for routers and clients.
"""

import json

from servicegen.api.conventions import snake_case

from ..templating import render_template
from .grpc_generator import build_proto_context, package_name


def procedure_path(package, service, rpc):
    return f"/{package}.{service}/{rpc}"


def build_connect_context(service, settings):
    package = package_name(service, settings, "connect")
    svc = build_proto_context(service, settings, package=package)
    for rpc in svc["rpcs"]:
        rpc["path"] = procedure_path(package, svc["service"], rpc["name"])
    return svc


def _manifest(svc):
    return {
        "package": svc["package"],
        "service": svc["service"],
        "procedures": [
            {
                "name": rpc["name"],
                "path": rpc["path"],
                "request": rpc["request"],
                "response": rpc["response"],
                "streaming": "server" if rpc["streaming"] else "unary",
            }
            for rpc in svc["rpcs"]
        ],
    }


def render_connect(service, settings):
    svc = build_connect_context(service, settings)
    stem = snake_case(service.name)
    return {
        f"{stem}.connect.proto": render_template(
            "idl/service.proto.jinja", svc=svc, heading="Connect service definition",
        ),
        f"{stem}.connect.json": json.dumps(_manifest(svc), indent=2) + "\n",
    }
