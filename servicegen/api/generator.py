"""
Main entry point for servicegen code generation.

    model  = build_model("users.svc")
    files  = generate(model, ["http", "openapi", "grpc"], out_dir=Path("generated"))

Each service block is extracted into a ServiceDescriptor, checked against
the streaming capabilities of every requested backend, rendered in memory,
and finally written out in one pass.
"""

from pathlib import Path

from servicegen.config import get_settings
from servicegen.errors import (
    GenerationFailed,
    StreamingUnsupportedByBackend,
    UnknownBackend,
    raise_if_errors,
)
from servicegen.validation import verify_schema

from .gen_logging import get_logger
from .generators import BACKENDS
from .generators.http.serve_generator import serve_protocols
from .pipeline import extract_services

logger = get_logger(__name__)


def resolve_targets(targets, settings=None):
    """Expand `all`, fall back to the configured defaults and reject unknown names."""
    settings = settings or get_settings()
    targets = list(targets or settings.DEFAULT_TARGETS)
    if "all" in targets:
        return list(BACKENDS)

    unknown = [t for t in targets if t not in BACKENDS]
    if unknown:
        raise GenerationFailed("targets", [
            UnknownBackend(
                f"Unknown backend '{name}'.",
                hints=[f"Available backends: {', '.join(BACKENDS)}"],
            )
            for name in unknown
        ])

    # Preserve request order, drop repeats
    return list(dict.fromkeys(targets))


def _checked_targets(service, targets):
    """Targets as the streaming check sees them: `serve` stands for the protocols it mounts."""
    for target in targets:
        if target == "serve":
            yield from serve_protocols(service)
        else:
            yield target


def check_streaming(service, targets):
    """One StreamingUnsupportedByBackend per (backend, exposed streaming method)."""
    errors = []
    for target in dict.fromkeys(_checked_targets(service, targets)):
        backend = BACKENDS[target]
        if backend.supports_streaming:
            continue
        for method, _ in service.exposed():
            if method.return_shape.is_streaming:
                errors.append(StreamingUnsupportedByBackend(
                    f"Method '{method.name}' returns a lazy sequence, which the "
                    f"'{target}' backend cannot express.",
                    method.location,
                    hints=[
                        "Streaming backends: "
                        + ", ".join(n for n, b in BACKENDS.items() if b.supports_streaming),
                        "Or hide it from this backend with @route(visibility=\"suppressed\").",
                    ],
                ))
    return errors


def render_service_files(service, targets, settings=None):
    """Render every requested backend for one service; returns {filename: content}."""
    settings = settings or get_settings()
    raise_if_errors(service.name, check_streaming(service, targets))

    files = {}
    for target in targets:
        logger.debug(f"[BACKEND] {target} for '{service.name}'")
        for filename, content in BACKENDS[target].render(service, settings).items():
            files[filename] = content
    return files


def export_files(files, out_dir: Path):
    """Write rendered files below `out_dir`; returns the written paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, content in files.items():
        target = out_dir / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"[GENERATED] {target}")
        written.append(target)
    return written


def generate(model, targets=None, out_dir=None, settings=None):
    """
    Generate every requested backend for every service block of a parsed model.

    Rendering completes for all blocks before anything is written, so a
    failing block leaves the output directory untouched.
    """
    settings = settings or get_settings()
    targets = resolve_targets(targets, settings)
    out_dir = Path(out_dir or settings.OUTPUT_DIR)

    logger.info(f"[GENERATE] targets: {', '.join(targets)}")
    files = {}
    for service in extract_services(model, settings):
        files.update(render_service_files(service, targets, settings))

    return export_files(files, out_dir)


def check_schema(service, target, against_path, settings=None):
    """
    Regenerate `target` for `service` and compare it to a previously emitted file.

    Raises SchemaMismatch when they differ, UnknownBackend (wrapped in
    GenerationFailed) when the target is not a backend, and FileNotFoundError
    when the rendered output contains no file of that name.
    """
    settings = settings or get_settings()
    resolve_targets([target], settings)
    against_path = Path(against_path)

    rendered = render_service_files(service, [target], settings)
    name = against_path.name
    if name not in rendered:
        # Fall back to the single artifact with the same suffix
        candidates = [f for f in rendered if Path(f).suffix == against_path.suffix]
        if len(candidates) != 1:
            raise FileNotFoundError(
                f"Backend '{target}' emits no file named '{name}' "
                f"(emits: {', '.join(rendered)})"
            )
        name = candidates[0]

    with open(against_path, "r", encoding="utf-8") as f:
        expected = f.read()
    verify_schema(expected, rendered[name], against_path.name, target)
    logger.info(f"[CHECKED] {against_path} matches '{target}' output")
