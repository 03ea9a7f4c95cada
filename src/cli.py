"""Command-line interface for minibundle."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from artifacts.write import build_bundle, render_manifest, write_artifacts
from contract.errors import BundleError
from settings.config import ConfigError
from verify.verify import verify_determinism


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "entry",
        nargs="?",
        default=None,
        help="Entry module (default: entry from minibundle.toml)",
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Project root holding minibundle.toml (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="minibundle")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-v for info, -vv for debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build a bundle")
    _add_common_args(build_parser)
    build_parser.add_argument(
        "--out",
        default=None,
        help="Bundle output file (default: config output, else stdout)",
    )
    build_parser.add_argument(
        "--manifest",
        default=None,
        help="Graph manifest output file (default: config manifest)",
    )

    graph_parser = subparsers.add_parser(
        "graph", help="Print the dependency graph as JSONL"
    )
    _add_common_args(graph_parser)

    verify_parser = subparsers.add_parser(
        "verify", help="Verify that a bundle is reproducible"
    )
    _add_common_args(verify_parser)
    verify_parser.add_argument(
        "--bundle",
        required=True,
        help="Existing bundle file to compare against a fresh build",
    )

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_entry_arg(entry: str | None) -> str | None:
    if entry is None:
        return None
    return str(Path(entry).expanduser().resolve())


def _resolve_output_arg(path: str | None) -> Path | None:
    if path is None:
        return None
    return Path(path).expanduser().resolve()


def _handle_build(
    root: Path, entry: str | None, out: str | None, manifest: str | None
) -> int:
    result = write_artifacts(
        root=root,
        entry=_resolve_entry_arg(entry),
        out_path=_resolve_output_arg(out),
        manifest_path=_resolve_output_arg(manifest),
    )
    if result.bundle_path is None:
        sys.stdout.write(result.source)
    return 0


def _handle_graph(root: Path, entry: str | None) -> int:
    result = build_bundle(root=root, entry=_resolve_entry_arg(entry))
    sys.stdout.write(render_manifest(result.graph, root))
    return 0


def _handle_verify(root: Path, entry: str | None, bundle: str) -> int:
    bundle_path = Path(bundle).expanduser().resolve()
    try:
        result = verify_determinism(
            root=root,
            bundle_path=bundle_path,
            entry=_resolve_entry_arg(entry),
        )
    except (FileNotFoundError, IsADirectoryError) as exc:
        sys.stderr.write(f"bundle: {bundle_path}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        sys.stderr.write(f"mismatch: {result.bundle_path}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    root = Path(args.root).expanduser().resolve()

    try:
        if args.command == "build":
            return _handle_build(root, args.entry, args.out, args.manifest)

        if args.command == "graph":
            return _handle_graph(root, args.entry)

        if args.command == "verify":
            return _handle_verify(root, args.entry, args.bundle)
    except (BundleError, ConfigError) as error:
        sys.stderr.write(f"{error.location()}: {error.message}\n")
        return 1

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
