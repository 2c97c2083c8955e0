"""
Entry point: scans the fleet live and writes an architecture map.

Writes ``<base>-arch.json`` (the graph) and ``<base>-arch.mmd`` (Mermaid),
where ``<base>`` is ``full`` or derived from ``--module``.

Usage:
    python main.py
    python main.py --module billing --radius 2 --ignore archived,sandbox
    python main.py --root platform/payments --list-clients

For the HTTP API:
    python -m archmap.gateway.app
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from archmap.graph.mermaid import sanitize_file_base
from archmap.scanner.config import ScannerSettings
from archmap.scanner.gitlab import GitLabClient
from archmap.service.architecture import build_architecture
from archmap.service.clients import list_client_packages
from archmap.shared.config import ClassifierConfig
from archmap.shared.exceptions import ArchmapError
from archmap.shared.logging import setup_logging

DEFAULT_IGNORES = "archived,sandbox"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write a service dependency map of the fleet.")
    parser.add_argument("--module", default="", help="Module or service to focus on (full fleet when empty)")
    parser.add_argument("--radius", type=int, default=1, help="Neighborhood radius around --module")
    parser.add_argument("--ignore", default=DEFAULT_IGNORES, help="Comma-separated path substrings to skip")
    parser.add_argument("--ref", default="", help="Git ref to scan (default branch when empty)")
    parser.add_argument(
        "--plain-radius",
        action="store_true",
        help="Use a plain hop radius instead of keeping the neighborhood inside the module's domain",
    )
    parser.add_argument(
        "--root",
        action="append",
        default=[],
        help="Only scan projects under this path prefix (repeatable)",
    )
    parser.add_argument(
        "--list-clients",
        action="store_true",
        help="Print every client package per project instead of writing a map",
    )
    parser.add_argument("--output-dir", default=None, help="Directory for the generated files")
    return parser.parse_args(argv)


def write_outputs(result, output_dir: Path, base: str) -> tuple[Path, Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"{base}-arch.json"
    mmd_path = output_dir / f"{base}-arch.mmd"
    json_path.write_text(json.dumps(result.graph.to_dict(), indent=2) + "\n", encoding="utf-8")
    mmd_path.write_text(result.mermaid, encoding="utf-8")
    return json_path, mmd_path


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = ScannerSettings()
    logger = setup_logging("archmap.cli", level=settings.log_level)

    ignores = [i.strip() for i in args.ignore.split(",") if i.strip()] + list(settings.default_ignores)
    ref = args.ref or settings.ref
    roots = args.root or settings.scan_roots
    classifier = ClassifierConfig.from_settings(settings)

    try:
        async with GitLabClient.from_settings(settings) as gitlab:
            snapshots = await gitlab.scan_fleet(ref=ref, ignores=ignores, roots=roots)
        if args.list_clients:
            for package in list_client_packages(snapshots, classifier.internal_prefix, ignores):
                print(package)
            return 0
        result = build_architecture(
            snapshots,
            module=args.module,
            radius=args.radius,
            ignores=ignores,
            same_domain_only=not args.plain_radius,
            classifier=classifier,
            ref=ref,
        )
    except ArchmapError as e:
        logger.error(str(e))
        return 1

    base = sanitize_file_base(args.module) if args.module.strip() else "full"
    json_path, mmd_path = write_outputs(result, Path(args.output_dir or settings.architecture_dir), base)
    print(f"Wrote {json_path} and {mmd_path} (module={args.module!r}, radius={args.radius})")
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
