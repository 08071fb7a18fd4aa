#!/usr/bin/env python3
"""
DiagramForge CLI - Main Entry Point

Usage:
    diagramforge spring model.json                 # writes demo_generated.zip
    diagramforge spring model.json -o shop.zip
    diagramforge spring model.json --unpacked out/ # project tree, no zip
    diagramforge postman model.json -o shop.postman_collection.json

The model file holds the diagram model as saved by the editor, either bare
({"nodes": [...], "edges": [...]}) or wrapped as {"model": {...}}.
"""

import argparse
import json
import shutil
import sys
from pathlib import Path
from typing import Any, List, Optional

# Add backend directory to path for imports when running from a checkout
BACKEND_DIR = Path(__file__).resolve().parent.parent / "backend"
if BACKEND_DIR.is_dir():
    sys.path.insert(0, str(BACKEND_DIR))

from rich.console import Console
from rich.table import Table

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_MODEL = 2


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="diagramforge",
        description="DiagramForge - generate a Spring Boot project or Postman collection from a class diagram",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  diagramforge spring shop.json                       Generate demo_generated.zip
  diagramforge spring shop.json -o shop.zip           Choose the archive name
  diagramforge spring shop.json --unpacked ./shop     Also keep the project tree
  diagramforge spring shop.json --conflict-policy fail
  diagramforge postman shop.json --base-url http://localhost:9090
""",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    spring = subparsers.add_parser("spring", help="Generate a Spring Boot project archive")
    spring.add_argument("model", type=Path, help="Diagram model JSON file")
    spring.add_argument("-o", "--output", type=Path, default=None,
                        help="Archive path (default: ARCHIVE_FILENAME setting)")
    spring.add_argument("--unpacked", type=Path, default=None, metavar="DIR",
                        help="Also copy the generated project tree into DIR")
    spring.add_argument("--template-dir", type=Path, default=None,
                        help="Maven scaffold directory (default: packaged template)")
    spring.add_argument("--conflict-policy", choices=["last_wins", "fail"], default=None,
                        help="How to handle a class claimed by two parents or two wholes")

    postman = subparsers.add_parser("postman", help="Generate a Postman collection")
    postman.add_argument("model", type=Path, help="Diagram model JSON file")
    postman.add_argument("-o", "--output", type=Path, default=None,
                         help="Collection path (default: print to stdout)")
    postman.add_argument("--base-url", default=None, help="Value of the {{baseUrl}} variable")
    postman.add_argument("--name", default=None, help="Collection name")

    return parser


def load_model_file(path: Path) -> Any:
    from app.services.spring_generator.loader import unwrap_model_payload

    with open(path, "r", encoding="utf-8") as f:
        return unwrap_model_payload(json.load(f))


def print_validation_errors(console: Console, errors: List[dict]) -> None:
    table = Table(title="Invalid diagram model", show_lines=False)
    table.add_column("Location", style="cyan")
    table.add_column("Problem", style="red")
    for err in errors:
        table.add_row(str(err.get("loc", "")), str(err.get("message", "")))
    console.print(table)


def run_spring(args: argparse.Namespace, console: Console) -> int:
    from app.core.config import settings
    from app.services.spring_generator import ScratchWorkspace, SpringGeneratorService

    raw = load_model_file(args.model)
    generator = SpringGeneratorService(
        template_dir=args.template_dir,
        conflict_policy=args.conflict_policy,
    )

    destination = args.output or Path(settings.ARCHIVE_FILENAME)
    with ScratchWorkspace.allocate(settings.SCRATCH_ROOT, settings.SCRATCH_PREFIX) as workspace:
        result = generator.generate_archive(raw, workspace)
        shutil.copyfile(result.archive.path, destination)
        if args.unpacked:
            shutil.copytree(workspace.project_dir, args.unpacked, dirs_exist_ok=True)

    summary = Table(show_header=False, box=None)
    summary.add_row("Classes", str(result.class_count))
    summary.add_row("Source files", str(len(result.artifacts)))
    summary.add_row("Composite ids", str(result.composite_identity_count))
    summary.add_row("Dropped edges", str(result.dropped_edges))
    summary.add_row("Files in project", str(len(result.files)))
    console.print(summary)
    for warning in result.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")
    console.print(f"\n[green]✓ Wrote {destination}[/green]")
    if args.unpacked:
        console.print(f"[green]✓ Copied project tree to {args.unpacked}[/green]")
    return EXIT_OK


def run_postman(args: argparse.Namespace, console: Console) -> int:
    from app.services.postman_generator import PostmanGeneratorService

    raw = load_model_file(args.model)
    generator = PostmanGeneratorService(base_url=args.base_url, collection_name=args.name)
    document = json.dumps(generator.generate_collection(raw), indent=2)

    if args.output:
        args.output.write_text(document + "\n", encoding="utf-8")
        console.print(f"[green]✓ Wrote {args.output}[/green]")
    else:
        print(document)
    return EXIT_OK


COMMANDS = {
    "spring": run_spring,
    "postman": run_postman,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    from app.core.exceptions import DiagramForgeError, DiagramValidationError

    try:
        return COMMANDS[args.command](args, console)
    except DiagramValidationError as e:
        print_validation_errors(console, e.errors)
        return EXIT_INVALID_MODEL
    except DiagramForgeError as e:
        console.print(f"[red]✗ {e.code}: {e.message}[/red]")
        return EXIT_FAILURE
    except FileNotFoundError as e:
        console.print(f"[red]✗ File not found: {e.filename}[/red]")
        return EXIT_FAILURE
    except json.JSONDecodeError as e:
        console.print(f"[red]✗ {args.model} is not valid JSON: {e}[/red]")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
