"""Command-line interface for protoboot code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from protoboot.generator import extensions, loader, naming, python, slots
from protoboot.generator.types import DescriptorSet, FileUnit

logger = logging.getLogger(__name__)


def _load(input_file: str) -> DescriptorSet:
    with open(input_file, encoding="utf-8") as f:
        text = f.read()

    try:
        return loader.load(text)
    except loader.ValidationError as e:
        print(f"Invalid descriptor set: {e}")
        sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.group()
def cli() -> None:
    """protoboot code generator."""


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input descriptor set (JSON)")
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option(
    "--file", "-f", "file_names", multiple=True, help="Only generate these files (default: all)"
)
@click.option(
    "--runtime-import",
    "runtime_import",
    default="protoboot.proto",
    help="Import path for the descriptor runtime",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log progress")
def gen(
    input_file: str,
    output_path: str,
    file_names: tuple[str, ...],
    runtime_import: str,
    verbose: bool,
) -> None:
    """Generate one Python module per file of a descriptor set."""
    _configure_logging(verbose)
    descriptor_set = _load(input_file)

    selected = list(file_names) or [f.name for f in descriptor_set.files]
    for name in selected:
        unit = descriptor_set.find(name)
        if unit is None:
            print(f"Unknown file: {name}")
            sys.exit(1)

        generated_file = python.render(unit, descriptor_set, runtime_import=runtime_import)

        target = Path(output_path) / naming.output_path(unit)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated_file, encoding="utf-8")
        logger.info("Wrote %s", target)


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="protoboot_runtime", help="Runtime package name")
def runtime(output_path: str, name: str) -> None:
    """Write the descriptor runtime as a standalone package."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


def _file_info(unit: FileUnit, descriptor_set: DescriptorSet) -> dict:
    lite = unit.options.lite_runtime
    return {
        "module": naming.module_path(unit),
        "mode": "lite" if lite else "full",
        "slots": len(slots.declare_slots(unit, lite=lite)),
        "extensions": [name for _, name in extensions.collect_transitive(unit, descriptor_set)],
        "bootstrap_order": extensions.bootstrap_order(unit, descriptor_set),
    }


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input descriptor set (JSON)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the modules, slots and bootstrap order of a descriptor set."""
    descriptor_set = _load(input_file)
    data = {unit.name: _file_info(unit, descriptor_set) for unit in descriptor_set.files}

    if output_json:
        print(json.dumps(data, indent=2))
    else:
        _output_plain(data)


def _output_plain(data: dict[str, dict]) -> None:
    """Output descriptor set info using rich text formatting."""
    console = Console()

    console.print("[bold cyan]Files[/bold cyan]")
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("File", style="white")
    table.add_column("Module", style="green")
    table.add_column("Mode", style="dim")
    table.add_column("Slots", style="yellow", justify="right")
    table.add_column("Extensions", style="yellow", justify="right")

    for name, file_info in data.items():
        table.add_row(
            name,
            file_info["module"],
            file_info["mode"],
            str(file_info["slots"]),
            str(len(file_info["extensions"])),
        )

    console.print(table)
    console.print()

    console.print("[bold cyan]Bootstrap order[/bold cyan]")
    order_table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
    order_table.add_column("File", style="dim")
    order_table.add_column("Order", style="white")

    for name, file_info in data.items():
        order_table.add_row(name, " -> ".join(file_info["bootstrap_order"]))

    console.print(order_table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
