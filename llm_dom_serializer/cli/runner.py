"""CLI runner for serializing DOM snapshots."""

import json
import logging
import sys
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from llm_dom_serializer import __version__
from llm_dom_serializer.core.config import Config, SerializerConfig
from llm_dom_serializer.core.exceptions import DOMSerializerError
from llm_dom_serializer.dom.loader import load_raw_tree_from_file
from llm_dom_serializer.dom.renderer import DOMTextRenderer
from llm_dom_serializer.dom.serializer import DOMTreeSerializer
from llm_dom_serializer.dom.views import SerializationResult

console = Console()


def setup_cli_logging(verbose: bool = False) -> None:
    """Set up logging for CLI."""
    level = "DEBUG" if verbose else "WARNING"

    # Use rich handler for pretty output
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
        )],
        force=True,
    )


def build_config(
    no_paint_order: bool = False,
    no_bbox: bool = False,
    max_elements: Optional[int] = None,
) -> SerializerConfig:
    """Environment configuration with command line overrides applied."""
    config = SerializerConfig.from_env()
    updates: Dict[str, Any] = {}
    if no_paint_order:
        updates["enable_paint_order_filtering"] = False
    if no_bbox:
        updates["enable_bounding_box_filtering"] = False
    if max_elements is not None:
        updates["max_interactive_elements"] = max_elements
    return config.model_copy(update=updates) if updates else config


def result_to_dict(result: SerializationResult) -> Dict[str, Any]:
    """JSON-friendly view of a serialization result."""
    elements = []
    for node in result.state.iter_interactive():
        raw = node.original_node
        elements.append({
            "index": node.interactive_index,
            "node_id": raw.node_id,
            "backend_node_id": raw.backend_node_id,
            "tag": raw.tag,
            "attributes": dict(raw.attributes),
            "is_new": node.is_new,
            "compound_components": [c.to_dict() for c in node.compound_children],
        })
    return {
        "elements": elements,
        "stats": result.stats.model_dump(),
        "timing": result.timing.model_dump(),
    }


def display_results(result: SerializationResult, representation: str) -> None:
    """Display the rendered tree and statistics in a nice format."""
    console.print(Panel(
        Text(representation) if representation else "[dim]No interactive elements[/dim]",
        title="Interactive elements",
        border_style="blue"
    ))

    table = Table(title="Serialization Summary", border_style="blue")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    stats = result.stats
    table.add_row("Total Nodes", str(stats.total_nodes))
    table.add_row("Remaining Nodes", str(stats.simplified_nodes))
    table.add_row("Occluded", str(stats.occluded_nodes))
    table.add_row("Contained", str(stats.contained_nodes))
    table.add_row("Size Filtered", str(stats.size_filtered_nodes))
    table.add_row("Interactive", str(stats.interactive_elements))
    table.add_row("New", str(stats.new_elements))
    table.add_row("Compound Hosts", str(stats.compound_components))
    table.add_row("Duration", f"{result.timing.total * 1000:.1f}ms")

    console.print(table)


@click.group()
@click.version_option(version=__version__)
def cli():
    """DOM Serializer - compact, indexed DOM trees for LLM agents"""
    pass


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--previous", "-p", type=click.Path(exists=True, dir_okay=False),
              help="Earlier snapshot of the same page, for change detection")
@click.option("--no-paint-order", is_flag=True, help="Disable paint order filtering")
@click.option("--no-bbox", is_flag=True, help="Disable bounding box filtering")
@click.option("--max-elements", "-n", type=int, default=None, help="Maximum interactive elements")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def serialize(
    snapshot: str,
    previous: Optional[str],
    no_paint_order: bool,
    no_bbox: bool,
    max_elements: Optional[int],
    as_json: bool,
    verbose: bool,
):
    """Serialize a DOM snapshot file.

    Examples:

        dom-serializer serialize page.json

        dom-serializer serialize page_after.json --previous page_before.json

        dom-serializer serialize page.json --no-bbox --json
    """
    setup_cli_logging(verbose)

    try:
        serializer = DOMTreeSerializer(build_config(no_paint_order, no_bbox, max_elements))

        previous_state = None
        if previous:
            previous_state = serializer.serialize(load_raw_tree_from_file(previous)).state

        result = serializer.serialize(load_raw_tree_from_file(snapshot), previous_state)
    except DOMSerializerError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result_to_dict(result), indent=2))
        return

    display_results(result, DOMTextRenderer().render(result.state))


@cli.command()
def info():
    """Show effective configuration."""
    try:
        config = Config.from_env()
    except DOMSerializerError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title="Configuration", border_style="blue")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in config.serializer.model_dump().items():
        table.add_row(name, str(value))
    for name, value in config.iframe.model_dump().items():
        table.add_row(name, str(value))

    table.add_row("log_level", config.log_level)
    table.add_row("log_file", config.log_file or "-")

    console.print(table)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
