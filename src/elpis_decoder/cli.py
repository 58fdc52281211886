"""Command-line interface for the ELPIS decoder."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from elpis_decoder import __version__
from elpis_decoder.codec.frame import FrameParser
from elpis_decoder.config import configure_logger, get_schema_path
from elpis_decoder.errors import SchemaError
from elpis_decoder.output.jsonl import JsonlWriter
from elpis_decoder.schema.registry import SchemaRegistry
from elpis_decoder.visualization.console import ConsoleVisualizer


console = Console()

EXIT_SCHEMA_ERROR = 1
EXIT_FRAME_ERROR = 3


def parse_hex(text: str) -> bytes:
    """Parse a hex buffer, allowing a 0x prefix and space or colon separators."""
    s = text.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    s = "".join(s.replace(":", " ").split())
    if len(s) % 2 != 0:
        raise ValueError(f"Hex string must have even length, got {len(s)}")
    return bytes.fromhex(s)


def _load_registry(schema: Optional[str]) -> SchemaRegistry:
    path = get_schema_path(schema)
    try:
        return SchemaRegistry.load(path)
    except SchemaError as e:
        console.print(f"[bold red]Schema error:[/bold red] {e}")
        raise SystemExit(EXIT_SCHEMA_ERROR)


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Log level (defaults to $LOG_LEVEL or INFO)")
def main(log_level: Optional[str]) -> None:
    """ELPIS telemetry decoder."""
    configure_logger(log_level)


@main.command()
@click.argument("payloads", nargs=-1)
@click.option(
    "--file", "-f", "files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Raw binary buffer to decode (repeatable)",
)
@click.option(
    "--hex-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Text file with one hex buffer per line",
)
@click.option("--schema", "-s", default=None, help="Schema JSON file")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write decoded sub-messages as JSONL")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON instead of a tree")
def decode(
    payloads: tuple[str, ...],
    files: tuple[str, ...],
    hex_file: Optional[str],
    schema: Optional[str],
    output: Optional[str],
    as_json: bool,
) -> None:
    """Decode one or more buffers given as hex arguments or files.

    Every buffer is decoded independently.
    """
    buffers: list[bytes] = []
    for payload in payloads:
        try:
            buffers.append(parse_hex(payload))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="PAYLOADS")

    for file in files:
        buffers.append(Path(file).read_bytes())

    if hex_file:
        lines = Path(hex_file).read_text(encoding="utf-8").splitlines()
        for lineno, line in enumerate(lines, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                buffers.append(parse_hex(line))
            except ValueError as e:
                raise click.BadParameter(f"line {lineno}: {e}", param_hint="--hex-file")

    if not buffers:
        raise click.UsageError("No buffers to decode")

    registry = _load_registry(schema)
    parser = FrameParser(registry)
    results = parser.decode_batch(buffers)

    if output:
        writer = JsonlWriter(Path(output))
        writer.write_results(results)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        visualizer = ConsoleVisualizer(console)
        for idx, result in enumerate(results):
            visualizer.print_result(result, title=f"Buffer #{idx}")
        visualizer.print_summary(results)
        if output:
            console.print(f"Saved {writer.count} rows to: {output}")

    if not all(r.ok for r in results):
        raise SystemExit(EXIT_FRAME_ERROR)


@main.command()
@click.option("--schema", "-s", default=None, help="Schema JSON file")
@click.option("--id", "message_id", default=None, help="Show the signals of one message id (e.g. 0x101)")
def schema(schema: Optional[str], message_id: Optional[str]) -> None:
    """Show the message definitions in a schema."""
    registry = _load_registry(schema)
    visualizer = ConsoleVisualizer(console)

    if message_id is None:
        visualizer.print_schema_table(registry)
        return

    try:
        key = int(message_id, 0)
    except ValueError:
        raise click.BadParameter(f"not an integer: {message_id}", param_hint="--id")

    if key not in registry:
        raise click.ClickException(f"No message definition for id {key:#x}")
    visualizer.print_signal_table(registry.lookup(key))


if __name__ == "__main__":
    main()
