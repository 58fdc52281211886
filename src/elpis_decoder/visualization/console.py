"""Console-based visualization using Rich."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from elpis_decoder.output.types import DecodedMessage, DecodedSignal, DecodeResult, Diagnostic
from elpis_decoder.schema.definitions import MessageDefinition
from elpis_decoder.schema.registry import SchemaRegistry


def _format_value(signal: DecodedSignal) -> str:
    if isinstance(signal.value, float):
        value = f"{signal.value:.4g}"
    else:
        value = str(signal.value)
    if signal.unit:
        value += f" {signal.unit}"
    if signal.label:
        value += f" [magenta]{escape(signal.label)}[/magenta]"
    return value


class ConsoleVisualizer:
    """Renders decoded buffers and schemas to the console using Rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def message_tree(self, message: DecodedMessage) -> Tree:
        """Build a display tree for one sub-message."""
        name_style = "bold cyan" if message.is_known else "dim"
        tree = Tree(
            f"[{name_style}]{escape(message.name)}[/{name_style}] "
            f"[dim]id={message.message_id:#x} len={message.payload_length} "
            f"@{message.offset}[/dim]"
        )

        for signal in message.signals:
            tree.add(
                f"{escape(signal.text)} "
                f"[green]{_format_value(signal)}[/green] "
                f"[dim]bytes {signal.byte_offset}+{signal.byte_length}[/dim]"
            )

        for diagnostic in message.diagnostics:
            tree.add(self._diagnostic_text(diagnostic))

        if not message.is_known and message.payload:
            tree.add(f"[dim]payload {message.payload.hex().upper()}[/dim]")

        return tree

    def print_message(self, message: DecodedMessage) -> None:
        self.console.print(self.message_tree(message))

    def print_result(self, result: DecodeResult, title: str = "Buffer") -> None:
        """Print every sub-message of a buffer, then its status."""
        header = result.summary or "no known messages"
        self.console.print(f"[bold]{title}[/bold] {escape(header)}")

        for message in result.messages:
            self.print_message(message)

        if result.error is not None:
            self.console.print(
                f"[bold red]FAILED[/bold red] after {len(result.messages)} "
                f"sub-messages: {escape(str(result.error))}"
            )

    def print_schema_table(self, registry: SchemaRegistry) -> None:
        """Print a table of message definitions."""
        table = Table(title="Message Definitions")

        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Length", justify="right")
        table.add_column("Signals", justify="right")
        table.add_column("Comment", style="dim")

        for message in registry:
            table.add_row(
                f"{message.id:#x}",
                escape(message.name),
                str(message.length),
                str(len(message.signals)),
                escape(message.comment or ""),
            )

        self.console.print(table)

    def print_signal_table(self, message: MessageDefinition) -> None:
        table = Table(title=f"{escape(message.name)} [{message.id:#x}]")

        table.add_column("Signal")
        table.add_column("Start", justify="right")
        table.add_column("Length", justify="right")
        table.add_column("Order")
        table.add_column("Scale", justify="right")
        table.add_column("Offset", justify="right")
        table.add_column("Unit")

        for signal in message.signals:
            table.add_row(
                escape(signal.name),
                str(signal.effective_start),
                str(signal.length),
                "motorola" if signal.is_big_endian else "intel",
                "-" if signal.scale is None else str(signal.scale),
                str(signal.offset),
                escape(signal.unit or ""),
            )

        self.console.print(table)

    def print_summary(self, results: list[DecodeResult]) -> None:
        messages = sum(len(r.messages) for r in results)
        unknown = sum(1 for r in results for m in r.messages if not m.is_known)
        failed = sum(1 for r in results if not r.ok)
        diagnostics = sum(1 for r in results for _ in r.diagnostics())

        panel = Panel(
            f"Buffers: {len(results)}\n"
            f"Sub-messages: {messages}\n"
            f"Unknown ids: {unknown}\n"
            f"Diagnostics: {diagnostics}\n"
            f"Failed buffers: {failed}",
            title="Decode Summary",
        )
        self.console.print(panel)

    @staticmethod
    def _diagnostic_text(diagnostic: Diagnostic) -> str:
        color = {
            "INFO": "blue",
            "WARN": "yellow",
            "ERROR": "red",
        }.get(diagnostic.severity, "white")
        return f"[{color}]{diagnostic.severity}[/{color}] {escape(diagnostic.message)}"
