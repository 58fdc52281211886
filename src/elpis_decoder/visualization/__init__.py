"""Visualization components."""

from elpis_decoder.visualization.console import ConsoleVisualizer

__all__ = ["ConsoleVisualizer"]
