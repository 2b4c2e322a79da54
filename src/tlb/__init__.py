"""Timelapse Builder - encode numbered frame sequences into a single video."""

__version__ = "0.3.0"
