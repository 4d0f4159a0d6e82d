"""Prometheus exporter for the Collins asset inventory."""

__version__ = "0.3.0"
