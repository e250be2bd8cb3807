"""Live-plot sampling and power-card monitoring for a serial acquisition board."""

__version__ = "0.1.0"