"""privateplot — publish local markdown files to a PrivatePlot blog."""

__version__ = "0.1.0"
