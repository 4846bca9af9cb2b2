"""Import chemicals and their recipes from a CSV export into an inventory service."""

__version__ = "0.1.0"