"""relpack - release packaging with lifecycle plugins."""

__version__ = "0.3.0"
