"""ecotrack — personal carbon footprint tracker."""

__version__ = "0.1.0"
