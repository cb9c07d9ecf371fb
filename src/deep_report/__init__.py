"""deep-report: outline -> researched chapters -> final report pipelines."""

__version__ = "0.3.0"
