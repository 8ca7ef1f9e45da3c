"""Withhold Check - cross-checked paycheck withholding estimates."""

__version__ = "0.3.0"
