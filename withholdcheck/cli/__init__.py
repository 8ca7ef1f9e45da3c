"""Withhold Check command-line interface."""
