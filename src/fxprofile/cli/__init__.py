"""Command-line interface for fxprofile."""
