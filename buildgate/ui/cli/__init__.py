"""CLI command groups and console rendering."""
