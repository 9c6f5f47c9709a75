"""Command-line interface for airtable-cms."""
