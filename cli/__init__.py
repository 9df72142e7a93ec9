"""Command-line interface for committing through the forge API."""
