"""CLI commands for uploadctl."""
