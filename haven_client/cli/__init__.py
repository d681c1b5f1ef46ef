"""Command line interface for the Harmony Haven client."""
