"""Command-line entry point and release pipeline driver."""
