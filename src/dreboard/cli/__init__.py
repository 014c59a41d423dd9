"""Command line interface for dreboard."""
