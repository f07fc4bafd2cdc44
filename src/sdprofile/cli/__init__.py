"""Command line interface for sdprofile."""
