"""Interactive command line for the package store."""
