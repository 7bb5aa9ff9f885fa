"""Shared constants, exceptions, logging and helpers."""
