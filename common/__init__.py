"""Shared types, constants, exceptions and logging setup."""
