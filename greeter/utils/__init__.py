"""Shared utilities for Greeter."""
