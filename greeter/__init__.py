"""
Greeter - Visitor Weather Greeting Service

A small HTTP service that looks up where a visitor is browsing from,
fetches the current weather there, and greets them by name.
"""

__version__ = "0.1.0"
__author__ = "Greeter Team"
