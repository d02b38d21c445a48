"""Relay Outline document events to a Zulip stream."""

__version__ = "0.1.0"
