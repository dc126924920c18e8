"""Classify, guard and log coding-agent tool calls reported through hook events."""

__version__ = "1.0.0b2"