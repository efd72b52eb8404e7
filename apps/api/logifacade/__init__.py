"""Unified access facade over the ground, air and sea cargo systems."""

__version__ = "1.0.0"
