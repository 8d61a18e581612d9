"""Custom components package."""
