"""Scoring and decision services."""
