"""Scoring, analytics, history, ranking and practice text for typing tests."""
