"""Collaborators injected into the scoring engine."""
