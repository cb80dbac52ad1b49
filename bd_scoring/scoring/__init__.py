"""Scoring module for the BD scoring engine.

Implements the complete evaluation pipeline:
  six pillars (concurrent) → weighting → confidence
  → recommendation / risk level → cached ScoringResult
"""
