"""BD scoring engine.

Scores biotech companies for partnership and acquisition investability
across six pillars:
  Asset Quality → Market Outlook → Capital Intensity → Strategic Fit
  → Financial Readiness → Regulatory Risk
combined into a weighted 1.0–5.0 score with confidence, recommendation
and risk level.
"""

__version__ = "1.0.0"
