"""
EcoAI — AI energy attribution and carbon accounting.

Engines (attribution, carbon, analytics, alerts, simulation) work on a
SQLAlchemy Session supplied by the caller; ecoai.api exposes them over HTTP.
"""

__version__ = "0.1.0"
