"""
FastAPI dependencies for form routes.
"""

from __future__ import annotations

from .insights import InsightGenerator, sample_insights


def get_insight_generator() -> InsightGenerator:
    return sample_insights
