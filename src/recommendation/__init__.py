"""Viewing tracking and recommendations for the IPTV catalog."""

from recommendation.engine import RecommendationEngine
from recommendation.tracker import ViewingTracker

__all__ = [
    "RecommendationEngine",
    "ViewingTracker",
]
