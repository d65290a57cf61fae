"""
Core module — orchestration of the AI insight operations.
"""

from core.insights import InsightService

__all__ = [
    "InsightService",
]
