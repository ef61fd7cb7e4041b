"""
Services layer for business logic.

Each service is a class of static methods taking a SQLAlchemy session, kept
separate from the API routes so the moderation workflow can be driven from
scripts and tests without HTTP.
"""

from .moderation_service import ModerationService
from .report_aggregator import ReportAggregator
from .report_service import ReportService
from .sanction_service import SanctionService

__all__ = [
    "ModerationService",
    "ReportAggregator",
    "ReportService",
    "SanctionService",
]
