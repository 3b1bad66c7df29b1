"""
Services package for HOS Compliance.

Contains business logic separated from views for clean architecture.
"""

from .hos_service import HOSService, calculate_hos_status
from .log_service import HOSLogService

__all__ = ['HOSService', 'HOSLogService', 'calculate_hos_status']
