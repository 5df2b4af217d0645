"""
Shared utilities for Clinic Scheduling API.
"""

from .security import (
    check_rate_limit,
    get_client_ip,
    get_current_organization,
)
from .validators import (
    validate_date_string,
    validate_datetime_string,
    validate_docname,
    validate_duration,
    validate_status,
)

__all__ = [
    # Security
    "check_rate_limit",
    "get_client_ip",
    "get_current_organization",
    # Validators
    "validate_date_string",
    "validate_datetime_string",
    "validate_docname",
    "validate_duration",
    "validate_status",
]
