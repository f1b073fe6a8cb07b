from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role claims issued by the identity service."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class TaskFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class FormState(str, Enum):
    """Edit-window states of a daily form."""

    EDITABLE = "EDITABLE"
    SUBMITTED_PENDING_REVIEW = "SUBMITTED_PENDING_REVIEW"
    LOCKED = "LOCKED"
    CONFIRMED = "CONFIRMED"


class SourceMode(str, Enum):
    """Which forms a leaderboard request wants to rank."""

    APPROVED = "approved"
    SUBMITTED = "submitted"
    AUTO = "auto"


class SourceTier(str, Enum):
    """Which data source actually produced a leaderboard."""

    APPROVED = "approved"
    SUBMITTED = "submitted"
    HISTORICAL = "historical"
    NONE = "none"
