from enum import Enum


class ApiStatus(str, Enum):
    """Standard result statuses"""
    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"
