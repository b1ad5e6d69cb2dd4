"""
API module for the REST API implementation.
"""

from .rest_api import CCRMRestAPI

__all__ = [
    "CCRMRestAPI",
]
