"""CLI helper functions shared by commands."""

from .repo import (
    configured_repos,
    select_repos,
    get_timeout,
)

__all__ = [
    'configured_repos',
    'select_repos',
    'get_timeout',
]
