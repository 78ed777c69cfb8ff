"""CLI command modules."""

from .check import cmd_check
from .query import cmd_whatprovides
from .repos import cmd_repos

__all__ = [
    'cmd_check',
    'cmd_whatprovides',
    'cmd_repos',
]
