"""
repodep - Dependency satisfiability checker for RPM repositories

Reads a repository's rpm-md metadata and tells, for each requested package,
whether its transitive requirements can be met by the repository without
conflicts or obsoletions among the selected providers.
"""

__version__ = "0.1.0"
__author__ = "repodep contributors"
