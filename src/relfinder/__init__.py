"""
relfinder - GitHub release finder

A terminal drill-down from a GitHub user to one of their repositories,
to a release, to that release's downloadable assets.

Created: 2026-10-19
"""

__version__ = "0.1.0"
