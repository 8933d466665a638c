"""Check pipeline

Modules:
- github: lists a repository through the GitHub contents API.
- browser: shared Chromium lifecycle + per-file DOM checks (h1, image alts, overflow).
- validator: W3C Nu checker client.
- runner: per-file pipeline and summary aggregation.
"""
__all__ = ['RepoCheckRunner']

from codecheck.audit.runner import RepoCheckRunner
