"""
Core — Shared Constants

Audit action codes and pagination defaults used across apps.

@file core/constants.py
"""

AUDIT_ACTION_CREATE = 'CREATE'
AUDIT_ACTION_UPDATE = 'UPDATE'
AUDIT_ACTION_SOFT_DELETE = 'SOFT_DELETE'

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
