"""
Portal Request Engine

Request workflow core for the intranet helpdesk portal:
- Role-gated status / priority changers
- Manager-only category, type and assignment changers
- Workload-ranked assignee candidates
- Fail-closed permission gate over the platform policy function
"""

__version__ = "0.1.0"
