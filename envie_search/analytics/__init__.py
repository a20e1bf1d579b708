"""
Search analytics.

Responsibilities:
- Keep an in-memory log of envie searches and result clicks.
- Aggregate them per period for the admin dashboard.
"""
