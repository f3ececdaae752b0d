"""
app/validators package marker.
"""

from app.validators.timestamps import ensure_utc, parse_timestamp

__all__ = ["ensure_utc", "parse_timestamp"]
