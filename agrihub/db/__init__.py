"""Graph store package.

Public re-exports so callers can write::

    from agrihub.db import GraphStore, parse_date
"""

from agrihub.db.connection import GraphStore
from agrihub.db.dates import DATE_UNAVAILABLE, format_date, parse_date

__all__ = ["GraphStore", "parse_date", "format_date", "DATE_UNAVAILABLE"]
