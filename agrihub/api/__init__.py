"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from agrihub.api import app

    uvicorn agrihub.api:app --port 9085
"""

from agrihub.api.app import app
