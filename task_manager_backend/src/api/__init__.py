"""
Personal task manager backend.

Categories and tasks live in an in-memory repository; the grouped view is
derived by src.api.projector and cloud sync availability is tracked by
src.api.sync_status. The FastAPI app is exposed here for convenience
imports (src.api.app).
"""

from .main import app  # noqa: F401
