"""
FRAQTIV Intake API Routers
FastAPI router modules for the intake backend.
"""
from backend.api import intake

__all__ = [
    "intake",
]
