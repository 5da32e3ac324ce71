"""
FastAPI integration module.

Provides helpers for exposing container components and units of work to FastAPI endpoints.
"""

from .integration import create_fastapi_dependency, create_transaction_dependency

__all__ = [
    "create_fastapi_dependency",
    "create_transaction_dependency",
]
