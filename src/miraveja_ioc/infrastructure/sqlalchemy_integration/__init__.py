"""
SQLAlchemy integration module.

Provides the data-source backed transaction manager and its connection settings.
"""

from .settings import DataSourceSettings, create_data_source
from .transaction_manager import DataSourceTransactionManager

__all__ = [
    "DataSourceSettings",
    "DataSourceTransactionManager",
    "create_data_source",
]
