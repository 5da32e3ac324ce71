from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


class DataSourceSettings(BaseSettings):
    """Connection settings for the data source, read from ``MIRAVEJA_DB_*`` environment variables.

    Attributes:
        url: SQLAlchemy database URL.
        echo: Log every SQL statement through the ``sqlalchemy.engine`` logger.
        pool_pre_ping: Test pooled connections before handing them out.
    """

    model_config = SettingsConfigDict(env_prefix="MIRAVEJA_DB_", env_file=".env", extra="ignore")

    url: str = Field(default="sqlite://", description="SQLAlchemy database URL.")
    echo: bool = Field(default=False, description="Echo SQL statements.")
    pool_pre_ping: bool = Field(default=True, description="Check connections before use.")


def create_data_source(settings: Optional[DataSourceSettings] = None) -> Engine:
    """Create the SQLAlchemy engine used as data source.

    Args:
        settings: Connection settings; read from the environment when omitted.

    Returns:
        A configured engine.

    Example:
        >>> container.register(
        ...     "dataSource",
        ...     ComponentDescriptor(
        ...         component_type=Engine,
        ...         factory=lambda: create_data_source(DataSourceSettings(url="sqlite:///app.db")),
        ...     ),
        ... )
    """
    settings = settings or DataSourceSettings()
    return create_engine(settings.url, echo=settings.echo, pool_pre_ping=settings.pool_pre_ping)
