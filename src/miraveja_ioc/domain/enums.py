from enum import Enum


class Scope(str, Enum):
    """Defines the scope of a component instance.

    Attributes:
        SINGLETON: Single instance shared across the entire container.
        TRANSIENT: New instance created on each resolution.
    """

    SINGLETON = "singleton"
    TRANSIENT = "transient"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, tag: str) -> "Scope":
        """Parse a scope tag coming from a descriptor source.

        Accepts ``prototype`` as an alias of ``transient``.
        """
        normalized = tag.strip().lower()
        if normalized == "prototype":
            return cls.TRANSIENT
        return cls(normalized)


class Propagation(str, Enum):
    """Transaction propagation behaviour. Informational only."""

    REQUIRED = "required"
    SUPPORTS = "supports"
    MANDATORY = "mandatory"
    REQUIRES_NEW = "requires_new"
    NOT_SUPPORTED = "not_supported"
    NEVER = "never"
    NESTED = "nested"

    def __str__(self) -> str:
        return self.value


class Isolation(str, Enum):
    """Transaction isolation level.

    Values other than DEFAULT are the names understood by SQLAlchemy's
    ``isolation_level`` execution option.
    """

    DEFAULT = "DEFAULT"
    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"

    def __str__(self) -> str:
        return self.value
