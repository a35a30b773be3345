"""Mapping between logical context names and physical database names.

Logical names use lowercase letters, digits and hyphens. The physical name
is the namespace prefix followed by the logical name with every hyphen
replaced by an underscore:

    LESSON_NAMESPACE.physical_name("social-network")  # "learn_social_network"
    DEMO_NAMESPACE.physical_name("e-commerce")        # "demo_e_commerce"

The reverse mapping turns underscores back into hyphens, so it is lossy for
a logical name that itself contains an underscore.
"""

from typing import Iterable

LESSON_DB_PREFIX = "learn_"
DEMO_DB_PREFIX = "demo_"


class DatabaseNamespace:
    """A prefix-scoped family of physical database names."""

    def __init__(self, prefix: str):
        if not prefix:
            raise ValueError("Database namespace prefix must not be empty")
        self.prefix = prefix

    def __repr__(self) -> str:
        return f"DatabaseNamespace({self.prefix!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DatabaseNamespace) and other.prefix == self.prefix

    def __hash__(self) -> int:
        return hash(self.prefix)

    def physical_name(self, logical_name: str) -> str:
        """Physical database name for a logical context name."""
        return f"{self.prefix}{logical_name.replace('-', '_')}"

    def is_managed(self, physical_name: str) -> bool:
        """Whether a physical database belongs to this namespace."""
        return physical_name.startswith(self.prefix)

    def logical_name_of(self, physical_name: str) -> str | None:
        """Logical name for a managed database, None for any other name."""
        if not self.is_managed(physical_name):
            return None
        return physical_name[len(self.prefix):].replace("_", "-")

    def filter_managed(self, physical_names: Iterable[str]) -> list[str]:
        """Keep only the databases that belong to this namespace."""
        return [name for name in physical_names if self.is_managed(name)]


LESSON_NAMESPACE = DatabaseNamespace(LESSON_DB_PREFIX)
DEMO_NAMESPACE = DatabaseNamespace(DEMO_DB_PREFIX)


def physical_name(logical_name: str) -> str:
    """Lesson database name for a context, e.g. 'S1' -> 'learn_S1'."""
    return LESSON_NAMESPACE.physical_name(logical_name)


def is_managed_database(name: str) -> bool:
    return LESSON_NAMESPACE.is_managed(name)


def logical_name_of(name: str) -> str | None:
    return LESSON_NAMESPACE.logical_name_of(name)
