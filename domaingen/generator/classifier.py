"""Classification of declared field types."""

from enum import StrEnum, auto

# Substring marking a universally unique identifier type (matched lowercased)
IDENTIFIER_MARKER = "uuid"

# Unsigned 64-bit integers double as epoch timestamps
TIMESTAMP_TYPE = "uint64"

INTEGER_TYPES = frozenset(
    [
        "int8",
        "int16",
        "int32",
        "int64",
        "int128",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uint128",
    ]
)


class TypeClass(StrEnum):
    """Semantic class of a field type."""

    IDENTIFIER = auto()
    INTEGER = auto()
    TIMESTAMP = auto()  # Refines INTEGER
    OTHER = auto()

    @property
    def is_integer(self) -> bool:
        return self in (TypeClass.INTEGER, TypeClass.TIMESTAMP)


def classify(type_name: str) -> TypeClass:
    """Classify a type by its name.

    Only the name is inspected: aliases are not resolved, so a field
    declared as ``UserId`` is ``OTHER`` even if ``UserId`` aliases a uuid.
    """
    if IDENTIFIER_MARKER in type_name.lower():
        return TypeClass.IDENTIFIER
    if type_name == TIMESTAMP_TYPE:
        return TypeClass.TIMESTAMP
    if type_name in INTEGER_TYPES:
        return TypeClass.INTEGER
    return TypeClass.OTHER
