"""Domain enumerations."""

from enum import Enum


class FieldKind(str, Enum):
    """Storage type of a document field, used to coerce query values."""

    ID = "id"
    ID_LIST = "id_list"
    STRING = "string"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
