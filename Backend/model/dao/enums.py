from enum import StrEnum


class FieldType(StrEnum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SWITCH = "switch"
    SELECT = "select"


class AuthenticationMode(StrEnum):
    WINDOWS = "windows"
    SQL = "sql"


class FormErrorKind(StrEnum):
    INVALID_FORMAT = "InvalidFormat"
    EMPTY_NAME = "EmptyName"
    NO_FIELDS = "NoFields"
    LOCKED_FIELD = "LockedField"
    MISSING_PRIMARY_KEY = "MissingPrimaryKey"
    UNSUPPORTED_DISPLAY_FIELD = "UnsupportedDisplayField"
