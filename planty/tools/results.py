from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNSUPPORTED = "unsupported"
    STORAGE = "storage"


@dataclass(frozen=True)
class ToolOk:
    text: str


@dataclass(frozen=True)
class ToolError:
    kind: ErrorKind
    message: str


# a tool either ran and produced text, or ran and reported a problem
ToolResult = ToolOk | ToolError
