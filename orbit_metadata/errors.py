# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   One exception family for the whole codec. Every error carries
#   the pipeline stage it came from so callers (and the CLI) can
#   report "where" without parsing messages.
#
# ENUMS:
# ------
# - Stage(Enum): FLATTEN, CLASSIFY, SERIALIZE, EMBED, EXTRACT,
#                PARSE, ORGANIZE, STORAGE, CONVERT
#
# CLASSES:
# --------
# - CodecError(Exception)           → base, str() is "[<stage>] <message>"
# - FormatError(CodecError)         → input bytes are not the expected format
# - LedgerDecodeError(CodecError)   → ledger text present but undecodable
# - StorageError(CodecError)        → storage collaborator failed
# - ConversionError(CodecError)     → image could not be converted to JPEG
# - SchemaAmbiguityWarning(UserWarning)
#     Logged when the schema variant of a read packet had to be defaulted.
#
# ==============================================

from enum import Enum
from typing import Optional


class Stage(Enum):
    """Pipeline stage an error was raised from."""
    FLATTEN = "flatten"
    CLASSIFY = "classify"
    SERIALIZE = "serialize"
    EMBED = "embed"
    EXTRACT = "extract"
    PARSE = "parse"
    ORGANIZE = "organize"
    STORAGE = "storage"
    CONVERT = "convert"


class CodecError(Exception):
    """Base error for every codec stage."""

    def __init__(self, message: str, stage: Stage):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage.value}] {self.message}"


class FormatError(CodecError):
    """Input bytes are not in the format the operation requires."""

    def __init__(self, message: str, stage: Stage = Stage.EMBED):
        super().__init__(message, stage)


class LedgerDecodeError(CodecError):
    def __init__(self, message: str):
        super().__init__(message, Stage.PARSE)


class StorageError(CodecError):
    """
    A storage collaborator call failed.

    The underlying exception (if any) is chained as __cause__ by the
    caller using `raise StorageError(...) from exc`.
    """

    def __init__(self, operation: str, path: str, message: Optional[str] = None):
        detail = message or "storage operation failed"
        super().__init__(f"{operation} '{path}': {detail}", Stage.STORAGE)
        self.operation = operation
        self.path = path


class ConversionError(CodecError):
    def __init__(self, message: str):
        super().__init__(message, Stage.CONVERT)


class SchemaAmbiguityWarning(UserWarning):
    """The schema variant of a packet could not be detected and was defaulted."""
