# =============================================================================
# lib/schema_settings.py - Opaque Schema Settings Codec
# =============================================================================
# Discover and Publish arrive as separate calls, possibly in separate plugin
# processes. The only state that travels between them is the `settings`
# string of each Schema, which the host stores and sends back untouched.
#
# This module owns that string. It is a small versioned JSON document:
#
#   {"version":1,"files":["/data/a.csv","/data/b.csv"]}
#
# Decoding validates the document with pydantic, so anything the engine did
# not produce is rejected with SchemaSettingsError instead of being guessed at.
# =============================================================================

import logging

from pydantic import BaseModel, Field, ValidationError, field_validator

from lib.utils import EngineError

logger = logging.getLogger(__name__)

SETTINGS_VERSION = 1


class SchemaSettingsError(EngineError):
    """Raised when a schema's settings string cannot be decoded."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid schema settings: {reason}",
            code="INVALID_SCHEMA_SETTINGS",
            suggestion="Pass back the schema exactly as Discover returned it, or run Discover again",
            details={"reason": reason},
        )
        self.reason = reason


class SchemaLocator(BaseModel):
    """Decoded form of Schema.settings: which files back the schema."""

    version: int = Field(default=SETTINGS_VERSION)
    files: list[str] = Field(..., min_length=1)

    @field_validator("version")
    @classmethod
    def check_version(cls, value: int) -> int:
        if value != SETTINGS_VERSION:
            raise ValueError(f"unsupported settings version {value}")
        return value

    @field_validator("files")
    @classmethod
    def check_files(cls, value: list[str]) -> list[str]:
        if any(not path for path in value):
            raise ValueError("file paths must not be empty")
        return value


def encode_settings(files: list[str]) -> str:
    """
    Encode a schema's member file list into its opaque settings string.

    The order of `files` is kept; it is the order Publish will stream them.
    """
    return SchemaLocator(files=list(files)).model_dump_json()


def decode_settings(settings: str) -> list[str]:
    """
    Recover the member file list from a schema's settings string.

    Args:
        settings: The string previously produced by encode_settings()

    Returns:
        File paths in their original order

    Raises:
        SchemaSettingsError: If the string is empty, not JSON, or not a
            document this engine produced
    """
    if not settings or not settings.strip():
        raise SchemaSettingsError("settings are empty")

    try:
        locator = SchemaLocator.model_validate_json(settings)
    except ValidationError as e:
        logger.debug(f"Rejected schema settings {settings!r}: {e}")
        first = e.errors()[0]
        raise SchemaSettingsError(first.get("msg", str(e))) from e

    return locator.files
