# =============================================================================
# core/models/schema.py - Discovery and Publish Schemas
# =============================================================================
# These models define the values exchanged by the two plugin operations:
#
#   Discover: DiscoverySettings -> list[Schema]
#   Publish:  Schema            -> stream of Record
#
# They mirror the messages in app/plugin.proto but use Python naming and
# types. The servicer (app/servicer.py) converts between the two.
#
# Schemas are frozen: once Discover returns one, nothing in the engine
# changes it. The host passes it back unchanged to Publish.
# =============================================================================

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class PropertyType(str, Enum):
    """
    Data type of a schema property (one CSV column).

    UNKNOWN means inference was not attempted or saw no values. Publish
    treats it like STRING but without any validation.
    """
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"

    @classmethod
    def from_wire(cls, value: str | None) -> "PropertyType":
        """
        Parse a type string received from the host.

        Empty or unrecognised values map to UNKNOWN rather than failing,
        since the host may send back a schema with types left unset.
        """
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    def to_wire(self) -> str:
        """Type string for the wire; UNKNOWN is sent as unset (empty)."""
        return "" if self is PropertyType.UNKNOWN else self.value


# =============================================================================
# Request Settings
# =============================================================================

class DiscoverySettings(BaseModel):
    """
    Settings supplied by the host for a Discover (and Publish) request.

    Example:
        {"fileGlob": "/src/data/*/*.csv"}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_glob: str = Field(
        default="",
        alias="fileGlob",
        description="Glob pattern used to find CSV files (absolute path)"
    )


# =============================================================================
# Schema Models
# =============================================================================

class Property(BaseModel):
    """One column of a discovered schema."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Column name from the CSV header")
    type: PropertyType = Field(
        default=PropertyType.UNKNOWN,
        description="Inferred data type of the column"
    )


class Schema(BaseModel):
    """
    A distinct record shape found among the CSV files.

    All member files share exactly these column names in this order.
    `settings` is engine-private state (the encoded member file list) that
    the host treats as an opaque blob.

    Example:
        {
            "name": "customers",
            "settings": "{\"version\":1,\"files\":[\"/data/customers_1.csv\"]}",
            "properties": [
                {"name": "id", "type": "integer"},
                {"name": "name", "type": "string"}
            ]
        }
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique schema name within a response")
    settings: str = Field(
        default="",
        description="Opaque locator state used by Publish to find the files"
    )
    properties: tuple[Property, ...] = Field(
        default=(),
        description="Columns in CSV order"
    )

    @property
    def property_names(self) -> list[str]:
        """Column names in order."""
        return [prop.name for prop in self.properties]


# =============================================================================
# Publish Models
# =============================================================================

class Record(BaseModel):
    """
    A single published row.

    Invalid rows are still published: `invalid` is set, `error` explains
    which properties failed and with what raw value, and the failing
    positions in `data` are None (JSON null).
    """

    model_config = ConfigDict(frozen=True)

    invalid: bool = Field(default=False, description="Row violates the schema")
    error: str = Field(default="", description="Why the row is invalid")
    data: tuple[Any, ...] = Field(
        default=(),
        description="One value per schema property, in property order"
    )

    def data_json(self) -> str:
        """
        Serialize `data` the way the host expects it.

        Compact JSON array with non-ASCII text kept as is.

        Example:
            Record(data=(17, "Alabama", True)).data_json()
            # '[17,"Alabama",true]'
        """
        return json.dumps(list(self.data), separators=(",", ":"), ensure_ascii=False)


# =============================================================================
# Internal Discovery Models
# =============================================================================

class CandidateFile(BaseModel):
    """A matched file and its parsed header, used only while clustering."""

    model_config = ConfigDict(frozen=True)

    path: str
    header: tuple[str, ...]
