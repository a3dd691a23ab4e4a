from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class Category(str, Enum):
    TYPE = "type"
    CHAINING = "chaining"
    PARAMETER = "parameter"
    BINDING_MODE = "binding_mode"
    LIFETIME = "lifetime"
    CLOSING_BRACE = "closing_brace"


class ByteRange(BaseModel):
    """Half-open ``[start, end)`` interval over the UTF-8 bytes of a source text."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @model_validator(mode="after")
    def _check_bounds(self) -> "ByteRange":
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid byte range [{self.start}, {self.end})")
        return self

    @classmethod
    def at(cls, offset: int) -> "ByteRange":
        return cls(start=offset, end=offset)


class Hint(BaseModel):
    model_config = ConfigDict(frozen=True)

    range: ByteRange
    label: str
    category: Category
