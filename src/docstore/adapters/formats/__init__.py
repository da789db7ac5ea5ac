from .handlers import (
    CsvFormat,
    GenericFormat,
    JsonFormat,
    NdjsonFormat,
    TextFormat,
    default_loaders,
    default_savers,
)

__all__ = [
    "CsvFormat",
    "GenericFormat",
    "JsonFormat",
    "NdjsonFormat",
    "TextFormat",
    "default_loaders",
    "default_savers",
]
