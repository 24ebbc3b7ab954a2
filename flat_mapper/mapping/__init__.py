"""Mapping layer - named fields bound to target attributes."""

from __future__ import annotations

from flat_mapper.mapping.formats import get_format, register_format
from flat_mapper.mapping.mapping import Mapping
from flat_mapper.mapping.multiparam import extract_multiparams
from flat_mapper.mapping.reader import BasicReader, CallableReader, FormattedReader, MethodReader
from flat_mapper.mapping.writer import BasicWriter, CallableWriter, MethodWriter

__all__ = [
    "Mapping",
    "BasicReader",
    "MethodReader",
    "CallableReader",
    "FormattedReader",
    "BasicWriter",
    "MethodWriter",
    "CallableWriter",
    "register_format",
    "get_format",
    "extract_multiparams",
]
