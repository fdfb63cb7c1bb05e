from __future__ import annotations
"""
Contains definitions and utilities for Records.
Records are the decoded payloads of cells; on their own they are positional,
i.e. an ordered list of values. Binding a record to column names
produces a SimpleRecord.
"""
from dataclasses import dataclass, field
from typing import Any, List, Sequence, Type

from .datatypes import DataType, Null


class InvalidNameException(Exception):
    """
    Lookup of a column name that the record was not bound with
    """
    pass


@dataclass
class Record:
    """
    A decoded record. `values[i]` is of type `datatypes[i]`, which was
    determined by `serial_types[i]`.
    """
    # size of the record header in bytes, including the size varint itself
    header_size: int
    serial_types: List[int] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)
    datatypes: List[Type[DataType]] = field(default_factory=list)

    def __len__(self):
        return len(self.values)

    def bind(self, column_names: Sequence[str]) -> SimpleRecord:
        """
        Bind values to `column_names` positionally.
        A record may omit trailing null columns; these are bound to None.
        """
        values = {}
        datatypes = {}
        for idx, name in enumerate(column_names):
            name = name.lower()
            if idx < len(self.values):
                values[name] = self.values[idx]
                datatypes[name] = self.datatypes[idx]
            else:
                values[name] = None
                datatypes[name] = Null
        return SimpleRecord(values, datatypes)


@dataclass
class Cell:
    """
    A leaf table cell: row key followed by its record
    """
    # declared size of the record payload; informational only
    payload_size: int
    row_id: int
    record: Record


class SimpleRecord:
    """
    Represents a record whose values are addressable by column name.
    """
    def __init__(self, values: dict = None, datatypes: dict = None):
        # unordered mapping from: column-name -> column-value
        self.values = values or {}
        # column-name -> datatype
        self.datatypes = datatypes or {}

    def __str__(self):
        if not self.values:
            return "Record(-)"
        body = ", ".join([f"{k}: {v}" for k, v in self.values.items()])
        return f"Record({body})"

    def __repr__(self):
        return str(self)

    @property
    def columns(self) -> List[str]:
        return list(self.values.keys())

    def get(self, column: str):
        """
        column names are internally represented as lowercase versions
        of their names; thus the column must be lowercased for the lookup
        :param column:
        :return:
        """
        column = column.lower()
        if column not in self.values:
            raise InvalidNameException(f"Invalid column name [{column}]")
        return self.values[column]

    def get_datatype(self, column: str) -> Type[DataType]:
        column = column.lower()
        if column not in self.datatypes:
            raise InvalidNameException(f"Invalid column name [{column}]")
        return self.datatypes[column]
