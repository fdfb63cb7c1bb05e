"""
Logical schema of the catalog, i.e. the table rooted at page 1
that describes every other object in the database, and the
entries decoded from it.

The physical representation (serial types, widths) is handled in serde.py.
"""
from dataclasses import dataclass
from typing import List, Optional, Type

from .datatypes import DataType, Integer, Text


@dataclass(frozen=True)
class Column:
    name: str
    datatype: Type[DataType]
    is_nullable: bool = True


class SimpleSchema:
    """
    Named, ordered list of columns. Treat as read-only once constructed.
    """
    def __init__(self, name: str, columns: List[Column]):
        self.name = name
        self.columns = list(columns)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def __repr__(self):
        return f"SimpleSchema({self.name}, {', '.join(self.column_names)})"


class CatalogSchema(SimpleSchema):
    """
    Fixed schema of the catalog table; every catalog record is read
    positionally against:

    create table sqlite_schema (
        type text,
        name text not null,
        tbl_name text,
        rootpage integer not null,
        sql text
    )

    type, tbl_name and sql are nullable since e.g. autoindex rows store a null sql
    """

    def __init__(self):
        super().__init__("sqlite_schema", [
            Column("type", Text),
            Column("name", Text, is_nullable=False),
            Column("tbl_name", Text),
            Column("rootpage", Integer, is_nullable=False),
            Column("sql", Text),
        ])


@dataclass
class SchemaEntry:
    """
    One object (table, index, view, trigger) described by the catalog
    """
    object_type: str
    name: str
    table_name: str
    root_page: int
    sql: Optional[str]
