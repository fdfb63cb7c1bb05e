"""
Read access to the logical database: the catalog (schema table on page 1)
and the btrees of the objects it describes.
"""
from collections import OrderedDict
from typing import List

from .btree import Tree
from .constants import SCHEMA_ROOT_PAGE_NUM, CATALOG_NUM_COLUMNS, DEFAULT_TEXT_ENCODING
from .dataexchange import DatabaseError
from .datatypes import Null
from .pager import Pager
from .record_utils import Record
from .schema import CatalogSchema, SchemaEntry


class SchemaCorrupt(DatabaseError):
    """
    A catalog record is missing columns, has a column of unexpected type,
    or repeats the name of an earlier record
    """
    pass


class TableNotFound(DatabaseError):
    """
    Referenced table does not exist in the catalog
    """
    pass


class StateManager:
    """
    This entity is responsible for reading the state of a database
    (contained in a single file), on behalf of one command.

    The catalog is decoded from the schema tree whose root is page 1.
    Nothing is cached across StateManager instances; each command
    re-reads the catalog from the file.
    """

    def __init__(self, pager: Pager, text_encoding: str = DEFAULT_TEXT_ENCODING, usable_size: int = None):
        self.pager = pager
        self.text_encoding = text_encoding
        self.usable_size = usable_size
        # catalog schema
        self.catalog_schema = CatalogSchema()
        # catalog tree
        self.catalog_tree = Tree(self.pager, SCHEMA_ROOT_PAGE_NUM, text_encoding, usable_size)
        # name -> SchemaEntry; populated lazily by load_catalog
        self.catalog = None

    def get_catalog_tree(self) -> Tree:
        return self.catalog_tree

    def load_catalog(self) -> "OrderedDict[str, SchemaEntry]":
        """
        Decode every catalog record, in on-disk cell order
        """
        catalog = OrderedDict()
        for cell in self.catalog_tree.cells():
            entry = self.record_to_entry(cell.record)
            if entry.name in catalog:
                # names are unique in a well-formed catalog
                raise SchemaCorrupt(f"duplicate catalog entry for [{entry.name}]")
            catalog[entry.name] = entry
        self.catalog = catalog
        return catalog

    def get_catalog(self) -> "OrderedDict[str, SchemaEntry]":
        if self.catalog is None:
            self.load_catalog()
        return self.catalog

    def table_names(self) -> List[str]:
        return list(self.get_catalog().keys())

    def table_exists(self, table_name: str) -> bool:
        return table_name in self.get_catalog()

    def get_entry(self, table_name: str) -> SchemaEntry:
        if not self.table_exists(table_name):
            raise TableNotFound(f"no such table: {table_name}")
        return self.get_catalog()[table_name]

    def get_tree(self, table_name: str) -> Tree:
        entry = self.get_entry(table_name)
        return Tree(self.pager, entry.root_page, self.text_encoding, self.usable_size)

    def record_to_entry(self, record: Record) -> SchemaEntry:
        """
        validate `record` against the catalog schema and bind its columns by name
        """
        if len(record) < CATALOG_NUM_COLUMNS:
            raise SchemaCorrupt(f"catalog record has {len(record)} columns, expected {CATALOG_NUM_COLUMNS}")

        bound = record.bind(self.catalog_schema.column_names)
        for column in self.catalog_schema.columns:
            datatype = bound.get_datatype(column.name)
            if datatype == column.datatype:
                continue
            if datatype == Null and column.is_nullable:
                continue
            raise SchemaCorrupt(
                f"catalog column [{column.name}] expected {column.datatype.__name__}, found {datatype.__name__}")

        return SchemaEntry(
            object_type=bound.get("type"),
            name=bound.get("name"),
            table_name=bound.get("tbl_name"),
            root_page=bound.get("rootpage"),
            sql=bound.get("sql"),
        )
