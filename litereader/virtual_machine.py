"""
Executes parsed statements and meta commands against a database file.
"""
import logging

from dataclasses import dataclass
from typing import List, Union

from .btree import Tree
from .dataexchange import DatabaseError, Response
from .lang_parser.symbols import Program, SelectStmnt, Selectable, CountStar, Star
from .pager import FileHeader, Pager
from .statemanager import StateManager


logger = logging.getLogger(__name__)


class UnsupportedQuery(DatabaseError):
    """
    Statement parsed, but asks for something this reader can't compute,
    e.g. projection of arbitrary columns
    """
    pass


@dataclass(frozen=True)
class VMConfig:
    """
    Configuration shared by all commands within one process;
    set once at startup
    """
    db_filepath: str
    header: FileHeader

    @property
    def page_size(self) -> int:
        return self.header.page_size

    @property
    def text_encoding(self) -> str:
        return self.header.text_encoding

    @property
    def usable_size(self) -> int:
        return self.header.usable_size


@dataclass
class DbInfo:
    page_size: int
    table_count: int


class VirtualMachine:
    """
    Each public operation corresponds to one command: it opens the database
    file once, reads what it needs, and releases the file before returning.
    """

    def __init__(self, config: VMConfig):
        self.config = config

    def open_pager(self) -> Pager:
        return Pager.pager_open(self.config.db_filepath, self.config.page_size)

    def get_state_manager(self, pager: Pager) -> StateManager:
        return StateManager(pager, self.config.text_encoding, self.config.usable_size)

    def dbinfo(self) -> DbInfo:
        """
        page size and number of objects (cells) in the schema tree
        """
        with self.open_pager() as pager:
            state_manager = self.get_state_manager(pager)
            table_count = state_manager.get_catalog_tree().num_cells()
        return DbInfo(self.config.page_size, table_count)

    def tables(self) -> List[str]:
        """
        names of all catalog objects, in catalog order
        """
        with self.open_pager() as pager:
            return self.get_state_manager(pager).table_names()

    def count_rows(self, table_name: str) -> int:
        with self.open_pager() as pager:
            state_manager = self.get_state_manager(pager)
            return self.count_tree_rows(table_name, state_manager.get_tree(table_name))

    def select_columns(self, table_name: str, selectables: List[Selectable]) -> Union[int, str]:
        """
        Supports `count(*)`, which returns the row count, and `*`, which returns
        the table's creation sql.
        """
        with self.open_pager() as pager:
            state_manager = self.get_state_manager(pager)
            # resolve table first; a missing table fails regardless of the column list
            entry = state_manager.get_entry(table_name)
            if any(isinstance(selectable, CountStar) for selectable in selectables):
                return self.count_tree_rows(table_name, state_manager.get_tree(table_name))
            if len(selectables) == 1 and isinstance(selectables[0], Star):
                return entry.sql if entry.sql is not None else ""
        raise UnsupportedQuery(f"unsupported column list {selectables}; only count(*) and * are supported")

    @staticmethod
    def count_tree_rows(table_name: str, tree: Tree) -> int:
        """
        number of cells on the root page; this is the row count only
        when the whole table fits on its root leaf page
        """
        header = tree.root_header()
        if not header.node_type.is_leaf:
            logger.warning(f"root page {tree.root_page_num} of [{table_name}] is a {header.node_type.name} page; "
                           f"count reflects the root page only")
        return header.num_cells

    # section: statement execution

    def run(self, program: Program) -> Response:
        """
        execute statements in program; output lines are returned in the body
        """
        lines = []
        for stmnt in program.statements:
            lines.extend(self.execute(stmnt))
        return Response.ok(lines)

    def execute(self, stmnt: SelectStmnt) -> List[str]:
        result = self.select_columns(stmnt.table_name.table_name, stmnt.selectables)
        return [str(result)]
