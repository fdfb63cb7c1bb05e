"""
Contains the (read-only) implementation of the btree
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List

from .constants import (
    FILE_HEADER_SIZE,
    SCHEMA_ROOT_PAGE_NUM,
    DEFAULT_TEXT_ENCODING,
    PAGE_TYPE_OFFSET,
    PAGE_TYPE_SIZE,
    PAGE_NUM_CELLS_OFFSET,
    PAGE_NUM_CELLS_SIZE,
    CELL_POINTER_START,
    CELL_POINTER_SIZE,
    INTERIOR_INDEX_PAGE,
    INTERIOR_TABLE_PAGE,
    LEAF_INDEX_PAGE,
    LEAF_TABLE_PAGE,
)
from .dataexchange import DatabaseError
from .pager import Pager, read_uint
from .record_utils import Cell
from .serde import OutOfBounds, deserialize_cell


class UnsupportedPageType(DatabaseError):
    """
    Page is not a leaf page, or not a btree page at all
    """
    pass


class NodeType(Enum):
    NodeInteriorIndex = INTERIOR_INDEX_PAGE
    NodeInteriorTable = INTERIOR_TABLE_PAGE
    NodeLeafIndex = LEAF_INDEX_PAGE
    NodeLeafTable = LEAF_TABLE_PAGE

    @property
    def is_leaf(self) -> bool:
        return self in (NodeType.NodeLeafIndex, NodeType.NodeLeafTable)


@dataclass
class PageHeader:
    node_type: NodeType
    num_cells: int


class Tree:
    """
    Reads pages belonging to a specific table's btree.

    NOTE: Only trees that consist of a single leaf page, i.e. the root,
    are decoded. Interior pages are recognized, so that their
    header can be read, but their cells are not followed.

    The tree functionality can be divided into static methods that
    operate on page sized `bytes`, e.g. parse_page_header, and
    methods that read pages via the pager.
    """

    def __init__(self, pager: Pager, root_page_num: int, text_encoding: str = DEFAULT_TEXT_ENCODING,
                 usable_size: int = None):
        """
        :param pager:
        :param root_page_num: of the table this Tree represents
        :param text_encoding: database text encoding, from the file header
        :param usable_size: page size less reserved space, from the file header;
            None means the whole page is usable
        """
        self.pager = pager
        self.root_page_num = root_page_num
        self.text_encoding = text_encoding
        self.usable_size = usable_size

    # section : public interface

    def root_header(self) -> PageHeader:
        node = self.pager.get_page(self.root_page_num)
        return self.parse_page_header(node, self.header_offset(self.root_page_num))

    def num_cells(self) -> int:
        """
        number of cells on the root page
        """
        return self.root_header().num_cells

    def cells(self) -> Iterator[Cell]:
        """
        decode cells on the root page, in cell pointer order
        """
        node = self.pager.get_page(self.root_page_num)
        header_offset = self.header_offset(self.root_page_num)
        header = self.parse_page_header(node, header_offset)
        if not header.node_type.is_leaf:
            raise UnsupportedPageType(
                f"page {self.root_page_num} is of type {header.node_type.name}; only leaf pages can be decoded")

        usable_size = self.usable_size if self.usable_size is not None else len(node)
        for cellptr in self.read_cell_pointers(node, header_offset, header.num_cells):
            yield deserialize_cell(node, cellptr, self.text_encoding, usable_size)

    # section : page parsing helpers

    @staticmethod
    def header_offset(page_num: int) -> int:
        """
        page 1 starts with the file header; the btree header follows it
        """
        return FILE_HEADER_SIZE if page_num == SCHEMA_ROOT_PAGE_NUM else 0

    @staticmethod
    def get_node_type(node: bytes, header_offset: int = 0) -> NodeType:
        offset = header_offset + PAGE_TYPE_OFFSET
        value = read_uint(node, offset, PAGE_TYPE_SIZE)
        try:
            return NodeType(value)
        except ValueError:
            raise UnsupportedPageType(f"unrecognized page type [{value}]") from None

    @staticmethod
    def leaf_node_num_cells(node: bytes, header_offset: int = 0) -> int:
        return read_uint(node, header_offset + PAGE_NUM_CELLS_OFFSET, PAGE_NUM_CELLS_SIZE)

    @staticmethod
    def parse_page_header(node: bytes, header_offset: int = 0) -> PageHeader:
        return PageHeader(Tree.get_node_type(node, header_offset), Tree.leaf_node_num_cells(node, header_offset))

    @staticmethod
    def leaf_node_cellptr(node: bytes, header_offset: int, cell_num: int) -> int:
        """
        returns cellptr, i.e. page-relative offset to cell
        :param node:
        :param header_offset:
        :param cell_num: 0-based position
        :return:
        """
        offset = header_offset + CELL_POINTER_START + cell_num * CELL_POINTER_SIZE
        if offset + CELL_POINTER_SIZE > len(node):
            raise OutOfBounds(f"cell pointer {cell_num} at offset {offset} beyond page of {len(node)}")
        cellptr = read_uint(node, offset, CELL_POINTER_SIZE)
        if cellptr >= len(node):
            raise OutOfBounds(f"cell pointer {cell_num} points to {cellptr}, beyond page of {len(node)}")
        return cellptr

    @staticmethod
    def read_cell_pointers(node: bytes, header_offset: int, num_cells: int) -> List[int]:
        """
        return all cell ptrs, in on-disk order
        """
        return [Tree.leaf_node_cellptr(node, header_offset, cell_num) for cell_num in range(num_cells)]
