import logging
import os.path

from dataclasses import dataclass

from .constants import (
    FILE_HEADER_OFFSET,
    FILE_HEADER_SIZE,
    FILE_HEADER_MAGIC_OFFSET,
    FILE_HEADER_MAGIC_SIZE,
    FILE_HEADER_MAGIC_VALUE,
    FILE_HEADER_PAGE_SIZE_OFFSET,
    FILE_HEADER_PAGE_SIZE_SIZE,
    FILE_HEADER_RESERVED_SPACE_OFFSET,
    FILE_HEADER_RESERVED_SPACE_SIZE,
    FILE_HEADER_PAGE_COUNT_OFFSET,
    FILE_HEADER_PAGE_COUNT_SIZE,
    FILE_HEADER_TEXT_ENCODING_OFFSET,
    FILE_HEADER_TEXT_ENCODING_SIZE,
    PAGE_SIZE_65536_SENTINEL,
    MIN_PAGE_SIZE,
    MAX_PAGE_SIZE,
    TEXT_ENCODINGS,
    DEFAULT_TEXT_ENCODING,
    FIRST_PAGE_NUM,
)
from .dataexchange import DatabaseError


logger = logging.getLogger(__name__)


class InvalidPageAccess(DatabaseError):
    """Requested page does not exist in the database file"""
    pass


class TruncatedInput(DatabaseError):
    """The file (or a page buffer) ran out of bytes before a value was complete"""
    pass


def read_uint(data: bytes, offset: int, size: int) -> int:
    """
    read big-endian unsigned int of `size` bytes at `offset`
    """
    value = data[offset: offset + size]
    if len(value) != size:
        raise TruncatedInput(f"expected {size} bytes at offset {offset}, found {len(value)}")
    return int.from_bytes(value, "big")


@dataclass(frozen=True)
class FileHeader:
    """
    The subset of the 100-byte database file header this reader uses.
    Read once at startup; read-only thereafter.
    """
    page_size: int
    text_encoding: str = DEFAULT_TEXT_ENCODING
    reserved_space: int = 0
    page_count: int = 0

    @property
    def usable_size(self) -> int:
        """
        bytes of each page available to btree content; the reserved region sits at the end of the page
        """
        return self.page_size - self.reserved_space

    @classmethod
    def parse(cls, header: bytes) -> "FileHeader":
        """
        parse file header; only the page size is required to be valid

        :param header: the first FILE_HEADER_SIZE bytes of the file
        :return:
        """
        if len(header) < FILE_HEADER_SIZE:
            raise TruncatedInput(f"file header requires {FILE_HEADER_SIZE} bytes, found {len(header)}")

        magic = header[FILE_HEADER_MAGIC_OFFSET: FILE_HEADER_MAGIC_OFFSET + FILE_HEADER_MAGIC_SIZE]
        if magic != FILE_HEADER_MAGIC_VALUE:
            logger.warning(f"unexpected file header magic [{bytes(magic)!r}]")

        page_size = read_uint(header, FILE_HEADER_PAGE_SIZE_OFFSET, FILE_HEADER_PAGE_SIZE_SIZE)
        if page_size == PAGE_SIZE_65536_SENTINEL:
            page_size = MAX_PAGE_SIZE
        if page_size < MIN_PAGE_SIZE or page_size > MAX_PAGE_SIZE or page_size & (page_size - 1) != 0:
            logger.warning(f"page size [{page_size}] is not a power of two in [{MIN_PAGE_SIZE}, {MAX_PAGE_SIZE}]")

        encoding_code = read_uint(header, FILE_HEADER_TEXT_ENCODING_OFFSET, FILE_HEADER_TEXT_ENCODING_SIZE)
        # 0 means the header field was never set, e.g. an empty database
        text_encoding = TEXT_ENCODINGS.get(encoding_code, DEFAULT_TEXT_ENCODING)
        if encoding_code and encoding_code not in TEXT_ENCODINGS:
            logger.warning(f"unknown text encoding [{encoding_code}]; defaulting to {DEFAULT_TEXT_ENCODING}")

        return cls(
            page_size=page_size,
            text_encoding=text_encoding,
            reserved_space=read_uint(header, FILE_HEADER_RESERVED_SPACE_OFFSET, FILE_HEADER_RESERVED_SPACE_SIZE),
            page_count=read_uint(header, FILE_HEADER_PAGE_COUNT_OFFSET, FILE_HEADER_PAGE_COUNT_SIZE),
        )


class Pager:
    """
    Provides page abstraction on top of the file's byte stream.

    From the pager's perspective, the file is organized like:
    page_1 (which starts with the 100 byte file header), page_2, ... page_N.
    Page `n` starts at byte `(n - 1) * page_size`.

    The pager holds a single read-only file handle for its lifetime; use it as
    a context manager so the handle is released on every exit path.
    Pages are not cached: every `get_page` reads from the file.
    """
    def __init__(self, filename: str, page_size: int = None):
        """
        :param filename: database file
        :param page_size: if None, the page size is read from the file header
        """
        self.filename = filename
        self.fileptr = None
        self.file_length = 0
        self.page_size = page_size
        # parsed file header; only read when the page size wasn't given
        self.header = None
        self.init()

    @classmethod
    def pager_open(cls, filename: str, page_size: int = None):
        """
        Create pager on argument file
        """
        return cls(filename, page_size)

    def __enter__(self) -> "Pager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def init(self):
        """
        open database file and determine its length and page size
        """
        self.fileptr = open(self.filename, "rb")
        try:
            self.file_length = os.path.getsize(self.filename)
            if self.page_size is None:
                self.header = self.read_file_header()
                self.page_size = self.header.page_size
        except (DatabaseError, OSError):
            # not yet handed to a with-block, so release the handle here
            self.close()
            raise
        logger.debug(f"opened [{self.filename}]; length: {self.file_length}, page size: {self.page_size}")

    def close(self):
        """
        close the pager; safe to call more than once
        """
        if self.fileptr is not None:
            self.fileptr.close()
            self.fileptr = None

    @property
    def num_pages(self) -> int:
        return self.file_length // self.page_size

    def read(self, offset: int, length: int) -> bytes:
        """
        read exactly `length` bytes starting at `offset`

        :param offset: absolute byte position in file
        :param length:
        :return:
        """
        if self.fileptr is None:
            raise ValueError("read on closed pager")
        self.fileptr.seek(offset)
        data = self.fileptr.read(length)
        if len(data) != length:
            raise TruncatedInput(f"requested {length} bytes at offset {offset}, file returned {len(data)}")
        return data

    def read_file_header(self) -> FileHeader:
        return FileHeader.parse(self.read(FILE_HEADER_OFFSET, FILE_HEADER_SIZE))

    def page_exists(self, page_num: int) -> bool:
        """
        whether any byte of page `page_num` is in the file; a partial
        last page exists, but reading it raises TruncatedInput
        """
        return page_num >= FIRST_PAGE_NUM and (page_num - 1) * self.page_size < self.file_length

    def get_page(self, page_num: int) -> bytes:
        """
        get `page` given `page_num`; pages are 1-based
        """
        if page_num < FIRST_PAGE_NUM:
            raise InvalidPageAccess(f"Tried to fetch page [{page_num}]; pages are numbered from {FIRST_PAGE_NUM}")
        if not self.page_exists(page_num):
            raise InvalidPageAccess(
                f"Tried to fetch page out of bounds (requested page = {page_num}, num pages = {self.num_pages})")
        return self.read((page_num - 1) * self.page_size, self.page_size)
