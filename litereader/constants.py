
# operational constants
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

# logging
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_ENV_VAR = "LITEREADER_LOG_LEVEL"

# storage constants
# NOTE: these describe the on-disk format (sqlite format 3) and are only ever read
WORD = 4

# file header constants
FILE_HEADER_OFFSET = 0
FILE_HEADER_SIZE = 100
FILE_HEADER_MAGIC_OFFSET = 0
FILE_HEADER_MAGIC_SIZE = 16
FILE_HEADER_MAGIC_VALUE = b"SQLite format 3\x00"
FILE_HEADER_PAGE_SIZE_OFFSET = 16
FILE_HEADER_PAGE_SIZE_SIZE = 2
FILE_HEADER_RESERVED_SPACE_OFFSET = 20
FILE_HEADER_RESERVED_SPACE_SIZE = 1
FILE_HEADER_PAGE_COUNT_OFFSET = 28
FILE_HEADER_PAGE_COUNT_SIZE = WORD
FILE_HEADER_TEXT_ENCODING_OFFSET = 56
FILE_HEADER_TEXT_ENCODING_SIZE = WORD

# a stored page size of 1 stands for 65536, which doesn't fit in 2 bytes
PAGE_SIZE_65536_SENTINEL = 1
MIN_PAGE_SIZE = 512
MAX_PAGE_SIZE = 65536

# text encoding codes -> python codec
TEXT_ENCODINGS = {
    1: "utf-8",
    2: "utf-16-le",
    3: "utf-16-be",
}
DEFAULT_TEXT_ENCODING = "utf-8"

# pages are numbered from 1; page 1 holds the file header, followed by the schema tree
FIRST_PAGE_NUM = 1
SCHEMA_ROOT_PAGE_NUM = 1

# btree page header layout
# type .. first_freeblock .. num_cells .. cell_content_start .. fragmented_bytes
# interior pages carry an extra right-child pointer, which is never read here
PAGE_TYPE_OFFSET = 0
PAGE_TYPE_SIZE = 1
PAGE_NUM_CELLS_OFFSET = 3
PAGE_NUM_CELLS_SIZE = 2
LEAF_PAGE_HEADER_SIZE = 8

# location where cell pointers start, relative to the page header
CELL_POINTER_START = LEAF_PAGE_HEADER_SIZE
CELL_POINTER_SIZE = 2

# a leaf table cell whose payload exceeds (usable page size - this) spills onto overflow pages
LEAF_TABLE_MAX_LOCAL_OVERHEAD = 35

# btree page type codes
INTERIOR_INDEX_PAGE = 2
INTERIOR_TABLE_PAGE = 5
LEAF_INDEX_PAGE = 10
LEAF_TABLE_PAGE = 13

# varint constants
VARINT_CONTINUE_MASK = 0x80
VARINT_VALUE_MASK = 0x7F

# serial type codes
SERIAL_TYPE_NULL = 0
SERIAL_TYPE_INT48 = 5
SERIAL_TYPE_INT64 = 6
SERIAL_TYPE_REAL = 7
SERIAL_TYPE_ZERO = 8
SERIAL_TYPE_ONE = 9
SERIAL_TYPE_BLOB_MIN = 12
SERIAL_TYPE_TEXT_MIN = 13
REAL_SIZE = 8

# catalog
# number of columns in every schema record: type, name, tbl_name, rootpage, sql
CATALOG_NUM_COLUMNS = 5

USAGE = '''
Usage:
python run.py <database-file-path> <command>
    // run a single command
python run.py <database-file-path>
    // start repl

Supported meta-commands:
------------------------
print usage
.help

print page size and number of schema objects
.dbinfo

print names of all schema objects
.tables

quit repl
.quit

Supported commands:
-------------------
Count rows in a table (single leaf page tables only)
> select count(*) from apples

Print the creation sql of a table
> select * from apples
'''
