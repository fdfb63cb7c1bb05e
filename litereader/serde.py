"""
Deserialization of cells and records from page bytes.

See https://www.sqlite.org/fileformat2.html#record_format for the format;
the following are the key details:

    - cell (leaf table page) -> [payload_size(varint), row_id(varint), record]
    - record -> [record header, record body]
        -- header -> [header_size(varint), serial_type(varint)*]; header_size includes itself
        -- body -> concatenated bytes of values (in column definition order), no padding

serial types:

    serial-type  byte-length    datatype
    0            0              Null
    1-4          serial-type    Integer (signed, big-endian)
    5            6              Integer
    6            8              Integer
    7            8              Real (IEEE-754, big-endian)
    8            0              Integer, literal 0
    9            0              Integer, literal 1
    10, 11       -              reserved, never written
    N>=12 even   (N-12)/2       Blob
    N>=13 odd    (N-13)/2       Text

All offsets are page-relative. Payloads that spill onto overflow pages are not
supported: a cell whose payload exceeds (usable page size - 35) bytes, or any
content that would extend beyond the page, raises OutOfBounds.
"""
from typing import Tuple, Type

from .constants import (
    VARINT_CONTINUE_MASK,
    VARINT_VALUE_MASK,
    SERIAL_TYPE_NULL,
    SERIAL_TYPE_INT48,
    SERIAL_TYPE_INT64,
    SERIAL_TYPE_REAL,
    SERIAL_TYPE_ZERO,
    SERIAL_TYPE_ONE,
    SERIAL_TYPE_BLOB_MIN,
    SERIAL_TYPE_TEXT_MIN,
    REAL_SIZE,
    DEFAULT_TEXT_ENCODING,
    LEAF_TABLE_MAX_LOCAL_OVERHEAD,
)
from .dataexchange import DatabaseError
from .datatypes import DataType, Null, Integer, Real, Text, Blob
from .pager import TruncatedInput
from .record_utils import Cell, Record


class InvalidCell(DatabaseError):
    """
    A invalid formatted cell
    """
    pass


class OutOfBounds(DatabaseError):
    """
    Decoded content would extend beyond the page
    """
    pass


def decode_varint(buf: bytes, offset: int) -> Tuple[int, int]:
    """
    Decode varint starting at `offset`.

    Each byte contributes its low 7 bits, most significant group first;
    a set high bit means more bytes follow.

    :param buf:
    :param offset:
    :return: (value, bytes_consumed)
    """
    value = 0
    consumed = 0
    while True:
        position = offset + consumed
        if position >= len(buf):
            raise TruncatedInput(f"varint at offset {offset} not terminated before end of buffer ({len(buf)})")
        byte = buf[position]
        consumed += 1
        value = (value << 7) | (byte & VARINT_VALUE_MASK)
        if not byte & VARINT_CONTINUE_MASK:
            return value, consumed


def serialtype_to_datatype(serial_type: int) -> Tuple[Type[DataType], int]:
    """
    Convert serial type to datatype and the number of body bytes it occupies
    :param serial_type:
    :return: (datatype, content_size)
    """
    if serial_type == SERIAL_TYPE_NULL:
        return Null, 0
    elif serial_type < SERIAL_TYPE_INT48:
        return Integer, serial_type
    elif serial_type == SERIAL_TYPE_INT48:
        return Integer, 6
    elif serial_type == SERIAL_TYPE_INT64:
        return Integer, 8
    elif serial_type == SERIAL_TYPE_REAL:
        return Real, REAL_SIZE
    elif serial_type in (SERIAL_TYPE_ZERO, SERIAL_TYPE_ONE):
        return Integer, 0
    elif serial_type >= SERIAL_TYPE_BLOB_MIN and serial_type % 2 == 0:
        return Blob, (serial_type - SERIAL_TYPE_BLOB_MIN) // 2
    elif serial_type >= SERIAL_TYPE_TEXT_MIN:
        return Text, (serial_type - SERIAL_TYPE_TEXT_MIN) // 2
    raise InvalidCell(f"Invalid serial type [{serial_type}]")


def deserialize_value(serial_type: int, buf: bytes, offset: int,
                      encoding: str = DEFAULT_TEXT_ENCODING) -> Tuple[Type[DataType], object, int]:
    """
    Deserialize a single column value

    :param serial_type:
    :param buf: page bytes
    :param offset: start of value in `buf`
    :param encoding: database text encoding
    :return: (datatype, value, bytes_consumed)
    """
    datatype, content_size = serialtype_to_datatype(serial_type)
    if serial_type in (SERIAL_TYPE_ZERO, SERIAL_TYPE_ONE):
        # fixed-value types are only encoded in the header
        return datatype, serial_type - SERIAL_TYPE_ZERO, 0

    end = offset + content_size
    if end > len(buf):
        raise OutOfBounds(f"value of serial type {serial_type} at [{offset}, {end}) exceeds buffer of {len(buf)}")
    return datatype, datatype.deserialize(buf[offset:end], encoding), content_size


def deserialize_record(buf: bytes, offset: int, encoding: str = DEFAULT_TEXT_ENCODING) -> Record:
    """
    deserialize record starting at `offset`

    :param buf: page bytes
    :param offset: position of the record's header-size varint
    :param encoding: database text encoding
    :return: Record
    """
    header_size, consumed = decode_varint(buf, offset)
    # this is the abs addr value
    header_abs_ubound = offset + header_size
    if header_abs_ubound > len(buf):
        raise OutOfBounds(f"record header [{offset}, {header_abs_ubound}) exceeds buffer of {len(buf)}")

    record = Record(header_size)
    # process column metadata
    header_offset = offset + consumed
    while header_offset < header_abs_ubound:
        serial_type, consumed = decode_varint(buf, header_offset)
        header_offset += consumed
        record.serial_types.append(serial_type)

    if header_offset != header_abs_ubound:
        raise InvalidCell(f"record header at {offset} overruns its declared size {header_size}")

    # first address where data resides
    data_offset = header_abs_ubound
    for serial_type in record.serial_types:
        datatype, value, consumed = deserialize_value(serial_type, buf, data_offset, encoding)
        data_offset += consumed
        record.datatypes.append(datatype)
        record.values.append(value)

    return record


def deserialize_cell(buf: bytes, offset: int, encoding: str = DEFAULT_TEXT_ENCODING,
                     usable_size: int = None) -> Cell:
    """
    deserialize leaf table cell starting at `offset`
    :param buf: page bytes
    :param offset: cell offset, i.e. value of the cell pointer
    :param encoding: database text encoding
    :param usable_size: page size less the reserved region; if given, payloads too large
        to be stored wholly on the page are rejected
    :return: Cell
    """
    if offset >= len(buf):
        raise OutOfBounds(f"cell offset {offset} beyond buffer of {len(buf)}")
    payload_size, consumed = decode_varint(buf, offset)
    offset += consumed
    row_id, consumed = decode_varint(buf, offset)
    offset += consumed
    if usable_size is not None and payload_size > usable_size - LEAF_TABLE_MAX_LOCAL_OVERHEAD:
        raise OutOfBounds(f"cell with row id {row_id} has payload of {payload_size} bytes; at most "
                          f"{usable_size - LEAF_TABLE_MAX_LOCAL_OVERHEAD} fit on the page, the rest is on overflow pages")
    if offset + payload_size > len(buf):
        raise OutOfBounds(f"cell with row id {row_id} declares payload [{offset}, {offset + payload_size}) "
                          f"beyond page of {len(buf)}")
    record = deserialize_record(buf, offset, encoding)
    return Cell(payload_size, row_id, record)
