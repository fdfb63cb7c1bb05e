"""
Storage classes of column values.

A datatype only converts the bytes of a value into a python value; how many
bytes a value occupies is decided by its serial type (see serde.py).
"""
import struct
from abc import ABCMeta
from typing import Any


from .constants import DEFAULT_TEXT_ENCODING


class DataType(metaclass=ABCMeta):
    """
    Storage class of a value in a record.
    """

    @staticmethod
    def deserialize(bstring: bytes, encoding: str = DEFAULT_TEXT_ENCODING) -> Any:
        """
        convert the value's bytes (exactly as wide as its serial type declares)
        :param bstring:
        :param encoding: text encoding of the database; only Text uses it
        :return:
        """
        raise NotImplementedError


class Integer(DataType):
    """
    Two's complement big-endian integer; 0, 1, 2, 3, 4, 6 or 8 bytes wide
    """

    @staticmethod
    def deserialize(bstring: bytes, encoding: str = DEFAULT_TEXT_ENCODING) -> int:
        return int.from_bytes(bstring, "big", signed=True)


class Real(DataType):
    """
    8 byte big-endian IEEE-754 double
    """

    @staticmethod
    def deserialize(bstring: bytes, encoding: str = DEFAULT_TEXT_ENCODING) -> float:
        value, = struct.unpack('>d', bstring)
        return value


class Text(DataType):

    @staticmethod
    def deserialize(bstring: bytes, encoding: str = DEFAULT_TEXT_ENCODING) -> str:
        # malformed text shouldn't abort a whole listing
        return bstring.decode(encoding, errors="replace")


class Null(DataType):
    """
    Nulls have no body bytes; the serial type alone encodes them.
    """

    @staticmethod
    def deserialize(bstring: bytes, encoding: str = DEFAULT_TEXT_ENCODING) -> None:
        return None


class Blob(DataType):

    @staticmethod
    def deserialize(bstring: bytes, encoding: str = DEFAULT_TEXT_ENCODING) -> bytes:
        return bytes(bstring)
