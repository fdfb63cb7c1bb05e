from __future__ import annotations
"""
Contains symbol classes used by parser
"""
from typing import List, Union
from dataclasses import dataclass

from lark import Transformer, Token


@dataclass
class Symbol:
    """
    Symbol is the root of parser hierarchy.
    Symbols compose the parser's output, i.e. the AST
    """
    pass


@dataclass
class Program(Symbol):
    statements: List[SelectStmnt]


@dataclass
class ColumnName(Symbol):
    name: str


@dataclass
class TableName(Symbol):
    table_name: str


@dataclass
class CountStar(Symbol):
    """
    count(*) aggregate
    """
    pass


@dataclass
class Star(Symbol):
    """
    all columns, i.e. `select *`
    """
    pass


Selectable = Union[CountStar, Star, ColumnName]


@dataclass
class SelectStmnt(Symbol):
    selectables: List[Selectable]
    table_name: TableName


def unquote(token: Token) -> str:
    value = str(token)
    if token.type == "QUOTED_IDENTIFIER":
        return value[1:-1]
    return value


class ToAst(Transformer):
    """
    Transform lark parse tree into AST, i.e. tree of Symbols
    """

    def program(self, args):
        return Program(list(args))

    def select_stmnt(self, args):
        select_clause, table_name = args
        return SelectStmnt(selectables=select_clause, table_name=table_name)

    def select_clause(self, args):
        return list(args)

    def selectable(self, args):
        return args[0]

    def from_clause(self, args):
        return args[0]

    def count_star(self, args):
        return CountStar()

    def star(self, args):
        return Star()

    def column_name(self, args):
        return ColumnName(unquote(args[0]))

    def table_name(self, args):
        return TableName(unquote(args[0]))
