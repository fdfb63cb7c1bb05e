from __future__ import annotations
import logging

from typing import Optional

from lark import Lark
from lark.exceptions import UnexpectedInput  # root of all lark parse errors

from .symbols import Program, ToAst
from .grammar import GRAMMAR


logger = logging.getLogger(__name__)


class SqlFrontEnd:
    """
    Parses the supported sql subset into a Program AST.

    The outcome of the last `parse` is kept on the instance:
    either the AST (get_parsed) or the lark error (error_summary).
    """
    def __init__(self, raise_exception: bool = False):
        self.raise_exception = raise_exception
        self.parser = Lark(GRAMMAR, parser='earley', start="program")
        self.parsed: Optional[Program] = None
        self.exc: Optional[UnexpectedInput] = None

    def parse(self, text: str) -> Optional[Program]:
        self.parsed = None
        self.exc = None
        try:
            tree = self.parser.parse(text)
        except UnexpectedInput as e:
            logger.debug(f"failed to parse [{text}]")
            self.exc = e
            if self.raise_exception:
                raise
            return None

        logger.debug(f"untransformed AST:\n{tree.pretty()}")
        self.parsed = ToAst().transform(tree)
        return self.parsed

    def is_success(self) -> bool:
        return self.parsed is not None

    def get_parsed(self) -> Optional[Program]:
        return self.parsed

    def error_summary(self) -> Optional[str]:
        if self.exc is not None:
            return str(self.exc)
        return None
