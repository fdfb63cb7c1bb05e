from __future__ import annotations
"""
User-facing layer: turns a command string into output lines.

LiteReader owns the configuration read at startup and the virtual machine;
the module level functions implement the command line (one-shot command or repl).
"""
import os
import os.path
import sys
import logging

from typing import List, Optional

from .constants import USAGE, EXIT_SUCCESS, EXIT_FAILURE, DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV_VAR
from .lang_parser.sqlhandler import SqlFrontEnd
from .lang_parser.symbols import Program
from .dataexchange import DatabaseError, Response
from .pager import Pager
from .virtual_machine import VirtualMachine, VMConfig


logger = logging.getLogger(__name__)


class UnknownCommand(DatabaseError):
    """
    Input is neither a supported meta command nor a parseable statement
    """
    pass


# section: core execution/user-interface logic

def config_logging(level: str = None):
    FORMAT = "[%(filename)s:%(lineno)s - %(funcName)s ] %(message)s"
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL)
    # basicConfig logs to stderr; stdout only carries command output
    logging.basicConfig(format=FORMAT, level=level.upper())


class LiteReader:
    """
    Programmatic interface for reading a database file.

    Usage:
    ```
    db = LiteReader(db_filepath)

    resp = db.handle_input("select count(*) from apples")
    if resp.success:
        for line in resp.body:
            print(line)
    else:
        print(resp.error_message)
    ```
    """

    def __init__(self, db_filepath: str, raise_exception: bool = False):
        """
        :param db_filepath: path to DB file
        :param raise_exception: re-raise errors instead of returning a failed Response
        """
        self.db_filepath = db_filepath
        self.raise_exception = raise_exception
        self.config = None
        self.virtual_machine = None
        self.meta_commands = {
            ".dbinfo": self.dbinfo,
            ".tables": self.tables,
            ".help": self.help,
        }
        self.configure()
        self.reset()

    def configure(self):
        config_logging()

    def reset(self):
        """
        Read the file header, once, and build the virtual machine around it.
        Every later command reuses this header (and hence the page size).
        """
        # the pager parses the header to learn the page size; reuse that parse
        with Pager.pager_open(self.db_filepath) as pager:
            header = pager.header
        logger.info(f"opened [{self.db_filepath}] with header {header}")
        self.config = VMConfig(self.db_filepath, header)
        self.virtual_machine = VirtualMachine(self.config)

    def handle_input(self, input_buffer: str) -> Response:
        """
        Run one command, either a meta command (starts with '.') or a statement.

        :param input_buffer:
        :return: Response; on success the body holds output lines
        """
        command = input_buffer.strip()
        try:
            if self.is_meta_command(command):
                return self.do_meta_command(command)
            return self.execute_statement(self.prepare_statement(command))
        except DatabaseError as e:
            logger.debug(f"command [{command}] failed with {e.__class__.__name__}")
            if self.raise_exception:
                raise
            return Response.failed(e)

    @staticmethod
    def is_meta_command(command: str) -> bool:
        return command.startswith(".")

    def do_meta_command(self, command: str) -> Response:
        handler = self.meta_commands.get(command)
        if handler is None:
            raise UnknownCommand(f"Unknown command {command}")
        return Response.ok(handler())

    def dbinfo(self) -> List[str]:
        info = self.virtual_machine.dbinfo()
        return [f"database page size: {info.page_size}", f"number of tables: {info.table_count}"]

    def tables(self) -> List[str]:
        return [" ".join(self.virtual_machine.tables())]

    @staticmethod
    def help() -> List[str]:
        return [USAGE]

    @staticmethod
    def prepare_statement(command: str) -> Program:
        """
        parse statement into its AST

        :param command:
        :return:
        """
        parser = SqlFrontEnd()
        program = parser.parse(command)
        if program is None:
            raise UnknownCommand(f"Unknown command {command}; parse failed due to: [{parser.error_summary()}]")
        return program

    def execute_statement(self, program: Program) -> Response:
        return self.virtual_machine.run(program)


def open_reader(db_filepath: str) -> Optional[LiteReader]:
    """
    create reader; on failure report why on stderr and return None
    """
    if not os.path.exists(db_filepath):
        print(f"Error: database file [{db_filepath}] not found", file=sys.stderr)
        return None
    try:
        return LiteReader(db_filepath)
    except (DatabaseError, OSError) as e:
        print(f"Error: unable to read database file [{db_filepath}] due to [{e}]", file=sys.stderr)
        return None


def run_command(db_filepath: str, command: str) -> int:
    """
    Execute a single command; returns exit code
    """
    db = open_reader(db_filepath)
    if db is None:
        return EXIT_FAILURE

    resp = db.handle_input(command)
    if not resp.success:
        print(f"Command execution failed due to [{resp.error_message}]", file=sys.stderr)
        return EXIT_FAILURE

    print("\n".join(resp.body))
    return EXIT_SUCCESS


def repl(db_filepath: str) -> int:
    """
    REPL (read-eval-print loop); exits on `.quit` or end of input
    """
    db = open_reader(db_filepath)
    if db is None:
        return EXIT_FAILURE

    print("Welcome to litereader")
    print("For help use .help")
    while True:
        try:
            input_buffer = input("litereader> ").strip()
        except EOFError:
            print()
            break

        if input_buffer == ".quit":
            print("goodbye")
            break
        if not input_buffer:
            continue

        resp = db.handle_input(input_buffer)
        if resp.success:
            print("\n".join(resp.body))
        else:
            print(f"Error: {resp.error_message}")
    return EXIT_SUCCESS


def parse_args_and_start(args: List[str]) -> int:
    """
    parse args and start; all args after the database path form the command,
    so unquoted sql works too
    :return: exit code
    """
    if len(args) < 1:
        print("Error: database file not specified", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return EXIT_FAILURE

    db_filepath, command_args = args[0], args[1:]
    if not command_args:
        return repl(db_filepath)
    return run_command(db_filepath, " ".join(command_args))
