from .interface import LiteReader, parse_args_and_start, repl, run_command
from .dataexchange import DatabaseError, Response
