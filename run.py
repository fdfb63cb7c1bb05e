"""
Main interface for user/developer of litereader.

Utility to run a command against a database file, or start a repl.

Requires litereader to be installed.
"""

import sys

from litereader import parse_args_and_start


if __name__ == '__main__':
    sys.exit(parse_args_and_start(sys.argv[1:]))
