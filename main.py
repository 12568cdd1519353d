import sys

from rich.pretty import pprint

from flagparser import *

__prog__ = "todo"

FLAGS = [
    FlagDefinition("-b", FlagType.STRING),
    FlagDefinition("-m", FlagType.STRING, max_length=1),
    FlagDefinition("-t", FlagType.STRING, max_length=10),
    FlagDefinition("-c", FlagType.INTEGER),
    FlagDefinition("-p", FlagType.INTEGER),
    FlagDefinition("-d", FlagType.DATETIME),
    FlagDefinition("-a", FlagType.BOOLEAN, standalone=True),
]


if __name__ == '__main__':
    try:
        pprint(parse(FLAGS, sys.argv[1:]))
    except ParserException as fault:
        trigger(fault, shell=True)
