"""
Always-present options of a program.

These are registered in the root scope before the program's own options, so
a root option reusing one of their names or keys is a duplicate (unless the
matching built-in is disabled on the Program). Sub-commands may shadow them.

- --version        (only when the program has a version)
- -h, --help       (unless no_help)
- -?, --usage      (unless no_usage)
- --verbosity=LEVEL, -v, -q (unless no_logging)
"""
from .logs import Verbosity
from .options import Option, VERSION_KEY, VERBOSITY_KEY

OPT_VERSION = Option(
    "version",
    VERSION_KEY,
    help="Print program version and exit",
)

OPT_HELP = Option(
    "help",
    "h",
    help="Give this help list and exit",
)

OPT_USAGE = Option(
    "usage",
    "?",
    help="Give a short usage message and exit",
)

OPT_VERBOSITY = Option(
    "verbosity",
    VERBOSITY_KEY,
    "LEVEL",
    help="Verbosity level. one of: '0|s|silent', '1|f|fatal', '2|e|error', "
         "'3|w|warn', '4|i|info' and '5|d|debug'. if this option is not "
         "given, the verbosity level will be '4|i|info'",
)

OPT_VERBOSE = Option(
    key="v",
    multiple=True,
    help="Increase the verbosity on each occurrence, e.g. -vvv",
)

OPT_QUIET = Option(
    key="q",
    multiple=True,
    help="Decrease the verbosity on each occurrence, e.g. -qq",
)


def enabled(program, /):
    """
    The built-in options a program carries, in registration order.
    """
    options = []
    if program.version:
        options.append(OPT_VERSION)
    if not program.no_help:
        options.append(OPT_HELP)
    if not program.no_usage:
        options.append(OPT_USAGE)
    if not program.no_logging:
        options.extend((OPT_VERBOSITY, OPT_VERBOSE, OPT_QUIET))
    return tuple(options)


def verbosity(logconfig, value, /):
    """
    Apply a --verbosity value.

    An empty value ('--verbosity=') counts as no value for this option only,
    and resets the level to INFO like any unknown spelling.
    """
    logconfig.verbosity = Verbosity.parse(value or None)
    return logconfig.verbosity


__all__ = (
    "OPT_VERSION",
    "OPT_HELP",
    "OPT_USAGE",
    "OPT_VERBOSITY",
    "OPT_VERBOSE",
    "OPT_QUIET",
    "enabled",
    "verbosity",
)
