"""
arbor: GNU-style command-line parsing over a tree of sub-commands.

    from arbor import Option, Program, Eat, Status, command, parse

    @command("build", [Option("output", "o", "FILE")], args="INPUT")
    def build(option, value, context):
        return Eat.OK

    program = Program(commands=[build], version="1.0")
    program.logconfig.install()
    result = parse(program)
    if result.status is not Status.OK:
        raise SystemExit(result.status is not Status.OK_EXIT)
"""
__title__ = 'arbor'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .faults import *
from .logs import *
from .options import *
from .parser import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the logging configuration
__all__ += logs.__all__  # type: ignore[attr-defined]
# Load the exposed API of the descriptors
__all__ += options.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parse driver
__all__ += parser.__all__  # type: ignore[attr-defined]
