"""
Arbor faults (user input errors and fatal conditions) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the parse
  engine can raise. Codes are grouped by domain so logs and searches stay
  predictable.
- UserError: the command line is malformed (unknown option, redundant option,
  missing or unexpected option argument, bad positional, wrong positional count,
  anything no callback consumed). The host prints the message and exits non-zero.
- FatalError: the command tree or the environment is broken (duplicate option in
  a scope, command path too deep, a callback returning garbage, a failing
  console). There is no recovery path.
- trigger(): central entry point that renders a fault on a rich console.

Rendering
- Every message is prefixed by the command path (“prog build: invalid option -- '-x'”).
- Colours only apply when the fault was replaced with colorful=True; styles can be
  overridden by the host through a __styles__ mapping in __main__.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping
    - options (2110x): UNKNOWN_OPTION, REDUNDANT_OPTION, MISSING_ARGUMENT,
      UNEXPECTED_ARGUMENT, OPTION_NOT_EATEN
    - positionals (2112x): INVALID_POSITIONAL, POSITIONAL_NOT_EATEN, POSITIONAL_COUNT
    - fatal (2210x): DUPLICATE_OPTION, STACK_OVERFLOW, CALLBACK_RESULT,
      SINK_WRITE, EMPTY_ARGUMENTS
    """
    # --- option errors (211xx) ---
    UNKNOWN_OPTION          = 21101
    REDUNDANT_OPTION        = 21102
    MISSING_ARGUMENT        = 21103
    UNEXPECTED_ARGUMENT     = 21104
    OPTION_NOT_EATEN        = 21105

    # --- positional errors (211xx) ---
    INVALID_POSITIONAL      = 21121
    POSITIONAL_NOT_EATEN    = 21122
    POSITIONAL_COUNT        = 21123

    # --- fatal conditions (221xx) ---
    DUPLICATE_OPTION        = 22101
    STACK_OVERFLOW          = 22102
    CALLBACK_RESULT         = 22103
    SINK_WRITE              = 22104
    EMPTY_ARGUMENTS         = 22105

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseFault(Exception):
    """
    base of every fault raised while parsing.

    a fault carries its message plus a read-only mapping of context options
    (path, colorful, and whatever the raiser attached: option, text, ...).
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            "path": "bold #E6E6F0",
            "error-message": "#FF4DA6" if isinstance(self, FatalError) else "#C8C8D0",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style):
            return Text(str(fragment), styles[style] if colorful else "")

        if not (path := self.options.get("path")):
            return text(self.message, "error-message")
        return Text.assemble(text(path, "path"), ": ", text(self.message, "error-message"))

    def __str__(self):
        if path := self.options.get("path"):
            return "%s: %s" % (path, self.message)
        return str(self.message)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UserError(ParseFault): ...


class UnknownOptionError(UserError):
    code = FaultCode.UNKNOWN_OPTION


class RedundantOptionError(UserError):
    code = FaultCode.REDUNDANT_OPTION


class MissingArgumentError(UserError):
    code = FaultCode.MISSING_ARGUMENT


class UnexpectedArgumentError(UserError):
    code = FaultCode.UNEXPECTED_ARGUMENT


class OptionNotEatenError(UserError):
    code = FaultCode.OPTION_NOT_EATEN


class InvalidPositionalError(UserError):
    code = FaultCode.INVALID_POSITIONAL


class PositionalNotEatenError(UserError):
    code = FaultCode.POSITIONAL_NOT_EATEN


class PositionalCountError(UserError):
    code = FaultCode.POSITIONAL_COUNT


class FatalError(ParseFault): ...


class DuplicateOptionError(FatalError):
    code = FaultCode.DUPLICATE_OPTION


class CommandStackOverflowError(FatalError):
    code = FaultCode.STACK_OVERFLOW


class CallbackResultError(FatalError):
    code = FaultCode.CALLBACK_RESULT


class SinkWriteError(FatalError):
    code = FaultCode.SINK_WRITE


class EmptyArgumentsError(FatalError):
    code = FaultCode.EMPTY_ARGUMENTS


def trigger(fault, console, /, **options):
    """
    surface a fault on a rich console with the given runtime options.

    contract
    - options are merged into the fault via copy.replace() before rendering,
      so the caller can attach the command path and colour preference late.
    - a console that cannot be written to raises SinkWriteError (fatal).
    """
    if not isinstance(fault, ParseFault):
        raise TypeError("trigger() argument must be a parse fault")
    try:
        console.print(copy.replace(fault, **options), highlight=False, soft_wrap=True)
    except OSError as exception:
        raise SinkWriteError("cannot write to console: %s" % exception) from exception


__all__ = (
    "FaultCode",
    "ParseFault",
    "UserError",
    "UnknownOptionError",
    "RedundantOptionError",
    "MissingArgumentError",
    "UnexpectedArgumentError",
    "OptionNotEatenError",
    "InvalidPositionalError",
    "PositionalNotEatenError",
    "PositionalCountError",
    "FatalError",
    "DuplicateOptionError",
    "CommandStackOverflowError",
    "CallbackResultError",
    "SinkWriteError",
    "EmptyArgumentsError",
    "trigger",
)
