"""
Recursive-descent parse driver.

What this module provides
- Parser: walks an argument vector against a Program tree, one scope per
  command on the path, dispatching every accepted option and positional to
  the owning command's callback.
- parse(program, argv): one-shot helper returning a Result and rendering any
  rejection on the program's stderr console.
- Status / Result: the outcome of a parse.

Per-scope procedure
1. Layer the scope's options over its ancestors' in the shared option table
   (the root scope also gets the enabled built-ins).
2. Precompute the arity hint of the scope's positional spec.
3. Pull tokens until the end:
   • unknown option                → rejection
   • positional naming a sub-command → push it and recurse; the parent scope ends here
   • other positional              → count it, dispatch (None, text)
   • option                        → redundancy, missing-argument and
                                     unexpected-argument checks, in that order,
                                     then dispatch (option, value)
4. Validate the positional count against the hint.

Dispatch offers the pair to the built-in handlers first (version, help, usage,
verbosity), then to the callback of the command owning the option (the
current scope for positionals). The callback's Eat answer drives the loop.

Faults raised anywhere in the recursion abort every enclosing scope at once.
"""
import copy
import enum
import logging
import sys
from typing import NamedTuple

from . import builtin
from . import help
from .arghint import ArityHint
from .cmdstack import CommandStack
from .faults import *
from .optiondb import OptionDB
from .options import Command, Eat
from .tokenizer import TokenKind, Tokenizer
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class Status(enum.Enum):
    """
    outcome of a whole parse.

    - OK: the command line was fully consumed.
    - OK_EXIT: a handler satisfied the request (help, version...); exit zero.
    - USER_ERROR: the command line was rejected.
    - FATAL: the command tree or the environment is broken.
    """
    OK = "ok"
    OK_EXIT = "ok-exit"
    USER_ERROR = "user-error"
    FATAL = "fatal"


class Result(NamedTuple):
    """
    status, deepest command reached (None on failure) and the command path.
    """
    status: Status
    command: Command | None
    path: tuple[str, ...]


class Parser:
    """
    Single-use parse of one argument vector against one program.

    The option table and the command stack are owned by the parser and stay
    queryable afterwards (the table is emptied when the parse ends, the stack
    is kept for renderers and error prefixes).
    """

    def __init__(self, program, argv, /):
        self.program = program
        self.db = OptionDB()
        self.stack = CommandStack(program.max_depth)
        self._argv = tuple(argv)
        self._tokenizer = Unset

    def run(self):
        """
        Parse, raising the first fault met.

        Returns (Status.OK | Status.OK_EXIT, deepest command).
        """
        if self.stack:
            raise RuntimeError("a parser can only run once")
        if not self._argv:
            raise EmptyArgumentsError("empty argument vector")

        try:
            self._tokenizer = Tokenizer(self._argv[1:], self.db)
            self.stack.push(self._argv[0], self.program)
            status = self._scope()
        except ParseFault as fault:
            raise copy.replace(fault, path=self.stack.render()).with_traceback(fault.__traceback__) from None
        finally:
            self.db.clear()

        return status, self.stack.last()

    def parse(self):
        """
        Parse and report: rejections are rendered on stderr followed by a
        “Try ... --help” line; fatal conditions are logged.
        """
        try:
            status, command = self.run()
        except UserError as fault:
            logger.debug("command line rejected: %s", fault)
            try:
                trigger(fault, self.program.stderr, colorful=self.program.colorful)
                self.try_help()
            except SinkWriteError as exception:
                logger.error("%s", exception)
                return Result(Status.FATAL, None, self.stack.names)
            return Result(Status.USER_ERROR, None, self.stack.names)
        except FatalError as fault:
            logger.error("%s", fault)
            return Result(Status.FATAL, None, self.stack.names)

        return Result(status, command, self.stack.names)

    def try_help(self):
        """
        Print “Try `prog --help' or `prog --usage' for more information.” on stderr,
        mentioning only the enabled built-ins.
        """
        if not self.stack:
            return False

        path = self.stack.render()
        hints = []
        if not self.program.no_help:
            hints.append("`%s --help'" % path)
        if not self.program.no_usage:
            hints.append("`%s --usage'" % path)
        if not hints:
            return False

        try:
            self.program.stderr.print(
                "Try %s for more information." % " or ".join(hints),
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
        except OSError as exception:
            raise SinkWriteError("cannot write to console: %s" % exception) from exception
        return True

    def print_path(self, console, /):
        """
        Write the command path (names joined by single spaces) on 'console'.
        """
        try:
            return self.stack.print(console)
        except OSError as exception:
            raise SinkWriteError("cannot write to console: %s" % exception) from exception

    def _scope(self):
        command = self.stack.last()

        if len(self.stack) == 1:
            self.db.insert_all(builtin.enabled(self.program), command)
        else:
            self.db.checkpoint()
        self.db.insert_all(command.options, command)

        hint = ArityHint.parse(command.args)
        positionals = 0
        logger.debug("entering scope %r (positionals: %r)", self.stack.render(), hint)

        while (token := self._tokenizer.next()).kind is not TokenKind.END:
            match token.kind:
                case TokenKind.UNKNOWN:
                    raise UnknownOptionError("invalid option -- '%s'" % token.text, text=token.text)
                case TokenKind.POSITIONAL:
                    if (child := command.find(token.text)) is not None:
                        logger.debug("sub-command %r selected", token.text)
                        self.stack.push(token.text, child)
                        return self._scope()
                    positionals += 1
                    status = self._dispatch(command, None, token.text)
                case TokenKind.OPTION:
                    status = self._option(token)
                case _:
                    raise RuntimeError("unexpected token %r" % (token,))

            if status is Status.OK_EXIT:
                logger.debug("exit requested in scope %r", self.stack.render())
                return status

        if not hint.validate(positionals):
            raise PositionalCountError(
                "invalid positional arguments count",
                count=positionals,
                accepted=hint.counts,
            )
        return Status.OK

    def _option(self, token):
        info = token.info
        option = info.option
        value = token.text

        if not option.multiple and info.occurrences > 1:
            raise RedundantOptionError("redundant option -- '%s'" % option.label, option=option)

        if option.takes_value:
            if value is None:
                if (ahead := self._tokenizer.next()).kind is not TokenKind.POSITIONAL:
                    raise MissingArgumentError(
                        "option requires an argument -- '%s'" % option.label,
                        option=option,
                    )
                value = ahead.text
        elif value is not None:
            raise UnexpectedArgumentError(
                "no argument allowed for option -- '%s'" % option.label,
                option=option,
                value=value,
            )

        return self._dispatch(info.command, option, value)

    def _eat(self, command, option, value):
        """
        Offer a pair to the built-ins, then to the command's callback.
        """
        program = self.program

        if option is not None:
            if program.version and option is builtin.OPT_VERSION:
                try:
                    program.stdout.print(program.version, markup=False, highlight=False, soft_wrap=True)
                except OSError as exception:
                    raise SinkWriteError("cannot write to console: %s" % exception) from exception
                return Eat.OK_EXIT

            if not program.no_help and option is builtin.OPT_HELP:
                help.print_help(self)
                return Eat.OK_EXIT

            if not program.no_usage and option is builtin.OPT_USAGE:
                help.print_usage(self)
                return Eat.OK_EXIT

            if not program.no_logging:
                if option is builtin.OPT_VERBOSITY:
                    builtin.verbosity(program.logconfig, value)
                    return Eat.OK
                if option is builtin.OPT_VERBOSE:
                    program.logconfig.louder()
                    return Eat.OK
                if option is builtin.OPT_QUIET:
                    program.logconfig.quieter()
                    return Eat.OK

        if command.eat is None:
            return Eat.NOT_EATEN
        return command.eat(option, value, command.context)

    def _dispatch(self, command, option, value):
        outcome = self._eat(command, option, value)
        logger.debug("dispatched (%s, %r) to %r: %s",
                     option.label if option else None, value, command.name, outcome)

        match outcome:
            case Eat.OK:
                return Status.OK
            case Eat.OK_EXIT:
                return Status.OK_EXIT
            case Eat.UNRECOGNIZED:
                text = value if value is not None else option.label
                raise InvalidPositionalError("invalid argument -- '%s'" % text, option=option, text=text)
            case Eat.NOT_EATEN if option is None:
                raise PositionalNotEatenError("argument not eaten -- '%s'" % value, text=value)
            case Eat.NOT_EATEN:
                raise OptionNotEatenError("option not eaten -- '%s'" % option.label, option=option)
            case _:
                raise CallbackResultError(
                    "callback of %r returned %r instead of an Eat outcome" % (command.name, outcome),
                    command=command,
                    outcome=outcome,
                )


def parse(program, argv=Unset, /):
    """
    Parse argv (sys.argv by default) against program and return a Result.

    Rejections are printed on program.stderr as “<path>: <message>” followed by
    the “Try ... --help” line; the host is expected to exit non-zero on
    Status.USER_ERROR and Status.FATAL, and zero on Status.OK_EXIT.
    """
    return Parser(program, coalesce(argv, sys.argv)).parse()


__all__ = (
    "Status",
    "Result",
    "Parser",
    "parse",
)
