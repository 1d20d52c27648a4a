r"""
Arbor descriptors: options, commands and the program root.

Overview
- Option: static definition of one option (long name, short key, value label,
  repetition policy, help text). Group headers are options too (key 0, no
  name); they only exist for the help renderer.
- Command[_C]: one node of the command tree (options, sub-commands,
  positional spec, header/footer text, callback and its context).
- Program[_C]: the root command; adds the version string, the built-in
  suppression switches and the runtime configuration (consoles, logging,
  command-path capacity, help width).
- Eat: the outcome a callback returns for every (option, value) pair it is
  offered.
- command(...): decorator building a Command around a callback.

Descriptors are validated on construction and read-only afterwards: public
attributes are mirror() properties over private backing fields, and container
attributes come back as tuples.

Quick example:
    >>> from arbor.options import Option, Command, Program, Eat, command
    >>> @command("build", [Option("output", "o", "FILE")], args="INPUT")
    ... def build(option, value, context):
    ...     return Eat.OK
    ...
    >>> program = Program(options=[Option("verbose", "V")], commands=[build])
"""
import enum
import functools
import operator
import re

from rich.console import Console

from .logs import LogConfig
from .utils import *

VERSION_KEY = -(2 ** 31) + 1
"""
short key of the built-in --version option (never typeable on a command line).
"""

VERBOSITY_KEY = -(2 ** 31) + 2
"""
short key of the built-in --verbosity option (never typeable on a command line).
"""


class Eat(enum.Enum):
    """
    outcome of offering an (option, value) pair to a callback.

    - OK: consumed, keep parsing.
    - OK_EXIT: consumed and fully satisfied (e.g. a version was printed); the
      whole parse stops successfully and the host should exit zero.
    - UNRECOGNIZED: the positional value is invalid.
    - NOT_EATEN: the callback does not handle this option or positional.
    """
    OK = "ok"
    OK_EXIT = "ok-exit"
    UNRECOGNIZED = "unrecognized"
    NOT_EATEN = "not-eaten"


class DescriptorType(type):
    """
    Metaclass giving descriptors read-only attributes and stable representations.

    Responsibilities
    - Expose every name listed in __introspectable__ as a mirror() property
      over the matching "_<name>" backing field. Names listed in __verbatim__
      (here or in a base) hand out the stored object unfrozen.
    - Provide __repr__/__rich_repr__ limited to __displayable__ (or all
      introspectable names when unset).
    - Derive __typename__ from the class name for validation messages.
    """
    __introspectable__ = ()
    __displayable__ = Unset
    __verbatim__ = ()

    def __new__(cls, name, bases, namespace, **options):
        verbatim = set(namespace.get("__verbatim__", ()))
        for base in bases:
            verbatim.update(getattr(base, "__verbatim__", ()))

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name, frozen=name not in verbatim)
                for name in namespace.get("__introspectable__", ())
            },
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)

        self.__repr__ = __repr__
        self.__rich_repr__ = __rich_repr__
        return self


def _sanitize_text(cls, metadata, name, /):
    """
    Internal: optional free text must be Unset or a non-empty string; Unset becomes None.
    """
    if not isinstance(text := metadata[name], str | Unset):
        raise TypeError(f"{cls.__typename__} '{name}' must be a string")
    elif isinstance(text, str) and not text.strip():
        raise ValueError(f"{cls.__typename__} '{name}' cannot be empty")
    metadata[name] = coalesce(text)


def _sanitize_option_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the identity of an option.

    Rules
    - name: Unset or a non-empty string without leading dashes, '=' or whitespace.
    - key: Unset, a single printable character other than '-' and '=', or an
      integer sentinel (0 is reserved for group headers).
    - arg: Unset or a non-empty label; its presence makes the option take a value.
    - at least one of name/key must be given.
    """
    if not isinstance(name := metadata["name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif isinstance(name, str) and not re.fullmatch(r"[^\s=-][^\s=]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a bare long name (for example: 'output')")

    key = metadata["key"]
    if isinstance(key, bool) or not isinstance(key, str | int | Unset):
        raise TypeError(f"{cls.__typename__} 'key' must be a character or an integer")
    elif isinstance(key, str) and (len(key) != 1 or not key.isprintable() or key in "-= "):
        raise ValueError(f"{cls.__typename__} 'key' must be a single printable character")
    elif key == 0:
        raise ValueError(f"{cls.__typename__} 'key' 0 is reserved for group headers")

    if name is Unset and key is Unset:
        raise TypeError(f"{cls.__typename__} must specify a name or a key")

    _sanitize_text(cls, metadata, "arg")
    _sanitize_text(cls, metadata, "help")

    metadata["name"] = coalesce(name)
    metadata["key"] = coalesce(key)
    metadata["multiple"] = bool(metadata["multiple"])


class Option(metaclass=DescriptorType):
    """
    Static definition of one option.

    Examples
    - Option("output", "o", "FILE")  → -o FILE, -oFILE, --output FILE, --output=FILE
    - Option("force", "f")           → -f, --force (boolean flag)
    - Option(key="v", multiple=True) → -v, -vvv
    - Option.header("Output")        → group header, help only
    """

    __introspectable__ = (
        "name",
        "key",
        "arg",
        "multiple",
        "help",
    )

    def __init__(self, name=Unset, /, key=Unset, arg=Unset, *, multiple=False, help=Unset):
        metadata = {
            "name": name,
            "key": key,
            "arg": arg,
            "multiple": multiple,
            "help": help,
        }
        _sanitize_option_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @classmethod
    def header(cls, title=Unset, /):
        """
        Build a group header pseudo-option: key 0, no name, the title as help.
        """
        self = cls.__new__(cls)
        metadata = {"arg": Unset, "help": title}
        _sanitize_text(cls, metadata, "arg")
        _sanitize_text(cls, metadata, "help")
        self._name = None
        self._key = 0
        self._arg = None
        self._multiple = False
        self._help = metadata["help"]
        return self

    @property
    def is_header(self):
        return self._key == 0 and self._name is None

    @property
    def takes_value(self):
        return self._arg is not None

    @property
    def short(self):
        """
        the typeable short character, or None for long-only and sentinel keys.
        """
        return self._key if isinstance(self._key, str) else None

    @property
    def label(self):
        """
        how the option is quoted in messages: '-o/--output', '-o' or '--output'.
        """
        if self.short and self._name:
            return "-%s/--%s" % (self.short, self._name)
        if self.short:
            return "-" + self.short
        return "--" + str(self._name)


def _sanitize_command_metadata(cls, metadata, /):
    """
    Internal: validate a command node.

    Rules
    - name: Unset or a non-empty string without whitespace (the root may leave it
      Unset; it is then taken from argv[0] at parse time).
    - options: iterable of Option, frozen into a tuple.
    - commands: iterable of Command with unique names, frozen into a tuple.
    - args: Unset or a string (one alternative usage line per '\n').
    - eat / entrypoint: Unset or a callable.
    """
    if not isinstance(name := metadata["name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif isinstance(name, str) and not re.fullmatch(r"\S+", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a single non-empty word")
    metadata["name"] = coalesce(name)

    options = tuple(metadata["options"] or ())
    for option in options:
        if not isinstance(option, Option):
            raise TypeError(f"{cls.__typename__} 'options' must only contain options")
    metadata["options"] = options

    commands = tuple(metadata["commands"] or ())
    names = set()
    for command in commands:
        if not isinstance(command, Command):
            raise TypeError(f"{cls.__typename__} 'commands' must only contain commands")
        elif command.name is None:
            raise ValueError(f"{cls.__typename__} sub-commands must be named")
        elif command.name in names:
            raise ValueError(f"{cls.__typename__} sub-command {command.name!r} is declared twice")
        names.add(command.name)
    metadata["commands"] = commands

    if not isinstance(metadata["args"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'args' must be a string")
    metadata["args"] = coalesce(metadata["args"])

    _sanitize_text(cls, metadata, "header")
    _sanitize_text(cls, metadata, "footer")

    for name in ("eat", "entrypoint"):
        if metadata[name] is not Unset and not callable(metadata[name]):
            raise TypeError(f"{cls.__typename__} '{name}' must be callable")
        metadata[name] = coalesce(metadata[name])
    metadata["context"] = coalesce(metadata["context"])


class Command[_C](metaclass=DescriptorType):
    """
    One node of the command tree.

    The callback receives (option, value, context) where option is None for
    positionals, value is None for flags, and context is the object given at
    construction (the same object every time, never a copy). It must return
    an Eat member.

    The entrypoint is never called by the parser: once parse() resolved the
    deepest command, the host runs it as entrypoint(program, command).
    """

    __introspectable__ = (
        "name",
        "options",
        "commands",
        "args",
        "header",
        "footer",
        "eat",
        "context",
        "entrypoint",
    )
    __displayable__ = (
        "name",
        "args",
        "options",
        "commands",
    )
    __verbatim__ = (
        "eat",
        "context",
        "entrypoint",
    )

    def __init__(
            self,
            name=Unset,
            /,
            options=(),
            commands=(),
            args=Unset,
            *,
            header=Unset,
            footer=Unset,
            eat=Unset,
            context=Unset,
            entrypoint=Unset,
    ):
        metadata = {
            "name": name,
            "options": options,
            "commands": commands,
            "args": args,
            "header": header,
            "footer": footer,
            "eat": eat,
            "context": context,
            "entrypoint": entrypoint,
        }
        _sanitize_command_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def find(self, name, /):
        """
        Return the direct sub-command named exactly 'name', or None.
        """
        if name is None:
            return None
        for command in self._commands:
            if command.name == name:
                return command
        return None


def _ensure_acyclic(command, /, path=()):
    """
    Internal: reject command trees where a command is reachable from itself.
    """
    if any(command is step for step in path):
        raise ValueError("command tree cannot contain cycles (%r)" % command.name)
    for child in command.commands:
        _ensure_acyclic(child, path + (command,))


class Program[_C](Command[_C]):
    """
    Root command of a tree, plus the runtime configuration of a parse.

    Parameters (keyword-only, beyond Command's)
    - version (Unset | str): enables the built-in --version option.
    - no_help / no_usage / no_logging (bool): suppress -h/--help, -?/--usage and
      --verbosity/-v/-q respectively.
    - max_depth (int): capacity of the command path (root included).
    - colorful (bool): colour rejection messages.
    - stdout / stderr (Unset | Console): where help/version and rejections go.
    - logconfig (Unset | LogConfig): verbosity holder driven by the built-ins.
    - linesize (int): wrap width of the help text.
    """

    __introspectable__ = Command.__introspectable__ + (
        "version",
        "no_help",
        "no_usage",
        "no_logging",
        "max_depth",
        "colorful",
        "stdout",
        "stderr",
        "logconfig",
        "linesize",
    )
    __displayable__ = Command.__displayable__ + (
        "version",
    )

    def __init__(
            self,
            name=Unset,
            /,
            options=(),
            commands=(),
            args=Unset,
            *,
            header=Unset,
            footer=Unset,
            eat=Unset,
            context=Unset,
            entrypoint=Unset,
            version=Unset,
            no_help=False,
            no_usage=False,
            no_logging=False,
            max_depth=8,
            colorful=False,
            stdout=Unset,
            stderr=Unset,
            logconfig=Unset,
            linesize=79,
    ):
        super().__init__(
            name,
            options,
            commands,
            args,
            header=header,
            footer=footer,
            eat=eat,
            context=context,
            entrypoint=entrypoint,
        )
        cls = type(self)

        if not isinstance(version, str | Unset):
            raise TypeError(f"{cls.__typename__} 'version' must be a string")
        if isinstance(max_depth, bool) or not isinstance(max_depth, int):
            raise TypeError(f"{cls.__typename__} 'max_depth' must be an integer")
        elif max_depth < 1:
            raise ValueError(f"{cls.__typename__} 'max_depth' must be a positive integer")
        if isinstance(linesize, bool) or not isinstance(linesize, int):
            raise TypeError(f"{cls.__typename__} 'linesize' must be an integer")
        elif linesize < 20:
            raise ValueError(f"{cls.__typename__} 'linesize' must be at least 20")
        for console in (stdout, stderr):
            if not isinstance(console, Console | Unset):
                raise TypeError(f"{cls.__typename__} consoles must be rich consoles")
        if not isinstance(logconfig, LogConfig | Unset):
            raise TypeError(f"{cls.__typename__} 'logconfig' must be a LogConfig")

        _ensure_acyclic(self)

        self._version = coalesce(version)
        self._no_help = bool(no_help)
        self._no_usage = bool(no_usage)
        self._no_logging = bool(no_logging)
        self._max_depth = max_depth
        self._colorful = bool(colorful)
        self._stdout = coalesce(stdout, Console())
        self._stderr = coalesce(stderr, Console(stderr=True))
        self._logconfig = coalesce(logconfig, LogConfig())
        self._linesize = linesize


def command(name=Unset, /, *args, **kwargs):
    """
    Build a Command around a callback.

    Invocation modes
    - Decorator:
        @command("build", [Option("output", "o", "FILE")], args="INPUT")
        def build(option, value, context): ...
    - Direct:
        build = command("build", eat=callback)

    Every other Command keyword (context, entrypoint, ...) is forwarded.

    Returns
    - Command when 'eat' is passed directly, otherwise a decorator producing one.
    """
    if "eat" in kwargs:
        return Command(name, *args, **kwargs)

    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return Command(coalesce(name, callback.__name__), *args, eat=callback, **kwargs)

    return wrapper


__all__ = (
    "VERSION_KEY",
    "VERBOSITY_KEY",
    "Eat",
    "Option",
    "Command",
    "Program",
    "command",
)
