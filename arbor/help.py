"""
Help and usage rendering for the active scope of a parse.

Layout (GNU argp flavoured)

    Usage: prog build [OPTION...] INPUT
       or: prog build [OPTION...] INPUT OUTPUT

    Header text, wrapped.

    Commands:
      clean

    Options:
      -h, --help          Give this help list and exit
      -o, --output=FILE   Output file, wrapped at the program's line size
                          with a hanging indent

    Footer text, wrapped.

Renderers build plain lines first (render_usage / render_help) and only then
write them on the program's stdout console, so they are easy to test.
"""
import textwrap

from .builtin import OPT_HELP, OPT_USAGE, OPT_VERBOSE, OPT_QUIET, OPT_VERBOSITY, OPT_VERSION
from .faults import SinkWriteError

MINGAP = 4


def _width(option):
    if option.name is None:
        return 0
    return len(option.name) + (len(option.arg) + 1 if option.arg else 0)


def _wrap(text, indent, linesize):
    """
    wrap text to linesize, continuation lines indented by 'indent' columns;
    the first line is expected to start at column 'indent' already.
    """
    lines = textwrap.wrap(" ".join(text.split()), width=max(linesize - indent, 10)) or [""]
    return ("\n" + " " * indent).join(lines)


def _builtins(parser):
    """
    built-in options shown for the active scope, in display order.
    """
    program = parser.program
    root = len(parser.stack) <= 1
    options = []
    if not program.no_help:
        options.append(OPT_HELP)
    if not program.no_usage:
        options.append(OPT_USAGE)
    if root and not program.no_logging:
        options.extend((OPT_VERBOSE, OPT_QUIET, OPT_VERBOSITY))
    if root and program.version:
        options.append(OPT_VERSION)
    return options


def _option_line(option, gap, linesize):
    pad = gap - _width(option)

    if option.short:
        line = "  -%s%s " % (option.short, "," if option.name else " ")
    else:
        line = " " * 6

    if option.name is None:
        line += "  " + " " * pad
    elif option.arg is None:
        line += "--%s%s" % (option.name, " " * pad)
    else:
        line += "--%s=%s%s" % (option.name, option.arg, " " * pad)

    if option.help:
        return line + _wrap(option.help, gap + 8, linesize)
    return line.rstrip()


def render_usage(parser, /):
    """
    Usage lines of the active scope: one per alternative of its positional spec.
    """
    path = parser.stack.render()
    command = parser.stack.last()

    if command.args is None:
        return ["Usage: %s [OPTION...]" % path]

    lines = []
    for index, alternative in enumerate(command.args.split("\n")):
        lines.append("%s %s [OPTION...]%s" % (
            "   or:" if index else "Usage:",
            path,
            " " + alternative.strip() if alternative.strip() else "",
        ))
    return lines


def render_help(parser, /):
    """
    Full help of the active scope: usage, header, sub-commands, options, footer.
    """
    linesize = parser.program.linesize
    command = parser.stack.last()
    builtins = _builtins(parser)
    options = list(command.options)

    lines = render_usage(parser)

    if command.header:
        lines.extend(("", _wrap(command.header, 0, linesize)))

    if command.commands:
        lines.extend(("", "Commands:"))
        lines.extend("  " + child.name for child in command.commands)

    gap = 8
    for option in builtins + options:
        if not option.is_header:
            gap = max(gap, _width(option) + MINGAP)

    lines.extend(("", "Options:"))
    for option in builtins + options:
        if option.is_header:
            lines.extend(("", _wrap(option.help, 0, linesize) if option.help else ""))
        else:
            lines.append(_option_line(option, gap, linesize))

    if command.footer:
        lines.extend(("", _wrap(command.footer, 0, linesize)))

    return lines


def _write(console, lines):
    try:
        for line in lines:
            console.print(line, markup=False, highlight=False, soft_wrap=True)
    except OSError as exception:
        raise SinkWriteError("cannot write to console: %s" % exception) from exception


def print_usage(parser, /):
    _write(parser.program.stdout, render_usage(parser))


def print_help(parser, /):
    _write(parser.program.stdout, render_help(parser))


__all__ = (
    "render_usage",
    "render_help",
    "print_usage",
    "print_help",
)
