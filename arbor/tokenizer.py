r"""
GNU-style token classification.

The tokenizer walks an argument vector lazily, one token per next() call,
and consults the live option table to decide what each argument means. It
keeps a cursor made of the argument index and, while inside a cluster of
short options, the offset of the next character to read.

Rules, evaluated in order on every call
1. nothing left                       → END
2. '--'                               → consumed; everything after is positional
3. '--name' / '--name=value'          → long option, looked up by exact name
4. '-x'                               → short option, looked up by key
5. '-abc' / '-ofile' / '-o=file'      → cluster: flags are classified one per call;
                                        the first value-taking key swallows the rest
                                        of the argument as its value, and '=' right
                                        after a key makes the remainder its value
6. anything else, including '-'       → POSITIONAL

An option token without text means "no inline value": it is up to the driver
to fetch the next token as the value. The tokenizer never guesses.
"""
import enum
import logging
from typing import NamedTuple

logger = logging.getLogger(__name__)


class TokenKind(enum.Enum):
    END = "end"
    OPTION = "option"
    POSITIONAL = "positional"
    UNKNOWN = "unknown"


class Token(NamedTuple):
    """
    One classified unit of the argument vector.

    - kind: what the token is.
    - text: the inline value of an option (None when absent), the positional
      text, or the offending spelling of an unknown option ('-x', '--name').
    - info: the option table entry an OPTION token resolved to.
    """
    kind: TokenKind
    text: str | None = None
    info: object = None

    @property
    def length(self):
        return 0 if self.text is None else len(self.text)


class Tokenizer:
    """
    Lazy classifier over an argument vector (program name excluded).

    Every OPTION token bumps the occurrence counter of the table entry it
    resolved to, exactly once.
    """

    def __init__(self, argv, db, /):
        self._argv = tuple(argv)
        self._db = db
        self._index = 0
        self._offset = 0
        self._positional = False

    @property
    def index(self):
        """
        index of the argument the cursor is on.
        """
        return self._index

    @property
    def remaining(self):
        """
        arguments not consumed yet (a partly read cluster included).
        """
        return self._argv[self._index:]

    def _advance(self):
        self._index += 1
        self._offset = 0

    def _long(self, argument):
        name, separator, value = argument[2:].partition("=")
        self._advance()

        if (info := self._db.find_by_name(name)) is None:
            return Token(TokenKind.UNKNOWN, "--" + name)

        info.occurrences += 1
        return Token(TokenKind.OPTION, value if separator else None, info)

    def _short(self, argument, offset):
        key = argument[offset]
        after = offset + 1

        if (info := self._db.find_by_key(key)) is None:
            self._advance()
            return Token(TokenKind.UNKNOWN, "-" + key)

        info.occurrences += 1

        # '-o=file', or '-v=1' that the driver will reject for a flag
        if after < len(argument) and argument[after] == "=":
            self._advance()
            return Token(TokenKind.OPTION, argument[after + 1:], info)

        if info.option.takes_value:
            self._advance()
            return Token(TokenKind.OPTION, argument[after:] or None, info)

        if after < len(argument):
            self._offset = after
        else:
            self._advance()
        return Token(TokenKind.OPTION, None, info)

    def next(self):
        """
        Classify and consume the next token.
        """
        if self._offset:
            return self._short(self._argv[self._index], self._offset)

        if self._index >= len(self._argv):
            return Token(TokenKind.END)

        argument = self._argv[self._index]

        if self._positional:
            self._advance()
            return Token(TokenKind.POSITIONAL, argument)

        if argument == "--":
            logger.debug("'--' at argument %d, the rest is positional", self._index + 1)
            self._advance()
            self._positional = True
            return self.next()

        if argument.startswith("--"):
            return self._long(argument)

        if argument.startswith("-") and len(argument) > 1:
            return self._short(argument, 1)

        self._advance()
        return Token(TokenKind.POSITIONAL, argument)

    def __iter__(self):
        while (token := self.next()).kind is not TokenKind.END:
            yield token

    def __repr__(self):
        return "Tokenizer(index=%d, offset=%d, positional=%s)" % (
            self._index, self._offset, self._positional
        )


__all__ = (
    "TokenKind",
    "Token",
    "Tokenizer",
)
