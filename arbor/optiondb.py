"""
Option lookup table.

One table lives for the duration of a parse and is shared by every scope: a
sub-command's options are layered on top of its ancestors' ones, so a child
still accepts its parents' options. Each scope opens a checkpoint before
inserting; duplicate detection only looks at entries inserted since the last
checkpoint, and lookups scan newest-first so an inner scope may shadow an
ancestor's option of the same name or key.

The table is small (tens of entries at most), so lookups are plain linear
scans with exact matching: no hashing, no abbreviations.
"""
import logging

from .faults import DuplicateOptionError

logger = logging.getLogger(__name__)


class OptionInfo:
    """
    One table entry: the option, the command that owns it and how many tokens
    resolved to it so far.
    """
    __slots__ = ("option", "command", "occurrences")

    def __init__(self, option, command, /):
        self.option = option
        self.command = command
        self.occurrences = 0

    def __repr__(self):
        return "OptionInfo(%s, command=%r, occurrences=%d)" % (
            self.option.label, self.command.name, self.occurrences
        )


class OptionDB:
    """
    Ordered collection of OptionInfo entries with per-scope checkpoints.
    """
    __slots__ = ("_entries", "_mark")

    def __init__(self):
        self._entries = []
        self._mark = 0

    def checkpoint(self):
        """
        Open a new scope: later insertions are only checked against each other.
        """
        self._mark = len(self._entries)
        return self._mark

    def insert(self, option, command, /):
        """
        Register 'option' as owned by 'command' in the current scope.

        Headers are ignored. A name or key already registered in the current
        scope raises DuplicateOptionError: this is a defect of the command tree,
        not of the user's input.
        """
        if option.is_header:
            return None

        for info in self._entries[self._mark:]:
            if option.name is not None and info.option.name == option.name:
                raise DuplicateOptionError(
                    "option '--%s' is declared twice in command %r" % (option.name, command.name),
                    option=option,
                    command=command,
                )
            if option.key is not None and info.option.key == option.key:
                raise DuplicateOptionError(
                    "option key %r is declared twice in command %r" % (option.key, command.name),
                    option=option,
                    command=command,
                )

        self._entries.append(info := OptionInfo(option, command))
        return info

    def insert_all(self, options, command, /):
        """
        Register every option of a command; returns the number of entries added.
        """
        count = 0
        for option in options:
            if self.insert(option, command) is not None:
                count += 1
        logger.debug("registered %d option(s) of %r", count, command.name)
        return count

    def find_by_name(self, name, /):
        for info in reversed(self._entries):
            if info.option.name is not None and info.option.name == name:
                return info
        return None

    def find_by_key(self, key, /):
        for info in reversed(self._entries):
            if info.option.key is not None and info.option.key == key:
                return info
        return None

    def clear(self):
        """
        Release every entry (end of parse).
        """
        self._entries.clear()
        self._mark = 0

    def __iter__(self):
        return iter(tuple(self._entries))

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return "OptionDB(%d entries, scope from %d)" % (len(self._entries), self._mark)


__all__ = (
    "OptionInfo",
    "OptionDB",
)
