"""
Command path tracking.

The stack records, from the program root down to the active sub-command, the
token text that selected each scope and the command it resolved to. It has a
fixed capacity, which also bounds the recursion depth of the parse driver.
"""
from .faults import CommandStackOverflowError


class CommandStack:
    """
    Bounded, push-only chain of (token text, command) pairs.

    Index 0 is the program itself (named after argv[0]); the last entry is the
    scope being parsed. Entries are never popped: a failed parse abandons the
    whole stack.
    """
    __slots__ = ("_names", "_commands", "_capacity")

    def __init__(self, capacity=8, /):
        if capacity < 1:
            raise ValueError("command stack capacity must be a positive integer")
        self._names = []
        self._commands = []
        self._capacity = capacity

    @property
    def capacity(self):
        return self._capacity

    @property
    def names(self):
        return tuple(self._names)

    @property
    def commands(self):
        return tuple(self._commands)

    def push(self, name, command, /):
        """
        Enter a new scope; returns the new depth.

        Raises CommandStackOverflowError once the capacity is reached (the command
        tree is deeper than the program allows, which is a configuration defect).
        """
        if len(self._names) >= self._capacity:
            raise CommandStackOverflowError(
                "command path is deeper than %d levels" % self._capacity,
                name=name,
                command=command,
            )
        self._names.append(name)
        self._commands.append(command)
        return len(self._names)

    def last(self):
        """
        The command of the active scope; IndexError on an empty stack.
        """
        if not self._commands:
            raise IndexError("last() on an empty command stack")
        return self._commands[-1]

    def render(self):
        """
        Space-joined token texts from the root to the active scope.
        """
        return " ".join(self._names)

    def print(self, console, /):
        """
        Write the rendered path on a rich console (no trailing newline).

        Returns the number of characters written; an empty stack writes nothing
        and returns -1.
        """
        if not self._names:
            return -1
        console.print(text := self.render(), end="", markup=False, highlight=False, soft_wrap=True)
        return len(text)

    def __len__(self):
        return len(self._names)

    def __iter__(self):
        return zip(self._names, self._commands)

    def __repr__(self):
        return "CommandStack(%r, capacity=%d)" % (self.render(), self._capacity)


__all__ = (
    "CommandStack",
)
