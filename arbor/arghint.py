"""
Positional-arity hints.

A command's positional spec is free text with one alternative usage line per
'\\n'; every whitespace-separated word on a line is one placeholder. The hint
only counts placeholders: names are never bound to values.

    "SOURCE DEST\\nFILE" accepts exactly 2 or exactly 1 positional
    "\\nINPUT OUTPUT"    accepts exactly 0 or exactly 2 positionals
    None                accepts any count, zero included
"""
from .utils import Unset


class ArityHint:
    """
    Precomputed set of accepted positional counts for one scope.
    """
    __slots__ = ("_counts",)

    def __init__(self, counts=Unset, /):
        self._counts = None if counts is Unset else frozenset(counts)

    @classmethod
    def parse(cls, spec, /):
        if spec is None:
            return cls()
        if not isinstance(spec, str):
            raise TypeError("ArityHint.parse() argument must be a string or None")
        return cls(len(line.split()) for line in spec.split("\n"))

    @property
    def counts(self):
        """
        accepted counts, or None when any count is accepted.
        """
        return self._counts

    def validate(self, count, /):
        """
        tell whether 'count' positionals satisfy at least one alternative.
        """
        if self._counts is None:
            return True
        return count in self._counts

    def __repr__(self):
        if self._counts is None:
            return "ArityHint(*)"
        return "ArityHint(%s)" % "|".join(map(str, sorted(self._counts)))


__all__ = (
    "ArityHint",
)
