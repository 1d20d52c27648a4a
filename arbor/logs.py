"""
Verbosity levels and per-program logging configuration.

A program carries its own LogConfig instead of a process-wide verbosity
variable; the built-in --verbosity, -v and -q options act on that object,
so two parses never leak verbosity into each other.
"""
import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler

from .utils import Unset, coalesce


class Verbosity(IntEnum):
    """
    verbosity levels, ordered from quietest to loudest.

    every level accepts its digit, its initial and its name as spelling:
    '0|s|silent', '1|f|fatal', '2|e|error', '3|w|warn', '4|i|info', '5|d|debug'.
    """
    SILENT = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5

    @property
    def level(self):
        """
        the stdlib logging level this verbosity maps to.
        """
        return {
            Verbosity.SILENT: logging.CRITICAL + 10,
            Verbosity.FATAL: logging.CRITICAL,
            Verbosity.ERROR: logging.ERROR,
            Verbosity.WARN: logging.WARNING,
            Verbosity.INFO: logging.INFO,
            Verbosity.DEBUG: logging.DEBUG,
        }[self]

    @classmethod
    def parse(cls, value, default=Unset, /):
        """
        resolve a user-typed verbosity; anything unknown falls back to default
        (INFO unless given).

        an absent or empty value also yields the default.
        """
        default = coalesce(default, cls.INFO)
        if not value:
            return cls(default)

        if len(value) == 1 and value.isdigit():
            try:
                return cls(int(value))
            except ValueError:
                return cls(default)

        value = value.lower()
        for member in cls:
            if value in (member.name.lower(), member.name[0].lower()):
                return member
        return cls(default)


class LogConfig:
    """
    Mutable verbosity holder bound to the loggers it was installed on.

    Changing the verbosity immediately re-levels every installed logger.
    """

    def __init__(self, verbosity=Verbosity.INFO):
        self._verbosity = Verbosity(verbosity)
        self._loggers = []

    @property
    def verbosity(self):
        return self._verbosity

    @verbosity.setter
    def verbosity(self, value):
        self._verbosity = Verbosity(min(max(int(value), Verbosity.SILENT), Verbosity.DEBUG))
        for logger in self._loggers:
            logger.setLevel(self._verbosity.level)

    def louder(self):
        if self._verbosity < Verbosity.DEBUG:
            self.verbosity = self._verbosity + 1

    def quieter(self):
        if self._verbosity > Verbosity.SILENT:
            self.verbosity = self._verbosity - 1

    def install(self, logger=Unset, /, *, console=Unset):
        """
        attach a RichHandler to logger (the root logger by default) and keep
        its level in sync with this configuration.

        installing twice on the same logger is a no-op.
        """
        logger = coalesce(logger, logging.getLogger())
        if logger not in self._loggers:
            logger.addHandler(RichHandler(
                console=coalesce(console, Console(stderr=True)),
                show_time=False,
                show_path=False,
                markup=False,
            ))
            self._loggers.append(logger)
        logger.setLevel(self._verbosity.level)
        return logger

    def __repr__(self):
        return "LogConfig(verbosity=%s)" % self._verbosity.name


__all__ = (
    "Verbosity",
    "LogConfig",
)
