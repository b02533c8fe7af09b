"""
Fluentopt faults (parse failures, grammar failures) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the library
  raises. Codes are grouped by domain (input vs. grammar construction).
- ArgumentParseException: base type of the parse-failure family. It carries a
  message plus options and knows how to render itself with rich.
  • UnknownArgumentError: a token matched no option key, no command and no free
    positional slot.
  • MissingValueError: an option that expects a value was the last token.
  • MissingArgumentError: one or more mandatory entities stayed unbound; all of
    them are reported at once.
- GrammarError: base type of programmer errors raised while a grammar is built.
  • InvalidArgumentError (ValueError), IllegalStateError (RuntimeError),
    UnsupportedOperationError (TypeError).
- trigger(): central entry point to surface a parse failure (raise or render).

UX goals
- Position-first messages: input faults include the ordinal position of the
  offending token in the original stream (“at second position”).
- Lowercased, one-sentence bodies with a single hint quoting the expected syntax.

Integration
- Parser.parse() always raises. Parser.__invoke__() routes failures through
  trigger(fault, shell=..., fancy=..., colorful=...): in shell mode the fault is
  printed to stderr and the process exits with status 1.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - input (111xx): raised while a token stream is matched against a grammar
      • UNKNOWN_ARGUMENT, MISSING_VALUE, MISSING_ARGUMENT
    - grammar (121xx): raised while a grammar is assembled (programmer errors)
      • INVALID_ARGUMENT, ILLEGAL_STATE, UNSUPPORTED_OPERATION

    the host application can provide a __codes__ mapping in __main__ to override
    numeric ids with friendlier labels (see normalize()).
    """
    # --- input errors (111xx) ---
    UNKNOWN_ARGUMENT      = 11101
    MISSING_VALUE         = 11111
    MISSING_ARGUMENT      = 11121

    # --- grammar errors (121xx) ---
    INVALID_ARGUMENT      = 12101
    ILLEGAL_STATE         = 12111
    UNSUPPORTED_OPERATION = 12121

    def normalize(self):
        """
        return a host-normalized string for this code.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _program():
    main = __import__("__main__")
    return getattr(main, "__prog__", os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "fluentopt")


class ArgumentParseException(Exception):
    """
    Base class of every failure raised while parsing a token stream.

    The message is the user-facing sentence; options carry the structured
    context (code, title, hint, index, and the offending token/option/arguments)
    plus the runtime rendering flags merged in by trigger().
    """
    code = Unset
    title = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)
        super().__init__(message)

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def index(self):
        """
        1-based position of the offending token in the original stream, or None.
        """
        return self.options.get("index")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(_program(), "prog-name"),
            " — ",
            text(self.options.get("code", self.code).normalize(), "code"),
            " | ",
            text(self.options.get("title", self.title).title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        parts = [message]
        if self.hint:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownArgumentError(ArgumentParseException):
    code = FaultCode.UNKNOWN_ARGUMENT
    title = "unknown argument"

    @property
    def token(self):
        return self.options.get("token")


class MissingValueError(ArgumentParseException):
    code = FaultCode.MISSING_VALUE
    title = "missing value"

    @property
    def option(self):
        return self.options.get("option")


class MissingArgumentError(ArgumentParseException):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing arguments"

    @property
    def arguments(self):
        """
        Every unresolved mandatory entity, in declaration order.
        """
        return tuple(self.options.get("arguments", ()))

    @property
    def names(self):
        return tuple(argument.name for argument in self.arguments)


class GrammarError(Exception):
    """
    Base class of programmer errors raised while a grammar is being assembled.

    These are not routed through trigger(): they are expected to terminate the
    program setup, not to be shown to the end user.
    """
    code = Unset

    def __init__(self, message, /):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(GrammarError, ValueError):
    code = FaultCode.INVALID_ARGUMENT


class IllegalStateError(GrammarError, RuntimeError):
    code = FaultCode.ILLEGAL_STATE


class UnsupportedOperationError(GrammarError, TypeError):
    code = FaultCode.UNSUPPORTED_OPERATION


def trigger(fault, /, **options):
    """
    surface a parse failure with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ArgumentParseException).
    - options are merged into the fault via copy.replace(...) before triggering.
    - in shell mode the fault is rendered via the rich console and the process exits;
      otherwise the merged exception is raised.

    typical options
    - shell, fancy, colorful, and any context the renderer may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ArgumentParseException",
    "UnknownArgumentError",
    "MissingValueError",
    "MissingArgumentError",
    "GrammarError",
    "InvalidArgumentError",
    "IllegalStateError",
    "UnsupportedOperationError",
    "trigger",
)
