"""
Arbor faults (build, parse and accessor errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and searches predictable.
- CommandException: base type that carries a message plus context options and
  knows how to render itself in a friendly, lowercased and actionable way.
- BuilderError family: raised while the command tree is declared (fail fast).
- ParseError family: produced by the parser and handed back inside a Failed
  outcome; never raised by the engine itself.
- Accessor errors: raised by ResultNode lookups on undeclared or mismatched names.
- trigger(): central entry point to surface a fault (raise it, or print it in shell mode).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: parse faults carry the ordinal position of the token
  that caused them (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
"""
import logging
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

logger = logging.getLogger(__name__)

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x): UNKNOWN_SUBCOMMAND
    - options (1111x): UNKNOWN_OPTION, ALREADY_PRESENT, MISSING_VALUE
    - positionals (1112x/1114x): MISSING_POSITIONAL, UNEXPECTED_ARGUMENT
    - builder (1310x): declaration-order and schema violations
    - accessors (1410x): lookups on a parse result

    normalize() lets the host remap codes to custom labels while keeping the
    numeric values stable.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_SUBCOMMAND          = 11102

    # --- option errors (11xxx) ---
    UNKNOWN_OPTION              = 11112
    ALREADY_PRESENT             = 11115
    MISSING_VALUE               = 11117

    # --- positional errors (11xxx) ---
    MISSING_POSITIONAL          = 11125
    UNEXPECTED_ARGUMENT         = 11141

    # --- builder errors (13xxx) ---
    OPTION_ORDER                = 13101
    MIXED_OPERANDS              = 13102
    VARIADIC_POSITION           = 13103
    MULTIPLE_DEFAULT            = 13104
    DUPLICATE_NAME              = 13105
    MALFORMED_NAME              = 13106

    # --- accessor errors (14xxx) ---
    INVALID_ARGUMENT            = 14101
    WRONG_ARGUMENT_KIND         = 14102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base fault: a lowercased message plus read-only context options.

    common options
    - title, code, hint: used by the renderer header/footer.
    - tool: the Command the fault belongs to (program name in the header).
    - input, index: offending token and its 1-based position (parse faults).
    - colorful, fancy, shell: rendering/surfacing switches (see trigger()).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __getattr__(self, name):
        # context options double as attributes (error.input, error.index, ...)
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __rich__(self):
        main = __import__("__main__")

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

        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style if colorful else "")

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", tool.root.name if tool else "arbor"), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", type(self).__name__)).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class BuilderError(CommandException, ValueError):
    """command tree declaration violated an ordering or schema rule."""

class OptionOrderError(BuilderError): ...
class MixedOperandsError(BuilderError): ...
class VariadicPositionError(BuilderError): ...
class MultipleDefaultError(BuilderError): ...
class DuplicateNameError(BuilderError): ...
class MalformedNameError(BuilderError): ...


class ParseError(CommandException):
    """malformed input; always delivered inside a Failed outcome."""

class UnknownOptionError(ParseError): ...
class UnknownSubcommandError(ParseError): ...
class MissingPositionalError(ParseError): ...
class MissingValueError(ParseError): ...
class AlreadyPresentError(ParseError): ...
class UnexpectedArgumentError(ParseError): ...


class InvalidArgumentError(CommandException, LookupError):
    """lookup of a name that was never declared on the command."""

class WrongArgumentKindError(CommandException, TypeError):
    """lookup through an accessor that does not match the argument's kind."""


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - with shell=True the fault is rendered on stderr via the rich console;
      otherwise it is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault = fault.__replace__(**options)
    logger.debug("triggering %s: %s", type(fault).__name__, fault)
    fault.__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode members and values are short documentation strings. when not
    found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "BuilderError",
    "OptionOrderError",
    "MixedOperandsError",
    "VariadicPositionError",
    "MultipleDefaultError",
    "DuplicateNameError",
    "MalformedNameError",
    "ParseError",
    "UnknownOptionError",
    "UnknownSubcommandError",
    "MissingPositionalError",
    "MissingValueError",
    "AlreadyPresentError",
    "UnexpectedArgumentError",
    "InvalidArgumentError",
    "WrongArgumentKindError",
    "trigger",
    "getdoc",
)
