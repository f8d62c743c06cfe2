"""
Arbor parse results and outcomes.

What this module provides
- ResultNode: the immutable record produced for every command visited by a
  parse. It stores, per declared argument name:
  • flags (single or repeatable): an occurrence count;
  • single-value options and positionals: a string or None when absent;
  • repeatable options and variadic positionals: an ordered list of strings;
  plus the dispatched subcommand as a (name, ResultNode) pair.

- Outcomes returned by Command.parse():
  • Parsed(result): input was well formed; result is the root ResultNode.
  • HelpRequested(command): --help/-h was seen on `command`; parsing stopped.
  • VersionRequested(command): --version was seen on `command`; parsing stopped.
  • Failed(error): malformed input; error is a ParseError.

  Every outcome supports structural pattern matching:

    match root.parse(["foo", "cat", "rat"]):
        case Parsed(result):
            ...
        case HelpRequested(command) | VersionRequested(command):
            ...
        case Failed(error):
            ...
"""
from types import MappingProxyType

from .arguments import Kind
from .faults import InvalidArgumentError, WrongArgumentKindError, FaultCode


class ResultNode:
    """
    Values collected for one command during one parse call.

    Accessors take the declared name of the argument ("--verbose" for an
    option, "food" for a positional); short aliases are not accepted here.
    """

    __slots__ = ("_name", "_kinds", "_counts", "_values", "_multiples", "_subcommand")

    def __init__(self, name, kinds, counts, values, multiples, subcommand=None, /):
        self._name = name
        self._kinds = MappingProxyType(dict(kinds))
        self._counts = MappingProxyType(dict(counts))
        self._values = MappingProxyType(dict(values))
        self._multiples = MappingProxyType({key: tuple(object) for key, object in multiples.items()})
        self._subcommand = subcommand

    @property
    def name(self):
        """
        Name of the command this result belongs to.
        """
        return self._name

    def _kindof(self, name, accessor):
        try:
            return self._kinds[name]
        except (KeyError, TypeError):
            raise InvalidArgumentError(
                f"no argument named {name!r} is declared on {self._name!r}",
                title="invalid argument",
                code=FaultCode.INVALID_ARGUMENT,
                input=name,
                accessor=accessor,
                hint="use the canonical name, for example '--verbose' rather than '-v'",
            ) from None

    def _mismatch(self, name, kind, accessor, expected):
        return WrongArgumentKindError(
            f"{accessor}() cannot read {kind.value} argument {name!r}",
            title="wrong argument kind",
            code=FaultCode.WRONG_ARGUMENT_KIND,
            input=name,
            accessor=accessor,
            hint=f"{accessor}() reads {expected} arguments only",
        )

    def is_present(self, name, /):
        """
        True when `name` was seen (flags, repeatables) or holds a value
        (single values, including a declared default).
        """
        return self.occurrences_of(name) > 0

    def occurrences_of(self, name, /):
        """
        Occurrence count of `name`.

        - flags: number of times the flag was given (through any alias);
        - single values: 1 when a value is held, 0 when absent;
        - repeatables: number of collected values.
        """
        match self._kindof(name, "occurrences_of"):
            case Kind.SINGLE_FLAG | Kind.MULTI_FLAG:
                return self._counts[name]
            case Kind.SINGLE_VALUE:
                return int(self._values[name] is not None)
            case Kind.MULTI_VALUE:
                return len(self._multiples[name])

    def value_of(self, name, /):
        """
        The single string value of `name`, or None when absent.
        """
        if (kind := self._kindof(name, "value_of")) is not Kind.SINGLE_VALUE:
            raise self._mismatch(name, kind, "value_of", "single-value")
        return self._values[name]

    def values_of(self, name, /):
        """
        The ordered values collected for repeatable `name` (possibly empty).
        """
        if (kind := self._kindof(name, "values_of")) is not Kind.MULTI_VALUE:
            raise self._mismatch(name, kind, "values_of", "multi-value")
        return list(self._multiples[name])

    def subcommand(self):
        """
        The (name, ResultNode) pair of the dispatched subcommand, or (None, None).
        """
        return self._subcommand or (None, None)

    def __eq__(self, other):
        if not isinstance(other, ResultNode):
            return NotImplemented
        return (
            self._name == other._name and
            self._counts == other._counts and
            self._values == other._values and
            self._multiples == other._multiples and
            self.subcommand() == other.subcommand()
        )

    __hash__ = None

    def __rich_repr__(self):
        yield "name", self._name
        for name, kind in self._kinds.items():
            match kind:
                case Kind.SINGLE_FLAG | Kind.MULTI_FLAG:
                    yield name, self._counts[name]
                case Kind.SINGLE_VALUE:
                    yield name, self._values[name]
                case Kind.MULTI_VALUE:
                    yield name, list(self._multiples[name])
        if self._subcommand:
            yield "subcommand", self._subcommand

    def __repr__(self):
        return "result-node(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class Outcome:
    """
    Base of the parse() outcome union; see the module docstring.
    """
    __slots__ = ("_payload",)
    __match_args__ = ()

    def __init__(self, payload, /):
        self._payload = payload

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._payload is other._payload or self._payload == other._payload

    __hash__ = None

    def __rich_repr__(self):
        yield self._payload

    def __repr__(self):
        return f"{type(self).__name__}({self._payload!r})"


class Parsed(Outcome):
    __slots__ = ()
    __match_args__ = ("result",)

    @property
    def result(self):
        return self._payload


class HelpRequested(Outcome):
    __slots__ = ()
    __match_args__ = ("command",)

    @property
    def command(self):
        """
        The command whose option phase saw --help (render its usage).
        """
        return self._payload


class VersionRequested(Outcome):
    __slots__ = ()
    __match_args__ = ("command",)

    @property
    def command(self):
        return self._payload


class Failed(Outcome):
    __slots__ = ()
    __match_args__ = ("error",)

    @property
    def error(self):
        return self._payload

    def raise_error(self):
        """
        Raise the carried ParseError.
        """
        raise self._payload


__all__ = (
    "ResultNode",
    "Outcome",
    "Parsed",
    "HelpRequested",
    "VersionRequested",
    "Failed",
)
