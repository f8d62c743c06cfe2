r"""
Arbor argument specifications.

Overview
- Specs
  • Option: named argument with a canonical long name (--name) and an optional
    single-character short alias (-n). Either presence-only (a flag) or
    value-bearing, either single-occurrence or repeatable.
  • Positional: unnamed-on-the-command-line argument, bound by declaration order.
    Single or variadic (absorbs every remaining token).

- Classification
  • Arity: FLAG (no value) or VALUE (consumes the next token).
  • Multiplicity: SINGLE (at most once) or MULTIPLE (any number of times).
  • Kind: the derived product used by the parser and by the result accessors,
    SINGLE_FLAG, MULTI_FLAG, SINGLE_VALUE or MULTI_VALUE.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    the fields declared in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- Option
  • name: "--" followed by a shell-style identifier, e.g. "--dry-run".
  • short: Unset | single character, given as "v" or "-v"; stored as "-v".
  • default: Unset | str. Declaring a default forces Arity.VALUE; a repeatable
    option cannot have one (which occurrence would it stand for?).
  • descr: Unset | str (short help), non-empty when provided.
- Positional
  • name: shell-style identifier without leading dashes, e.g. "food".
  • multiple: bool, variadic when True.
  • descr: as above.

Validation highlights
- Long names must match r"--[^\W\d_]\w*(-\w+)*" (unicode letters allowed).
- Positional names must match r"[^\W\d_]\w*(-\w+)*".
- Short aliases must be exactly one non-dash, non-space character.

Examples
    >>> verbose = Option("--verbose", "v", multiple=True)
    >>> verbose.kind
    <Kind.MULTI_FLAG: 'multi-flag'>
    >>> Option("--rate", default="10000").kind
    <Kind.SINGLE_VALUE: 'single-value'>
"""
import functools
import operator
import re
from enum import Enum

from .faults import MalformedNameError, MultipleDefaultError, FaultCode
from .utils import *


class Arity(Enum):
    FLAG = "flag"
    VALUE = "value"


class Multiplicity(Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class Kind(Enum):
    """
    Derived (arity × multiplicity) classification.
    """
    SINGLE_FLAG = "single-flag"
    MULTI_FLAG = "multi-flag"
    SINGLE_VALUE = "single-value"
    MULTI_VALUE = "multi-value"

    @classmethod
    def of(cls, arity, multiplicity, /):
        return {
            (Arity.FLAG, Multiplicity.SINGLE): cls.SINGLE_FLAG,
            (Arity.FLAG, Multiplicity.MULTIPLE): cls.MULTI_FLAG,
            (Arity.VALUE, Multiplicity.SINGLE): cls.SINGLE_VALUE,
            (Arity.VALUE, Multiplicity.MULTIPLE): cls.MULTI_VALUE,
        }[arity, multiplicity]

    @property
    def counted(self):
        """
        True for kinds whose result is an occurrence count (flags).
        """
        return self in (Kind.SINGLE_FLAG, Kind.MULTI_FLAG)

    @property
    def repeatable(self):
        return self in (Kind.MULTI_FLAG, Kind.MULTI_VALUE)


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only records.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages.
    - Expose every name in __introspectable__ as a read-only property backed by
      the private "_{name}" attribute (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(name='--verbose', short='-v', arity=<Arity.FLAG: 'flag'>, ...)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_descr(cls, metadata, /):
    """
    Internal: validate the shared 'descr' field (Unset or a non-empty string).
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_name(cls, metadata, pattern, example, /):
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(pattern, name):
        raise MalformedNameError(
            f"{cls.__typename__} name {name!r} is not a valid name (for example: {example})",
            title="malformed name",
            code=FaultCode.MALFORMED_NAME,
            input=name,
            hint=f"use a shell-style name such as {example}",
        )


class Option(metaclass=ArgumentType):
    """
    Named argument specification.

    An Option is looked up by its canonical long name ("--verbose") or by its
    short alias ("-v"); bundled short aliases ("-vvv") are expanded by the
    parser one character at a time.

    Properties
    - name, short, arity, multiplicity, default, descr (read-only).
    - kind: derived Kind used for dispatch and result storage.
    - names: every spelling that resolves to this option.
    """

    __introspectable__ = (
        "name",
        "short",
        "arity",
        "multiplicity",
        "default",
        "descr",
    )

    def __init__(self, name, short=Unset, /, *, takes_value=False, default=Unset, multiple=False, descr=Unset):
        metadata = {
            "name": name,
            "short": short,
            "default": default,
            "descr": descr,
        }
        _sanitize_name(type(self), metadata, r"--[^\W\d_]\w*(-\w+)*", "--dry-run")
        _sanitize_descr(type(self), metadata)

        if not isinstance(short, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'short' must be a string")
        if isinstance(short, str):
            if not re.fullmatch(r"-?[^\s-]", short):
                raise MalformedNameError(
                    f"{type(self).__typename__} short alias {short!r} must be a single character",
                    title="malformed name",
                    code=FaultCode.MALFORMED_NAME,
                    input=short,
                    hint="use one character, for example: -v",
                )
            metadata["short"] = "-" + short[-1]
        else:
            metadata["short"] = None

        if not isinstance(default, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'default' must be a string")
        if default is not Unset and multiple:
            raise MultipleDefaultError(
                f"repeatable {type(self).__typename__} {name!r} cannot declare a default value",
                title="default on repeatable option",
                code=FaultCode.MULTIPLE_DEFAULT,
                input=name,
                hint="drop the default or make the option single-occurrence",
            )

        metadata["arity"] = Arity.VALUE if takes_value or default is not Unset else Arity.FLAG
        metadata["multiplicity"] = Multiplicity.MULTIPLE if multiple else Multiplicity.SINGLE
        metadata["default"] = coalesce(default)

        for key, object in metadata.items():
            setattr(self, "_" + key, object)

    @property
    def kind(self):
        return Kind.of(self.arity, self.multiplicity)

    @property
    def names(self):
        return (self.name,) if self.short is None else (self.name, self.short)

    def __option__(self):
        """
        Introspection hook: identify this spec as an Option.
        """
        return self


class Positional(metaclass=ArgumentType):
    """
    Positional argument specification.

    Positionals are filled in declaration order once the option phase of their
    command is over. A variadic positional (multiple=True) requires at least one
    token and then absorbs all remaining input, so only the last positional of
    a command may be variadic (enforced by Command.add_positional).
    """

    __introspectable__ = (
        "name",
        "multiplicity",
        "descr",
    )

    def __init__(self, name, /, *, multiple=False, descr=Unset):
        metadata = {
            "name": name,
            "descr": descr,
        }
        _sanitize_name(type(self), metadata, r"[^\W\d_]\w*(-\w+)*", "food")
        _sanitize_descr(type(self), metadata)
        metadata["multiplicity"] = Multiplicity.MULTIPLE if multiple else Multiplicity.SINGLE

        for key, object in metadata.items():
            setattr(self, "_" + key, object)

    @property
    def variadic(self):
        return self.multiplicity is Multiplicity.MULTIPLE

    @property
    def kind(self):
        # positionals always carry a value
        return Kind.of(Arity.VALUE, self.multiplicity)

    @property
    def metavar(self):
        return f"<{self.name}>..." if self.variadic else f"<{self.name}>"

    def __positional__(self):
        """
        Introspection hook: identify this spec as a Positional.
        """
        return self


__all__ = (
    "Arity",
    "Multiplicity",
    "Kind",
    "Option",
    "Positional",
)

# Keep the metaclass out of star-imports; it is not part of the public API.
del ArgumentType
