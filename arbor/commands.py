"""
Arbor command layer: declare a command tree, then parse token vectors against it.

What this module provides
- Command: one node of the command tree, with:
  • A builder API (add_option, add_positional, add_subcommand) that enforces the
    declaration rules immediately, raising a BuilderError on violation.
  • Implicit --help/-h (always) and --version (when a version is set) flags.
  • A recursive-descent parser (parse) that walks the tree while consuming a
    single shared TokenReader, and returns an explicit outcome.

- Factories and helpers:
  • command(name, ...): create a root Command.
  • parse(command, tokens): functional spelling of Command.parse.

Declaration rules (checked while building, never while parsing)
- options come first: no option may be added once a positional or a
  subcommand exists on the same command;
- a command has positionals or subcommands, never both;
- only the last positional may be variadic;
- a repeatable option cannot declare a default;
- names (long, short, positional, subcommand) are unique per command.

Parsing, per command
1. option phase: tokens starting with '-' are expanded ("--name" as is,
   "-abc" one alias per character) and applied according to the option kind;
   a literal "--" ends the phase, any other token is put back.
2. dispatch phase (commands with subcommands): the next token names the child
   to recurse into; end of input leaves the subcommand unset.
3. positional phase (other commands): positionals are filled in order; a
   variadic positional absorbs everything left.

Quick start
    from arbor import command, Parsed

    foo = command("foo", version="1.0.0")
    foo.add_option("--verbose", "v", multiple=True)
    cat = foo.add_subcommand("cat")
    cat.add_option("--rate", default="10000").add_positional("food")

    match foo.parse(["foo", "-vv", "cat", "rat"]):
        case Parsed(result):
            name, node = result.subcommand()   # ("cat", <result-node>)
            node.value_of("food")              # "rat"

Design notes
- The tree is read-only during parsing and may serve many parse calls.
- Children are owned by their parent; the parent link is a weak reference
  and the usage route is computed once, at build time.
- --help/--version and malformed input end the whole parse by ordinary early
  return of HelpRequested/VersionRequested/Failed, never by raising.

See also
- arbor.arguments for Option/Positional semantics.
- arbor.results for ResultNode accessors and the outcome types.
- arbor.faults for fault codes and rendering behavior.
"""
import difflib
import functools
import logging
import operator
import re
import shlex
import sys
import weakref
from collections.abc import Iterable

from .arguments import Option, Positional, Kind
from .faults import *
from .results import ResultNode, Parsed, HelpRequested, VersionRequested, Failed
from .tokens import TokenReader, end
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass that exposes command metadata as read-only properties.

    - __typename__ is derived from the class name and used in messages.
    - Every name in __introspectable__ becomes a read-only property mirroring
      the private "_{name}" attribute (containers are handed out as copies).
    - __displayable__ narrows which properties __rich_repr__/__repr__ show.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                object = getattr(self, name)
                # children by name only
                yield name, list(object) if name == "children" else object
        self.__rich_repr__ = __rich_repr__

        return self


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing the declaration rules.

    Raises
    - MixedOperandsError when the parent already declares positionals.
    - DuplicateNameError when the parent already has a child with this name.
    """
    if parent._positionals:
        raise MixedOperandsError(
            "command %r declares positionals and cannot have subcommands" % parent.name,
            title="positionals mixed with subcommands",
            code=FaultCode.MIXED_OPERANDS,
            input=self.name,
            tool=parent,
            hint="move the positionals of %r into its subcommands" % parent.name,
            docs=getdoc(FaultCode.MIXED_OPERANDS),
        )
    if parent._children.setdefault(self.name, self) is self:
        self._parent = weakref.ref(parent)
        self._route = parent._route + (self.name,)
        return

    raise DuplicateNameError(
        "subcommand name %r is already in use on %r" % (self.name, parent.name),
        title="duplicated name",
        code=FaultCode.DUPLICATE_NAME,
        input=self.name,
        tool=parent,
        hint="pick a different subcommand name",
        docs=getdoc(FaultCode.DUPLICATE_NAME),
    )


class Command(metaclass=CommandType):
    """
    One node of a command tree.

    Responsibilities
    - Declaration: options, positionals and subcommands through the builder API.
    - Introspection: name, descr, version, options, positionals and children as
      read-only properties; parent/root/path/usage for usage text.
    - Parsing: parse() runs the recursive descent from this node.

    Notes
    - options maps canonical long names to Option specs in declaration order,
      the implicit --help (and --version) first.
    - Builder methods return the command they were called on, except
      add_subcommand which returns the new child, so declarations chain.
    """

    __introspectable__ = (
        "name",
        "descr",
        "version",
        "options",
        "positionals",
        "children",
    )

    __displayable__ = (
        "name",
        "descr",
        "version",
        "children",
    )

    def __init__(self, name, /, descr=Unset, version=Unset):
        """
        Create a detached (root) command.

        Parameters
        - name: str
          Program or subcommand name; non-empty, no whitespace, no leading dash.
        - descr: Unset | str
          Short description used by help renderers.
        - version: Unset | str
          Version string; setting it adds the implicit --version flag.

        Raises
        - TypeError on non-string metadata.
        - MalformedNameError on an unusable name.
        """
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[^\s-]\S*", name):
            raise MalformedNameError(
                f"{type(self).__typename__} name {name!r} is not a valid name",
                title="malformed name",
                code=FaultCode.MALFORMED_NAME,
                input=name,
                hint="use a single word that does not start with '-'",
                docs=getdoc(FaultCode.MALFORMED_NAME),
            )
        for field, object in (("descr", descr), ("version", version)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"{type(self).__typename__} {field!r} must be a string")

        self._name = name
        self._descr = coalesce(descr)
        self._version = coalesce(version)
        self._options = {}
        self._switches = {}
        self._positionals = {}
        self._children = {}
        self._parent = None
        self._route = (name,)

        self._helper = self._register(Option("--help", "h", descr="show this help message and exit"))
        self._versioner = None
        if self._version is not None:
            self._versioner = self._register(Option("--version", descr="show version information and exit"))

    @property
    def parent(self):
        """
        The command this one was added to, or None for a root.
        """
        return self._parent() if self._parent else None

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def usage(self):
        """
        One-line usage, e.g. "foo cat [options] <food>".
        """
        parts = [*self._route, "[options]"]
        if self._children:
            parts.append("<command>")
        parts.extend(positional.metavar for positional in self._positionals.values())
        return " ".join(parts)

    def _register(self, option):
        for name in option.names:
            if name in self._switches or name in self._positionals:
                raise DuplicateNameError(
                    "name %r is already in use on %r" % (name, self.name),
                    title="duplicated name",
                    code=FaultCode.DUPLICATE_NAME,
                    input=name,
                    tool=self,
                    hint="each long name and short alias can be declared once per command",
                    docs=getdoc(FaultCode.DUPLICATE_NAME),
                )
        self._options[option.name] = option
        self._switches.update(dict.fromkeys(option.names, option))
        return option

    def add_option(self, name, short=Unset, /, *, takes_value=False, default=Unset, multiple=False, descr=Unset):
        """
        Declare an option on this command.

        Parameters
        - name: canonical long name, e.g. "--verbose".
        - short: Unset | one character alias, "v" or "-v".
        - takes_value: the option consumes the following token as its value.
        - default: Unset | str, value when the option is not given (implies takes_value).
        - multiple: the option may be repeated (counted flag or value list).
        - descr: Unset | str, short description.

        Returns
        - Command: self, for chaining.

        Raises
        - OptionOrderError when positionals or subcommands were already declared.
        - MultipleDefaultError, DuplicateNameError, MalformedNameError (see module docs).
        """
        if self._positionals or self._children:
            raise OptionOrderError(
                "option %r declared on %r after its %s" % (
                    name, self.name, "subcommands" if self._children else "positionals"
                ),
                title="option declared too late",
                code=FaultCode.OPTION_ORDER,
                input=name,
                tool=self,
                hint="declare every option of %r before its positionals or subcommands" % self.name,
                docs=getdoc(FaultCode.OPTION_ORDER),
            )
        self._register(Option(
            name,
            short,
            takes_value=takes_value,
            default=default,
            multiple=multiple,
            descr=descr,
        ))
        return self

    def add_positional(self, name, /, *, multiple=False, descr=Unset):
        """
        Declare the next positional of this command.

        Parameters
        - name: identifier used to read the value back, e.g. "food".
        - multiple: variadic; requires one token and absorbs the rest of the input.
        - descr: Unset | str, short description.

        Returns
        - Command: self, for chaining.

        Raises
        - MixedOperandsError when subcommands were already declared.
        - VariadicPositionError when a variadic positional was already declared.
        - DuplicateNameError, MalformedNameError.
        """
        if self._children:
            raise MixedOperandsError(
                "command %r declares subcommands and cannot have positionals" % self.name,
                title="positionals mixed with subcommands",
                code=FaultCode.MIXED_OPERANDS,
                input=name,
                tool=self,
                hint="declare %r on one of the subcommands of %r instead" % (name, self.name),
                docs=getdoc(FaultCode.MIXED_OPERANDS),
            )
        positional = Positional(name, multiple=multiple, descr=descr)

        for previous in self._positionals.values():
            if previous.variadic:
                raise VariadicPositionError(
                    "positional %r follows variadic positional %r on %r" % (name, previous.name, self.name),
                    title="variadic positional not last",
                    code=FaultCode.VARIADIC_POSITION,
                    input=name,
                    tool=self,
                    hint="only the last positional of a command may be variadic",
                    docs=getdoc(FaultCode.VARIADIC_POSITION),
                )
        if name in self._positionals or name in self._switches:
            raise DuplicateNameError(
                "name %r is already in use on %r" % (name, self.name),
                title="duplicated name",
                code=FaultCode.DUPLICATE_NAME,
                input=name,
                tool=self,
                hint="pick a different positional name",
                docs=getdoc(FaultCode.DUPLICATE_NAME),
            )
        self._positionals[name] = positional
        return self

    def add_subcommand(self, name, /, descr=Unset, version=Unset):
        """
        Declare a subcommand and return it.

        Raises
        - MixedOperandsError when positionals were already declared.
        - DuplicateNameError when the name is taken by another subcommand.
        """
        child = type(self)(name, descr, version)
        _attach_to_parent(child, self)
        return child

    def _fault(self, exception, message, /, **options):
        """
        Wrap a ParseError raised against this command into a Failed outcome.
        """
        fault = exception(message, tool=self, **options)
        logger.debug("parse failed on %r: %s", self.name, fault)
        return Failed(fault)

    def _hint(self, candidates, input, kind):
        route = " ".join(self._route)
        suggestions = difflib.get_close_matches(input, list(candidates), 5)
        try:
            return suggestions, "did you mean %r? you can also run '%s --help' to see all %s" % (
                suggestions[0], route, kind
            )
        except IndexError:
            return suggestions, "try '%s --help' to see all available %s" % (route, kind)

    def _expand(self, token, reader):
        """
        resolve one option token into its Option specs.

        - "--name" resolves as a whole against long names (and short aliases);
        - "-abc" resolves each character through the short-alias table, so
          "-vvv" yields the same spec three times.

        returns a list of Option, or a Failed outcome on the first unknown name.
        """
        names = [token] if token.startswith("--") else ["-" + character for character in token[1:]]
        options = []
        for name in names:
            try:
                options.append(self._switches[name])
            except KeyError:
                suggestions, hint = self._hint(self._switches.keys(), name, "options")
                within = "" if name == token else " in %r" % token
                return self._fault(
                    UnknownOptionError,
                    "unknown option %r%s at %s position" % (name, within, ordinal(reader.position)),
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    input=name,
                    token=token,
                    index=reader.position,
                    suggestions=suggestions,
                    hint=hint,
                    docs=getdoc(FaultCode.UNKNOWN_OPTION),
                )
        return options

    def _consume(self, option, reader, counts, values, multiples, seen):
        """
        apply one resolved option occurrence; returns None or an early outcome.
        """
        if option is self._helper:
            logger.debug("help requested on %r", self.name)
            return HelpRequested(self)
        if option is self._versioner:
            logger.debug("version requested on %r", self.name)
            return VersionRequested(self)

        index = reader.position
        if not option.kind.repeatable and option.name in seen:
            return self._fault(
                AlreadyPresentError,
                "option %r at %s position was already provided" % (option.name, ordinal(index)),
                title="duplicated option",
                code=FaultCode.ALREADY_PRESENT,
                input=option.name,
                index=index,
                argument=option,
                hint="keep a single %r; it can be specified only once" % option.name,
                docs=getdoc(FaultCode.ALREADY_PRESENT),
            )
        seen.add(option.name)

        if option.kind.counted:
            counts[option.name] += 1
            return None

        if (value := reader.next()) is end:
            return self._fault(
                MissingValueError,
                "option %r at %s position requires a value" % (option.name, ordinal(index)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                input=option.name,
                index=index,
                argument=option,
                hint="pass the value after a space (for example: %s <value>)" % option.name,
                docs=getdoc(FaultCode.MISSING_VALUE),
            )

        if option.kind is Kind.MULTI_VALUE:
            multiples[option.name].append(value)
        else:
            values[option.name] = value
        return None

    def _parseargs(self, reader):
        """
        run the recursive descent for this command against the shared reader.

        phases
        - setup: flag counts at 0, single values at their default (or None),
          repeatable values empty.
        - options: consume option tokens until end of input, "--", or the first
          token without a leading dash (which is put back with rewind()).
        - dispatch: with subcommands, the next token selects the child and the
          child's outcome is either stored (Parsed) or returned as is.
        - positionals: otherwise, fill declared positionals in order.

        returns
        - Parsed(ResultNode) or the first HelpRequested/VersionRequested/Failed.
        """
        kinds = {}
        counts = {}
        values = {}
        multiples = {}
        seen = set()

        for name, option in self._options.items():
            kinds[name] = option.kind
            match option.kind:
                case Kind.SINGLE_FLAG | Kind.MULTI_FLAG:
                    counts[name] = 0
                case Kind.SINGLE_VALUE:
                    values[name] = option.default
                case Kind.MULTI_VALUE:
                    multiples[name] = []
        for name, positional in self._positionals.items():
            kinds[name] = positional.kind
            if positional.variadic:
                multiples[name] = []
            else:
                values[name] = None

        while (token := reader.next()) is not end:
            if token == "--":
                break
            if not token.startswith("-") or token == "-":
                reader.rewind()
                break
            options = self._expand(token, reader)
            if isinstance(options, Failed):
                return options
            for option in options:
                if outcome := self._consume(option, reader, counts, values, multiples, seen):
                    return outcome

        subcommand = None
        if self._children:
            if (token := reader.next()) is not end:
                try:
                    child = self._children[token]
                except KeyError:
                    suggestions, hint = self._hint(self._children.keys(), token, "subcommands")
                    return self._fault(
                        UnknownSubcommandError,
                        "unknown subcommand %r at %s position" % (token, ordinal(reader.position)),
                        title="unknown subcommand",
                        code=FaultCode.UNKNOWN_SUBCOMMAND,
                        input=token,
                        index=reader.position,
                        suggestions=suggestions,
                        hint=hint,
                        docs=getdoc(FaultCode.UNKNOWN_SUBCOMMAND),
                    )
                logger.debug("dispatching %r -> %r", self.name, child.name)
                outcome = child._parseargs(reader)
                if not isinstance(outcome, Parsed):
                    return outcome
                subcommand = (child.name, outcome.result)
        else:
            for name, positional in self._positionals.items():
                if (token := reader.next()) is end:
                    return self._fault(
                        MissingPositionalError,
                        "missing positional %r, input ended too early" % name,
                        title="missing positional",
                        code=FaultCode.MISSING_POSITIONAL,
                        input=name,
                        index=reader.position,
                        argument=positional,
                        hint="add the missing value, usage: %s" % self.usage,
                        docs=getdoc(FaultCode.MISSING_POSITIONAL),
                    )
                if not positional.variadic:
                    values[name] = token
                    continue
                multiples[name].append(token)
                while (token := reader.next()) is not end:
                    multiples[name].append(token)

        return Parsed(ResultNode(self.name, kinds, counts, values, multiples, subcommand))

    def parse(self, tokens=Unset, /):
        """
        Parse a token vector against the tree rooted at this command.

        Parameters
        - tokens:
          • Unset: sys.argv (token 0 being the program name).
          • str: shell-like string split with shlex; this command's name is
            used as token 0.
          • Iterable[str]: argv-like vector, token 0 being the program name.

        Returns
        - Parsed(ResultNode) | HelpRequested(Command) | VersionRequested(Command) | Failed(ParseError)

        Raises
        - TypeError: when tokens is not Unset/str/Iterable[str].
        """
        if tokens is Unset:
            tokens = sys.argv
        elif isinstance(tokens, str):
            tokens = [self.name, *shlex.split(tokens)]
        elif not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        reader = TokenReader(tokens)

        outcome = self._parseargs(reader)
        if isinstance(outcome, Parsed) and (remaining := reader.remaining):
            # nothing in the tree claimed the rest of the input
            index = reader.position + 1
            return self._fault(
                UnexpectedArgumentError,
                "unexpected argument %r at %s position" % (remaining[0], ordinal(index)),
                title="unexpected argument",
                code=FaultCode.UNEXPECTED_ARGUMENT,
                input=remaining[0],
                index=index,
                leftover=remaining,
                hint="remove the extra inputs, usage: %s" % self.usage,
                docs=getdoc(FaultCode.UNEXPECTED_ARGUMENT),
            )
        return outcome


def command(name, /, descr=Unset, version=Unset):
    """
    Create a root Command.

    Parameters
    - name: program name (also used as token 0 for string prompts).
    - descr: Unset | str, short description.
    - version: Unset | str; adds the implicit --version flag when set.
    """
    return Command(name, descr, version)


def parse(command, tokens=Unset, /):
    """
    Functional spelling of command.parse(tokens).
    """
    if not isinstance(command, Command):
        raise TypeError("parse() first argument must be a command")
    return command.parse(tokens)


__all__ = (
    "Command",
    "command",
    "parse",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
