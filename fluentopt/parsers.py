"""
Fluentopt parser: match a token stream against a finalized grammar.

What this module provides
- Parser: the immutable matcher produced by ParserBuilder.build_and_get(). It
  closes over the ordered plain arguments, the option key maps (short and long,
  both pointing at the same Option objects) and the command map.
- invoke(parser, prompt): convenience runner that reads sys.argv, a shell-like
  string, or an iterable of tokens, and surfaces failures through trigger().

Algorithm (single left-to-right scan, one token lookahead)
1. A token equal to a command name delegates the whole remaining suffix to the
   command's own parser (fresh scope); the outer scan stops there.
2. A token starting with "--" resolves against the long keys, one starting with
   "-" against the short keys. Unknown keys fail immediately. A value option
   consumes the next token verbatim; a flag is simply marked present.
3. Any other token binds to the next free plain argument in declaration order.
4. After the scan every unbound mandatory entity is collected and reported in a
   single MissingArgumentError.

Repeated options: the last occurrence wins.

Design notes
- Parsing never mutates the grammar: bound copies are created with
  copy.replace(entity, value=...), so one Parser can serve concurrent callers.
- Positions in fault messages are 1-based and absolute, also inside commands.
"""
import copy
import shlex
import sys
from collections import deque
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from rich.box import ROUNDED
from rich.console import Group
from rich.table import Table
from rich.text import Text

from .arguments import Kind, PlainArgument, Option, Command
from .faults import *
from .models import ArgumentModel
from .utils import *

LONG_MARKER = "--"
SHORT_MARKER = "-"


def _sanitize_grammar(arguments, options, long_options, commands):
    """
    Internal: validate the staging collections handed over by a builder.

    Raises
    - InvalidArgumentError: when a collection has the wrong shape, holds the wrong
      entity kind, or a key does not match the entity registered under it.
    - IllegalStateError: when a command has no nested parser.
    """
    if not isinstance(arguments, Sequence) or not all(isinstance(x, PlainArgument) for x in arguments):
        raise InvalidArgumentError("parser arguments must be a sequence of plain arguments")

    for keys, attribute in ((options, "key"), (long_options, "long_key")):
        if not isinstance(keys, Mapping):
            raise InvalidArgumentError("parser options must be a mapping of keys to options")
        for key, option in keys.items():
            if not isinstance(option, Option):
                raise InvalidArgumentError("parser options must be a mapping of keys to options")
            if getattr(option, attribute) != key:
                raise InvalidArgumentError(f"option {option.name!r} is registered under a foreign key {key!r}")

    if not isinstance(commands, Mapping):
        raise InvalidArgumentError("parser commands must be a mapping of names to commands")
    for name, command in commands.items():
        if not isinstance(command, Command) or command.name != name:
            raise InvalidArgumentError("parser commands must be a mapping of names to commands")
        if not isinstance(command.parser, Parser):
            raise IllegalStateError(f"command {name!r} has no parser")


class Parser:
    """
    Recursive-descent matcher over one grammar level.

    Instances are read-only once constructed: the collections are copied into
    tuples and read-only mappings, and parse() keeps all of its state local.

    Parameters
    - arguments: Sequence[PlainArgument] in declaration order.
    - options: Mapping[str, Option] keyed by short key.
    - long_options: Mapping[str, Option] keyed by long key.
    - commands: Mapping[str, Command] keyed by command name.
    """

    def __init__(self, arguments=(), options=MappingProxyType({}), long_options=MappingProxyType({}), commands=MappingProxyType({})):
        _sanitize_grammar(arguments, options, long_options, commands)
        self._arguments = tuple(arguments)
        self._options = MappingProxyType(dict(options))
        self._long_options = MappingProxyType(dict(long_options))
        self._commands = MappingProxyType(dict(commands))

        entities = {id(entity): entity for entity in (
            *self._arguments,
            *self._options.values(),
            *self._long_options.values(),
            *self._commands.values(),
        )}
        self._entities = tuple(sorted(entities.values(), key=lambda entity: entity.index))

        if len({entity.name for entity in self._entities}) != len(self._entities):
            raise InvalidArgumentError("parser entity names must be unique within one grammar")

    arguments = mirror("arguments")
    options = mirror("options")
    long_options = mirror("long_options")
    commands = mirror("commands")
    entities = mirror("entities")

    def syntax(self):
        """
        Usage line of this grammar: every entity in declaration order, optional
        ones bracketed, commands followed by their nested syntax.
        """
        return " ".join(map(str, self._entities))

    def parse(self, tokens, /):
        """
        Match 'tokens' against this grammar.

        Parameters
        - tokens: Iterable[str], typically sys.argv[1:]. A bare string is rejected
          (use __invoke__ for shell-like strings).

        Returns
        - ArgumentModel where every mandatory entity is present.

        Raises
        - UnknownArgumentError: a token matched no command, no option key and no
          free plain argument.
        - MissingValueError: a value option was the last token.
        - MissingArgumentError: mandatory entities stayed unbound (all are listed).
        - TypeError: 'tokens' is not an iterable of strings.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = tuple(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")
        return self._parse(tokens, 0)

    def _hint(self):
        if syntax := self.syntax():
            return "expected usage: %s" % syntax
        return "no arguments are expected here"

    def _parse(self, tokens, offset):
        bound = {}
        arguments = deque(self._arguments)
        cursor = 0

        while cursor < len(tokens):
            token = tokens[cursor]
            position = offset + cursor + 1

            if token in self._commands:
                # the command owns every remaining token; its failures propagate as they are
                command = self._commands[token]
                bound[command.name] = copy.replace(command, value=command.parser._parse(tokens[cursor + 1:], position))
                break

            if token.startswith(LONG_MARKER):
                option = self._long_options.get(token[len(LONG_MARKER):])
            elif token.startswith(SHORT_MARKER):
                option = self._options.get(token[len(SHORT_MARKER):])
            else:
                try:
                    argument = arguments.popleft()
                except IndexError:
                    raise UnknownArgumentError(
                        "unexpected argument %r at %s position" % (token, ordinal(position)),
                        token=token,
                        index=position,
                        hint=self._hint(),
                    ) from None
                bound[argument.name] = copy.replace(argument, value=token)
                cursor += 1
                continue

            if option is None:
                raise UnknownArgumentError(
                    "unknown option %r at %s position" % (token, ordinal(position)),
                    token=token,
                    index=position,
                    hint=self._hint(),
                )

            if option.expects_value:
                cursor += 1
                if cursor >= len(tokens):
                    raise MissingValueError(
                        "option %r at %s position expects a value" % (token, ordinal(position)),
                        token=token,
                        option=option,
                        index=position,
                        hint="pass a value after it (for example: %s <%s>)" % (token, option.name),
                    )
                value = tokens[cursor]
            else:
                value = True

            bound[option.name] = copy.replace(option, value=value)
            cursor += 1

        if missing := tuple(entity for entity in self._entities if entity.mandatory and entity.name not in bound):
            noun = "argument" if len(missing) == 1 else pluralize("argument")
            raise MissingArgumentError(
                "missing mandatory %s %s" % (noun, ", ".join(repr(entity.name) for entity in missing)),
                arguments=missing,
                hint=self._hint(),
            )

        return ArgumentModel(self, (bound.get(entity.name, entity) for entity in self._entities))

    def __invoke__(self, prompt=Unset, /, *, shell=False, fancy=False, colorful=True):
        """
        Parse a prompt and surface failures according to the runtime options.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used unaltered.
        - shell: print faults to stderr and exit with status 1 instead of raising.
        - fancy: render faults inside a rich Panel.
        - colorful: style fault output.

        Returns
        - ArgumentModel on success.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = prompt
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            return self.parse(tokens)
        except ArgumentParseException as fault:
            trigger(fault, shell=shell, fancy=fancy, colorful=colorful)

    def __rich__(self):
        """
        Usage block: the syntax line followed by a table of every entity.
        """
        table = Table("argument", "description", "", box=ROUNDED, show_edge=False)
        for entity in self._entities:
            table.add_row(
                Text(entity.fullname, "bold #00E6FF" if entity.kind is Kind.OPTION else "bold #36C5F0"),
                Text(entity.description or "", "#9CA3AF"),
                Text("mandatory" if entity.mandatory else "optional", "dim"),
            )
        return Group(Text.assemble(("usage: ", "bold #00E6FF"), self.syntax()), table)

    def __repr__(self):
        return "parser(%r)" % self.syntax()


def invoke(parser, prompt=Unset, /, **options):
    """
    Convenience runner for parsers.

    Parameters
    - parser: an object implementing __invoke__ (normally a Parser).
    - prompt: Unset | str | Iterable[str], see Parser.__invoke__.
    - options: runtime options (shell, fancy, colorful).

    Raises
    - TypeError: when 'parser' cannot be invoked.
    """
    if hasattr(parser, "__invoke__") and callable(parser.__invoke__):
        return parser.__invoke__(prompt, **options)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "Parser",
    "invoke",
)
