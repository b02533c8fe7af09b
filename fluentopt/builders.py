"""
Fluentopt builders: assemble a grammar with a fluent chain.

What this module provides
- ParserBuilder: the staging area of one grammar level. It accumulates plain
  arguments (ordered), options (indexed by short key and by long key) and
  commands (indexed by name), stamping every entity with the next ordinal of
  its level. build_and_get() converts it, once, into an immutable Parser.
- Child builders, each configuring one entity and holding a back-reference to
  the ParserBuilder that created it:
  • PlainArgumentBuilder
  • OptionBuilder
  • CommandBuilder (its build_parser() opens a nested ParserBuilder whose
    build() returns to the command builder)
  Their build() registers the entity and returns the parent builder, so the
  chain can go on.

Quick start
    parser = (
        ParserBuilder()
        .build_argument("foo")
            .set_description("the thing to work on")
            .build()
        .build_option("b", "bar")
            .set_long_key("bar")
            .build()
        .build_command("run")
            .build_parser()
                .add_argument("target")
                .build()
            .build()
        .build_and_get()
    )
    model = parser.parse(["hello", "-b"])

Rules
- Ordinals are per grammar level, start at 0, and interleave every kind.
- Names, short keys, long keys and command names are unique per level.
- A builder is single-use: touching it after finalization raises IllegalStateError.
- build() on a builder without a parent raises UnsupportedOperationError.
"""
from abc import ABC, abstractmethod

from .arguments import PlainArgument, Option, Command
from .faults import InvalidArgumentError, IllegalStateError, UnsupportedOperationError
from .parsers import Parser
from .utils import *


class ParserBuilder:
    """
    Staging struct for one grammar level.

    Parameters
    - parent: Unset | CommandBuilder
      The command builder this grammar belongs to. Set by
      CommandBuilder.build_parser(); top-level grammars have no parent.
    """

    def __init__(self, parent=Unset, /):
        if parent is not Unset and not isinstance(parent, CommandBuilder):
            raise InvalidArgumentError("parser builder parent must be a command builder")
        self._parent = parent
        self._arguments = []
        self._options = {}
        self._long_options = {}
        self._commands = {}
        self._names = set()
        self._ordinal = 0
        self._finalized = False

    @property
    def child(self):
        """
        Whether this builder belongs to a command builder.
        """
        return self._parent is not Unset

    @property
    def ordinal(self):
        """
        The ordinal the next declared entity will receive.
        """
        return self._ordinal

    def _ensure_open(self):
        if self._finalized:
            raise IllegalStateError("parser builder was already finalized")

    def _stamp(self, create, /):
        """
        Create a child builder or an entity with the next ordinal.

        The counter only moves when creation succeeded.
        """
        self._ensure_open()
        object = create(self._ordinal)
        self._ordinal += 1
        return object

    def _register(self, entity):
        """
        Register a finished entity into the staging collections.

        Raises
        - IllegalStateError: when the builder is finalized, or a command has no parser.
        - InvalidArgumentError: on duplicated names or keys.
        """
        self._ensure_open()
        if entity.name in self._names:
            raise InvalidArgumentError(f"name {entity.name!r} is already in use")

        match entity:
            case PlainArgument():
                self._arguments.append(entity)
            case Option():
                if entity.key is not Unset and entity.key in self._options:
                    raise InvalidArgumentError(f"option key {entity.key!r} is already in use")
                if entity.long_key is not Unset and entity.long_key in self._long_options:
                    raise InvalidArgumentError(f"option long key {entity.long_key!r} is already in use")
                # both key maps point at the very same object
                if entity.key is not Unset:
                    self._options[entity.key] = entity
                if entity.long_key is not Unset:
                    self._long_options[entity.long_key] = entity
            case Command():
                if entity.parser is Unset:
                    raise IllegalStateError(f"command {entity.name!r} has no parser")
                self._commands[entity.name] = entity
            case _:
                raise InvalidArgumentError("only plain arguments, options and commands can be registered")

        self._names.add(entity.name)
        return self

    def build_argument(self, name, /):
        """
        Open a builder for a plain argument named 'name'.

        Raises
        - InvalidArgumentError: when 'name' is not a non-empty string.
        """
        return self._stamp(lambda index: PlainArgumentBuilder(self, index, name))

    def add_argument(self, name, description=Unset, /, mandatory=True):
        """
        Register a plain argument directly (mandatory unless told otherwise).
        """
        return self._register(self._stamp(lambda index: PlainArgument(index, name, mandatory, description)))

    def build_option(self, key, name, /):
        """
        Open a builder for an option named 'name'.

        A one-character 'key' is the short key ("-k"); anything longer is the
        long key ("--key"). The other form can be added on the option builder.
        """
        keys = _keyed(key)
        return self._stamp(lambda index: OptionBuilder(self, index, name, **keys))

    def add_option(self, key, name, description=Unset, /, *, long_key=Unset):
        """
        Register a presence-only, optional option directly.
        """
        keys = _keyed(key)
        if long_key is not Unset:
            if "long_key" in keys:
                raise InvalidArgumentError("add_option() got two long keys")
            keys["long_key"] = long_key
        return self._register(self._stamp(lambda index: Option(index, name, description=description, **keys)))

    def build_command(self, name, /):
        """
        Open a builder for a command named 'name'.
        """
        return self._stamp(lambda index: CommandBuilder(self, index, name))

    def add_command(self, name, parser, description=Unset, /, mandatory=False):
        """
        Register a command around an already finalized parser.
        """
        if not isinstance(parser, Parser):
            raise InvalidArgumentError("add_command() parser must be a parser")
        return self._register(self._stamp(lambda index: Command(index, name, parser, mandatory, description)))

    def build_and_get(self):
        """
        Finalize this grammar into an immutable Parser.

        When this builder was opened by CommandBuilder.build_parser(), the
        parser is also handed to that command builder.
        """
        self._ensure_open()
        parser = Parser(
            sorted(self._arguments, key=lambda argument: argument.index),
            self._options,
            self._long_options,
            self._commands,
        )
        if self._parent is not Unset:
            self._parent.set_parser(parser)
        self._finalized = True
        return parser

    def build(self):
        """
        Finalize this grammar and return to the owning command builder.

        Raises
        - UnsupportedOperationError: when this builder has no parent.
        """
        if self._parent is Unset:
            raise UnsupportedOperationError("this parser builder has no parent builder")
        self.build_and_get()
        return self._parent


def _keyed(key):
    if not isinstance(key, str):
        raise InvalidArgumentError("option key must be a string")
    return {"key": key} if len(key) == 1 else {"long_key": key}


class ArgumentBuilder(ABC):
    """
    Base of the child builders: one entity, one parent, one use.

    Subclasses define __entity__ (the entity class). Settings are validated as
    soon as they are given by building a throwaway entity from them.
    """
    __entity__ = Unset

    def __init__(self, parent, index, name, /, **metadata):
        if parent is not Unset and not isinstance(parent, ParserBuilder):
            raise InvalidArgumentError(f"{type(self).__name__} parent must be a parser builder")
        self._parent = parent
        self._index = index
        self._name = name
        self._metadata = {}
        self._built = False
        self._update(**metadata)

    @property
    def child(self):
        return self._parent is not Unset

    def _ensure_open(self):
        if self._built:
            raise IllegalStateError(f"{type(self).__entity__.__typename__} {self._name!r} was already built")

    def _create(self, metadata):
        return type(self).__entity__(self._index, self._name, **metadata)

    def _update(self, **metadata):
        self._ensure_open()
        metadata = self._metadata | metadata
        self._create(metadata)
        self._metadata = metadata
        return self

    def _validate(self):
        """
        Hook run before the entity is finalized.
        """

    def set_mandatory(self, mandatory=True):
        return self._update(mandatory=mandatory)

    def set_description(self, description):
        return self._update(description=description)

    def build_and_get(self):
        """
        Finalize the entity, register it with the parent (if any) and return it.
        """
        self._ensure_open()
        self._validate()
        entity = self._create(self._metadata)
        if self._parent is not Unset:
            self._parent._register(entity)
        self._built = True
        return entity

    def build(self):
        """
        Finalize the entity and return to the parent builder.

        Raises
        - UnsupportedOperationError: when this builder has no parent.
        """
        if self._parent is Unset:
            raise UnsupportedOperationError(f"this {type(self).__entity__.__typename__} builder has no parent builder")
        self.build_and_get()
        return self._parent

    @abstractmethod
    def __repr__(self): ...


class PlainArgumentBuilder(ArgumentBuilder):
    __entity__ = PlainArgument

    def __repr__(self):
        return "plain-argument-builder(index=%r, name=%r)" % (self._index, self._name)


class OptionBuilder(ArgumentBuilder):
    __entity__ = Option

    def set_key(self, key):
        return self._update(key=key)

    def set_long_key(self, long_key):
        return self._update(long_key=long_key)

    def set_expects_value(self, expects_value=True):
        return self._update(expects_value=expects_value)

    def __repr__(self):
        return "option-builder(index=%r, name=%r)" % (self._index, self._name)


class CommandBuilder(ArgumentBuilder):
    """
    Builder of a command and gateway to its nested grammar.

    Either hand over a finished parser with set_parser(), or open a nested
    ParserBuilder with build_parser(); that builder's build() finalizes the
    nested grammar, installs it here, and returns this command builder.
    """
    __entity__ = Command

    def set_parser(self, parser):
        if not isinstance(parser, Parser):
            raise InvalidArgumentError("command parser must be a parser")
        return self._update(parser=parser)

    def build_parser(self):
        self._ensure_open()
        return ParserBuilder(self)

    def _validate(self):
        if self._metadata.get("parser", Unset) is Unset:
            raise IllegalStateError(f"command {self._name!r} has no parser specified")

    def __repr__(self):
        return "command-builder(index=%r, name=%r)" % (self._index, self._name)


__all__ = (
    "ParserBuilder",
    "ArgumentBuilder",
    "PlainArgumentBuilder",
    "OptionBuilder",
    "CommandBuilder",
)
