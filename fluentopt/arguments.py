r"""
Fluentopt grammar entities.

Overview
- Entities (a closed variant, tagged by Kind)
  • PlainArgument: positional, value-bearing slot bound by declaration order.
  • Option: keyed entry (-k and/or --long-key); either a presence-only flag or a
    value option consuming the following token.
  • Command: named branch owning a nested Parser; its value is the nested
    ArgumentModel produced from the token suffix after the command name.

- Shared capability set
  • index (ordinal), name, description, mandatory, kind, option, value, present,
    fullname (display form). All exposed as read-only properties.

- Binding
  • Entities are never mutated by parsing. A parser produces a bound copy with
    copy.replace(entity, value=...), so a finalized grammar can be reused.

Metadata (sanitized on construction)
- index: int >= 0, the shared declaration ordinal stamped by the builder.
- name: non-empty string (trimmed).
- description: None | str; empty strings are treated as None.
- mandatory: bool.
- Option only
  • key: Unset | single character that is neither "-" nor whitespace.
  • long_key: Unset | non-empty string without whitespace not starting with "-".
  • at least one of key/long_key is required.
  • expects_value: bool.
- Command only
  • parser: Unset | Parser (anything with a syntax() method).

Display
- PlainArgument  → "<name>"
- Option         → "-k", "--long" or "-k | --long", plus " <name>" when valued
- Command        → "name" plus " <nested syntax>" when the nested grammar is not empty
- str(entity) wraps the display form in brackets when the entity is optional.

Quick example:
    >>> argument = PlainArgument(0, "foo")
    >>> str(argument)
    '<foo>'
    >>> option = Option(1, "bar", key="b", long_key="bar")
    >>> str(option)
    '[-b | --bar]'
"""
import enum
import functools
import operator
import re

from .faults import InvalidArgumentError
from .utils import *


class Kind(enum.Enum):
    """
    Tag of the closed entity variant.
    """
    ARGUMENT = "argument"
    OPTION = "option"
    COMMAND = "command"


class ArgumentType(type):
    """
    Metaclass that turns entity classes into introspectable descriptors.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_name" backing field.
    - Provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        introspectable = namespace.get("__introspectable__", ())
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in introspectable if name not in namespace
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(index=1, name='bar', key='b', long_key='bar', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers (e.g., rich).
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every entity.

    - index: must be a non-negative integer (booleans are rejected).
    - name: must be a string, non-empty after trimming; stored trimmed.
    - description: None/Unset or a string; blank strings collapse to None.
    - mandatory: coerced to bool.

    Raises
    - InvalidArgumentError: on any violation.
    """
    if not isinstance(index := metadata["index"], int) or isinstance(index, bool):
        raise InvalidArgumentError(f"{cls.__typename__} index must be an integer")
    elif index < 0:
        raise InvalidArgumentError(f"{cls.__typename__} index cannot be negative")

    if not isinstance(name := metadata["name"], str):
        raise InvalidArgumentError(f"{cls.__typename__} name must be a string")
    elif not (name := name.strip()):
        raise InvalidArgumentError(f"{cls.__typename__} name cannot be empty")
    metadata["name"] = name

    if not isinstance(description := metadata["description"], str | None | Unset):
        raise InvalidArgumentError(f"{cls.__typename__} description must be a string")
    elif isinstance(description, str) and not description.strip():
        description = None
    metadata["description"] = coalesce(description)

    metadata["mandatory"] = bool(metadata["mandatory"])


def _sanitize_keyed_metadata(cls, metadata, /):
    """
    Internal: validate the short and long keys of an option.

    - key: a single character, not "-" and not whitespace.
    - long_key: a non-empty string, no whitespace, not starting with "-".
    - at least one of the two must be given.
    """
    key, long_key = metadata["key"], metadata["long_key"]

    if key is not Unset:
        if not isinstance(key, str):
            raise InvalidArgumentError(f"{cls.__typename__} key must be a string")
        elif len(key) != 1 or key == "-" or key.isspace():
            raise InvalidArgumentError(f"{cls.__typename__} key must be a single character other than '-'")

    if long_key is not Unset:
        if not isinstance(long_key, str):
            raise InvalidArgumentError(f"{cls.__typename__} long key must be a string")
        elif not long_key or long_key.startswith("-") or re.search(r"\s", long_key):
            raise InvalidArgumentError(f"{cls.__typename__} long key must be non-empty, unprefixed and without spaces")

    if key is Unset and long_key is Unset:
        raise InvalidArgumentError(f"{cls.__typename__} {metadata['name']!r} must specify a key or a long key")

    metadata["expects_value"] = bool(metadata["expects_value"])


class _Entity:
    """
    Behavior shared by the three entity kinds.

    Subclasses declare __introspectable__ and a _metadata() method returning the
    constructor keywords needed to rebuild an equivalent unbound entity.
    """
    kind = Unset

    @property
    def option(self):
        """
        Whether this entity is an option (the "is this an option" predicate).
        """
        return self.kind is Kind.OPTION

    @property
    def present(self):
        """
        Whether this entity received a value during parsing.
        """
        return self._value is not Unset

    @property
    def usage(self):
        """
        Usage token: the display form, bracketed when the entity is optional.
        """
        return self.fullname if self.mandatory else f"[{self.fullname}]"

    def __replace__(self, /, **overrides):
        """
        copy.replace() support: rebuild the entity with overridden metadata.

        The special "value" override binds a parse result to the copy; every
        other key is forwarded to the constructor and sanitized again.
        """
        value = overrides.pop("value", self._value)
        index = overrides.pop("index", self.index)
        name = overrides.pop("name", self.name)
        clone = type(self)(index, name, **(self._metadata() | overrides))
        clone._value = value
        return clone

    def __str__(self):
        return self.usage


class PlainArgument(_Entity, metaclass=ArgumentType):
    """
    Positional argument specification.

    A plain argument is bound to the next plain token in declaration order
    (among plain arguments only). Its value is the literal token, unaltered.
    """
    kind = Kind.ARGUMENT

    __introspectable__ = (
        "index",
        "name",
        "description",
        "mandatory",
        "value",
    )

    def __init__(self, index, name, /, mandatory=True, description=Unset):
        metadata = {
            "index": index,
            "name": name,
            "description": description,
            "mandatory": mandatory,
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = Unset

    @property
    def fullname(self):
        return f"<{self.name}>"

    def _metadata(self):
        return {"mandatory": self.mandatory, "description": self.description}


class Option(_Entity, metaclass=ArgumentType):
    """
    Keyed option specification.

    An option is recognized by its lexical form: "-k" for its short key, "--long"
    for its long key. Both forms resolve to the same entity, so a value bound
    through either satisfies presence checks for the whole option.

    - expects_value=False: presence-only flag; bound value is True.
    - expects_value=True: the following token is consumed verbatim as its value.
    """
    kind = Kind.OPTION

    __introspectable__ = (
        "index",
        "name",
        "key",
        "long_key",
        "expects_value",
        "description",
        "mandatory",
        "value",
    )

    def __init__(
            self,
            index,
            name,
            /,
            key=Unset,
            long_key=Unset,
            expects_value=False,
            mandatory=False,
            description=Unset
    ):
        metadata = {
            "index": index,
            "name": name,
            "key": key,
            "long_key": long_key,
            "expects_value": expects_value,
            "description": description,
            "mandatory": mandatory,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_keyed_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = Unset

    @property
    def keys(self):
        """
        Every token form that selects this option ("-k" first, then "--long").
        """
        keys = []
        if self.key is not Unset:
            keys.append("-" + self.key)
        if self.long_key is not Unset:
            keys.append("--" + self.long_key)
        return tuple(keys)

    @property
    def fullname(self):
        fullname = " | ".join(self.keys)
        if self.expects_value:
            fullname += f" <{self.name}>"
        return fullname

    def _metadata(self):
        return {
            "key": self.key,
            "long_key": self.long_key,
            "expects_value": self.expects_value,
            "mandatory": self.mandatory,
            "description": self.description,
        }


class Command(_Entity, metaclass=ArgumentType):
    """
    Sub-command specification.

    A command owns a nested parser. When its name is met in the token stream,
    the rest of the tokens belong to that parser exclusively; the nested result
    (an ArgumentModel) becomes the command's value.

    Commands compare and hash by name.
    """
    kind = Kind.COMMAND

    __introspectable__ = (
        "index",
        "name",
        "description",
        "mandatory",
        "parser",
        "value",
    )

    def __init__(self, index, name, /, parser=Unset, mandatory=False, description=Unset):
        metadata = {
            "index": index,
            "name": name,
            "description": description,
            "mandatory": mandatory,
        }
        _sanitize_metadata(type(self), metadata)

        if parser is not Unset and not callable(getattr(parser, "syntax", None)):
            raise InvalidArgumentError(f"{type(self).__typename__} parser must be a parser")
        metadata["parser"] = parser

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = Unset

    @property
    def fullname(self):
        if self.parser is Unset or not (syntax := self.parser.syntax()):
            return self.name
        return f"{self.name} {syntax}"

    def _metadata(self):
        return {"parser": self.parser, "mandatory": self.mandatory, "description": self.description}

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)


__all__ = (
    "Kind",
    "PlainArgument",
    "Option",
    "Command",
)

# Not part of the public API.
del ArgumentType
