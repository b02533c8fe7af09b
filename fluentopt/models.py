"""
Fluentopt parse results.

ArgumentModel is what a Parser returns for an accepted token stream. It holds a
bound copy of every entity of the grammar (present or not), in declaration
order, and answers presence and value queries by name, by option key, or by
command name.

Values
- plain argument  → the literal token (str)
- value option    → the literal following token (str)
- flag option     → True
- command         → the nested ArgumentModel
- absent entity   → not present; get(...) returns the given default

Invariant
- Every mandatory entity of the grammar is present: a model is only built after
  the mandatory check passed.
"""
from types import MappingProxyType

from .arguments import Kind
from .utils import *


class ArgumentModel:
    """
    Immutable view over one parse outcome.

    Parameters
    - parser: the Parser that produced this model (used for syntax()).
    - entities: bound entities, one per grammar entity, in declaration order.
    """

    def __init__(self, parser, entities, /):
        self._parser = parser
        self._entities = tuple(sorted(entities, key=lambda entity: entity.index))
        self._names = MappingProxyType({entity.name: entity for entity in self._entities})
        keys = {}
        for entity in self._entities:
            if entity.kind is Kind.OPTION:
                keys.update(dict.fromkeys(entity.keys, entity))
        self._keys = MappingProxyType(keys)

    parser = mirror("parser")

    @property
    def arguments(self):
        return tuple(entity for entity in self._entities if entity.kind is Kind.ARGUMENT)

    @property
    def options(self):
        return tuple(entity for entity in self._entities if entity.kind is Kind.OPTION)

    @property
    def commands(self):
        return tuple(entity for entity in self._entities if entity.kind is Kind.COMMAND)

    def __getitem__(self, name):
        """
        Return the bound entity declared under 'name'.

        Raises
        - KeyError: when no entity with that name was declared.
        """
        return self._names[name]

    def __contains__(self, name):
        entity = self._names.get(name)
        return entity is not None and entity.present

    def __iter__(self):
        return iter(self._entities)

    def __len__(self):
        return len(self._entities)

    def is_present(self, name):
        """
        Whether the entity declared under 'name' was matched.

        Raises
        - KeyError: when no entity with that name was declared.
        """
        return self[name].present

    def get(self, name, default=None):
        """
        Return the value bound to 'name', or 'default' when it is absent
        (or not declared at all).
        """
        entity = self._names.get(name)
        if entity is None or not entity.present:
            return default
        return entity.value

    def get_option(self, key):
        """
        Resolve an option by any of its key forms.

        Accepted forms for an option declared with key 'b' and long key 'bar':
        "b", "-b", "bar" and "--bar".

        Raises
        - KeyError: when no option answers to 'key'.
        """
        if not isinstance(key, str):
            raise TypeError("get_option() argument must be a string")
        for candidate in (key, "-" + key, "--" + key):
            try:
                return self._keys[candidate]
            except KeyError:
                continue
        raise KeyError(key)

    def is_option_present(self, key):
        return self.get_option(key).present

    def get_option_value(self, key, default=None):
        option = self.get_option(key)
        return option.value if option.present else default

    def get_command(self, name):
        """
        Return the nested model of command 'name', or None when it was not invoked.

        Raises
        - KeyError: when 'name' is not a declared command.
        """
        command = self._names[name]
        if command.kind is not Kind.COMMAND:
            raise KeyError(name)
        return command.value if command.present else None

    def is_command_present(self, name):
        return self.get_command(name) is not None

    def values(self):
        """
        Mapping of name → value for the present entities only.
        """
        return MappingProxyType({entity.name: entity.value for entity in self._entities if entity.present})

    def syntax(self):
        return self._parser.syntax()

    def __eq__(self, other):
        if not isinstance(other, ArgumentModel):
            return NotImplemented
        return tuple(self._names) == tuple(other._names) and dict(self.values()) == dict(other.values())

    __hash__ = None

    def __rich_repr__(self):
        for entity in self._entities:
            if entity.present:
                yield entity.name, entity.value

    def __repr__(self):
        return "argument-model(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "ArgumentModel",
)
