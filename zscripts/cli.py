r"""
zscripts declarations: define_cli() and the Cli facade.

Overview
- Positional(name, field, descr=Unset)
  One ordered positional argument. Its help description falls back to the
  field's own descr.

- Definition(...)
  The immutable declaration of one script's command line: description, hint,
  examples, ordered positionals, flags (name -> Field, declaration order) and
  aliases (alias -> canonical flag name). Every property returns a copy.

- Cli(definition)
  The facade scripts export as `cli`. It compiles the Schema once and exposes:
  • parse(argv) -> ParsedArgs      (raises ValidationError)
  • help_text(name=None) -> str
  • render_help(name=None, *, colorful=True) -> rich.text.Text
  • definition, schema

- define_cli(**declaration) -> Cli
  Keyword-only builder. `positionals` is a sequence of Positional or an ordered
  mapping name -> Field; `docs` may carry descriptions for both groups:

      cli = define_cli(
          description="Generate a new script",
          positionals={"name": string()},
          flags={"force": boolean().default(False)},
          aliases={"f": "force"},
          docs={"positionals": {"name": "script name"}, "flags": {"force": "overwrite"}},
      )

Naming rules
- positional, flag and alias names start with a letter and continue with letters,
  digits, "_" or "-" (so every name is reachable from the command line);
- "_" is reserved for the raw positional tokens.

Errors
- TypeError / ValueError: malformed declarations (wrong types, bad names, empty text).
- DefinitionConflictError: colliding positional/flag names, aliases that point at an
  undeclared flag or shadow a declared name, and the reserved name "_".
"""
import re
from collections.abc import Iterable, Mapping

from rich.text import Text

from .faults import DefinitionConflictError, FaultCode
from .fields import Field
from .help import render_help, help_text
from .parsing import parse
from .schema import CATCH_ALL, build_schema
from .utils import *

_NAME = re.compile(r"[^\W\d_][\w-]*")


def _sanitize_name(cls, name, role, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {role} names must be strings")
    if name == CATCH_ALL:
        raise DefinitionConflictError(
            "%r is reserved for the raw positional tokens" % CATCH_ALL,
            title="reserved name",
            code=FaultCode.RESERVED_NAME,
            names=(CATCH_ALL,),
            hint="choose another %s name" % role,
        )
    if not _NAME.fullmatch(name):
        raise ValueError(f"{cls.__typename__} {role} name {name!r} must start with a letter and contain only letters, digits, '_' or '-'")
    return name


def _sanitize_text(cls, name, value, /):
    if not isinstance(value, str | Text | Unset | None):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    return coalesce(value)


class Positional(metaclass=DeclarationType):
    """One ordered positional argument: a name, its field and an optional description."""

    __introspectable__ = ("name", "field")
    __displayable__ = ("name", "field", "descr")

    def __init__(self, name, field, /, descr=Unset):
        cls = type(self)
        self._name = _sanitize_name(cls, name, "positional")
        if not isinstance(field, Field):
            raise TypeError(f"{cls.__typename__} 'field' must be a field")
        self._field = field
        self._descr = _sanitize_text(cls, "descr", descr)
        self.__sealed__ = True

    @property
    def descr(self):
        return self._descr if self._descr is not None else self._field.descr

    def __eq__(self, other):
        if not isinstance(other, Positional):
            return NotImplemented
        return (self._name, self._field, self.descr) == (other._name, other._field, other.descr)

    def __hash__(self):
        return hash(self._name)


class Definition(metaclass=DeclarationType):
    """
    Immutable declaration of a script's command line.

    Properties (read-only copies)
    - description, hint: str | Text | None
    - examples: tuple[str, ...]
    - positionals: tuple[Positional, ...]
    - flags: dict[str, Field] in declaration order
    - aliases: dict[str, str] alias -> canonical flag name
    """

    __introspectable__ = (
        "description",
        "hint",
        "examples",
        "positionals",
        "flags",
        "aliases",
    )

    def __init__(
            self,
            *,
            description=Unset,
            hint=Unset,
            examples=(),
            positionals=(),
            flags=Unset,
            aliases=Unset,
    ):
        cls = type(self)

        self._description = _sanitize_text(cls, "description", description)
        self._hint = _sanitize_text(cls, "hint", hint)

        if isinstance(examples, str) or not isinstance(examples, Iterable):
            raise TypeError(f"{cls.__typename__} 'examples' must be an iterable of strings")
        sanitized = []
        for example in examples:
            if not isinstance(example, str | Text):
                raise TypeError(f"{cls.__typename__} 'examples' must be an iterable of strings")
            elif isinstance(example, str) and not (example := example.strip()):
                raise ValueError(f"{cls.__typename__} 'examples' must be an iterable of non-empty strings")
            sanitized.append(example)
        self._examples = tuple(sanitized)

        if isinstance(positionals, str) or not isinstance(positionals, Iterable):
            raise TypeError(f"{cls.__typename__} 'positionals' must be an iterable of positionals")
        positionals = tuple(positionals)
        if not all(isinstance(positional, Positional) for positional in positionals):
            raise TypeError(f"{cls.__typename__} 'positionals' must be an iterable of positionals")
        self._positionals = positionals

        if not isinstance(flags := coalesce(flags, {}), Mapping):
            raise TypeError(f"{cls.__typename__} 'flags' must be a mapping of names to fields")
        for name, field in flags.items():
            _sanitize_name(cls, name, "flag")
            if not isinstance(field, Field):
                raise TypeError(f"{cls.__typename__} flag {name!r} must be a field")
        self._flags = dict(flags)

        if not isinstance(aliases := coalesce(aliases, {}), Mapping):
            raise TypeError(f"{cls.__typename__} 'aliases' must be a mapping of aliases to flag names")
        declared = {positional.name for positional in positionals}
        for alias, canonical in aliases.items():
            _sanitize_name(cls, alias, "alias")
            if not isinstance(canonical, str):
                raise TypeError(f"{cls.__typename__} alias {alias!r} must point at a flag name")
            if canonical not in self._flags:
                raise DefinitionConflictError(
                    "alias %r points at the undeclared flag %r" % (alias, canonical),
                    title="undeclared alias target",
                    code=FaultCode.UNDECLARED_ALIAS_TARGET,
                    names=(alias, canonical),
                    hint="declare %r under flags or fix the alias" % canonical,
                )
            if alias in self._flags or alias in declared:
                raise DefinitionConflictError(
                    "alias %r shadows a declared name" % alias,
                    title="alias shadowing",
                    code=FaultCode.ALIAS_SHADOWING,
                    names=(alias,),
                    hint="pick an alias that is not already a flag or positional name",
                )
        self._aliases = dict(aliases)
        self.__sealed__ = True


class Cli(metaclass=DeclarationType):
    """
    Parser, schema and help for one Definition.

    The Schema is compiled once at construction (so declaration conflicts surface
    immediately) and reused read-only by every parse() call.
    """

    __introspectable__ = ("definition", "schema")

    def __init__(self, definition, /):
        if not isinstance(definition, Definition):
            raise TypeError(f"{type(self).__typename__} 'definition' must be a definition")
        self._definition = definition
        self._schema = build_schema(definition)
        self.__sealed__ = True

    def parse(self, argv, /):
        """
        Parse `argv` (the tokens after the script name) into ParsedArgs.

        Raises
        - ValidationError: with field, reason and issues of the failure.
        """
        return parse(self._definition, argv, schema=self._schema)

    def help_text(self, name=None, /):
        """Plain help text; `name` is the script name shown in usage."""
        return help_text(self._definition, name)

    def render_help(self, name=None, /, *, colorful=True):
        """Styled help as rich Text (see zscripts.help for the palette)."""
        return render_help(self._definition, name, colorful=colorful)


def define_cli(
        *,
        description=Unset,
        hint=Unset,
        examples=(),
        positionals=(),
        flags=Unset,
        aliases=Unset,
        docs=Unset,
):
    """
    Build a Cli from keyword declarations.

    `docs` is an optional mapping {"positionals": {name: descr}, "flags": {name: descr}};
    its descriptions are attached to the matching declarations and take precedence over
    the fields' own descr.

    Raises
    - TypeError / ValueError: malformed declarations.
    - DefinitionConflictError: conflicting names (see module docstring).
    """
    if not isinstance(docs := coalesce(docs, {}), Mapping):
        raise TypeError("define_cli() 'docs' must be a mapping")
    if unknown := set(docs) - {"positionals", "flags"}:
        raise ValueError("define_cli() 'docs' accepts only 'positionals' and 'flags', got %s" % ", ".join(map(repr, sorted(unknown))))
    positional_docs = docs.get("positionals") or {}
    flag_docs = docs.get("flags") or {}
    if not isinstance(positional_docs, Mapping) or not isinstance(flag_docs, Mapping):
        raise TypeError("define_cli() 'docs' groups must be mappings of names to descriptions")

    if isinstance(positionals, Mapping):
        positionals = [
            Positional(name, field, positional_docs.get(name, Unset))
            for name, field in positionals.items()
        ]
    elif positional_docs:
        if isinstance(positionals, str) or not isinstance(positionals, Iterable):
            raise TypeError("define_cli() 'positionals' must be a sequence of positionals or a mapping of names to fields")
        positionals = [
            Positional(positional.name, positional.field, positional_docs[positional.name])
            if isinstance(positional, Positional) and positional.name in positional_docs else positional
            for positional in positionals
        ]

    if flag_docs and isinstance(flags, Mapping):
        flags = {
            name: field.describe(flag_docs[name]) if name in flag_docs and isinstance(field, Field) else field
            for name, field in flags.items()
        }

    return Cli(Definition(
        description=description,
        hint=hint,
        examples=examples,
        positionals=positionals,
        flags=flags,
        aliases=aliases,
    ))


__all__ = (
    "Positional",
    "Definition",
    "Cli",
    "define_cli",
)
