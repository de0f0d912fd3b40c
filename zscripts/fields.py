r"""
zscripts field descriptors.

Overview
- Kind: the tag of a field. A small closed set (string, number, boolean, choice,
  custom, sequence) so that every consumer can decide behavior with a tag match
  instead of walking wrapper chains.
- Field[_T]: an immutable description of one argument (positional or flag):
  its kind plus a finite set of modifiers.
  • optional: the field may be absent from the parsed result.
  • default:  the field is filled with this value when absent.
  • coerce:   raw string tokens are converted to the kind's type.
  • descr:    short description rendered in help.
  Modifiers are applied with chained calls that return new fields:
      number().optional()
      boolean().default(False).describe("enable verbose logging")

- Sugar
  • string(): plain string.
  • number(): number coerced from its string token (int when integral, else float).
  • boolean(): presence switch (--name / --no-name).
  • choice(*values): one string among a fixed set.
  • custom(converter): anything a callable can build from the raw token. A custom
    field always takes a value; it is never detected as a boolean switch.

Conversion
- Field.convert(value) validates/coerces one raw value and returns the typed result.
  It raises ValueError whose message is the human-readable reason, e.g.
  "expected number, received 'abc'". The schema layer attaches the field name.

Validation highlights (construction time)
- kind must be a Kind (or its string value).
- choices are only allowed (and required) for choice fields; non-empty strings, no duplicates.
- converter is only allowed (and required) for custom fields; it must be callable.
- descr strings are trimmed; empty strings are rejected.
- Default values are any Python value and are not validated.
"""
import copy
import enum
import math
from collections.abc import Iterable, Sequence

from rich.text import Text

from .utils import *


class Kind(enum.Enum):
    """
    tag of a field descriptor.

    sequence is reserved for the implicit catch-all field "_" that carries the raw
    positional tokens; the declaration helpers never produce it.
    """
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CHOICE = "choice"
    CUSTOM = "custom"
    SEQUENCE = "sequence"


_TRUTHY = frozenset({"true", "yes", "on", "1"})
_FALSY = frozenset({"false", "no", "off", "0"})


def _describe(value):
    """Short rendering of a received value for error reasons."""
    if isinstance(value, str):
        return "empty string" if not value else repr(value)
    if isinstance(value, bool):
        return "boolean"
    return type(value).__name__


def _to_number(text):
    # int first so that "3" stays 3 instead of 3.0
    if not (text := text.strip()):
        raise ValueError("expected number, received empty string")
    try:
        return int(text, 10)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        raise ValueError("expected number, received %r" % text) from None
    if not math.isfinite(number):
        raise ValueError("expected a finite number, received %r" % text)
    return number


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate field metadata in place.

    Raises
    - TypeError: wrong types (kind, choices, converter, descr) or modifiers that do
      not apply to the field kind.
    - ValueError: empty descr, empty/duplicated choices.
    """
    try:
        metadata["kind"] = kind = Kind(metadata["kind"])
    except ValueError:
        raise TypeError(f"{cls.__typename__} 'kind' must be one of {", ".join(kind.value for kind in Kind)}") from None

    metadata["optional"] = bool(metadata["optional"])
    metadata["coerce"] = bool(metadata["coerce"])

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    choices = metadata["choices"]
    if kind is Kind.CHOICE:
        if isinstance(choices, str) or not isinstance(choices, Iterable):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
            elif not choice:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain empty strings")
            elif choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        if not sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' must contain at least one value")
        metadata["choices"] = tuple(sanitized)
    elif choices:
        raise TypeError(f"only choice {cls.__typename__}s accept 'choices'")
    else:
        metadata["choices"] = ()

    converter = metadata["converter"]
    if kind is Kind.CUSTOM:
        if not callable(converter):
            raise TypeError(f"{cls.__typename__} 'converter' must be callable")
    elif converter is not Unset:
        raise TypeError(f"only custom {cls.__typename__}s accept a 'converter'")
    metadata["converter"] = coalesce(converter)


class Field[_T](metaclass=DeclarationType):
    """
    Immutable descriptor of one argument.

    A field is the single source of truth for three consumers:
    - the tokenizer asks whether it is a boolean switch (kind tag match);
    - the schema calls convert() on present values and reads the default/optional
      modifiers for absent ones;
    - the help generator reads descr, the value placeholder and the default.

    Properties
    - kind, is_optional, is_coerced, choices, converter, descr (mirrored, read-only)
    - has_default, default_value (a fresh copy on each access for container defaults)
    """

    __introspectable__ = (
        "kind",
        "is_optional",
        "is_coerced",
        "choices",
        "converter",
        "descr",
    )
    __displayable__ = (
        "kind",
        "is_optional",
        "has_default",
        "default_value",
        "is_coerced",
        "choices",
        "descr",
    )

    def __init__(
            self,
            kind,
            /,
            *,
            optional=False,
            default=Unset,
            coerce=False,
            choices=(),
            converter=Unset,
            descr=Unset,
    ):
        metadata = {
            "kind": kind,
            "optional": optional,
            "default": default,
            "coerce": coerce,
            "choices": choices,
            "converter": converter,
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)

        self._kind = metadata["kind"]
        self._is_optional = metadata["optional"]
        self._default = metadata["default"]
        self._is_coerced = metadata["coerce"]
        self._choices = metadata["choices"]
        self._converter = metadata["converter"]
        self._descr = metadata["descr"]
        self.__sealed__ = True

    @property
    def has_default(self):
        return self._default is not Unset

    @property
    def default_value(self):
        """The declared default (a fresh copy for containers), or None when there is none."""
        return copy.deepcopy(coalesce(self._default))

    @property
    def is_required(self):
        return not (self._is_optional or self.has_default)

    @property
    def metavar(self):
        """
        Placeholder shown in help next to a value-taking flag, None for switches.
        """
        match self._kind:
            case Kind.BOOLEAN:
                return None
            case Kind.CHOICE:
                return "|".join(self._choices)
            case Kind.CUSTOM:
                return getattr(self._converter, "__name__", "value").strip("_<>").lower() or "value"
            case _:
                return self._kind.value

    def __replace__(self, /, **overrides):
        metadata = {
            "optional": self._is_optional,
            "default": self._default,
            "coerce": self._is_coerced,
            "choices": self._choices,
            "converter": self._converter if self._kind is Kind.CUSTOM else Unset,
            "descr": self._descr if self._descr is not None else Unset,
        } | overrides
        return type(self)(self._kind, **metadata)

    def optional(self):
        """Return a copy of this field that may be absent from the result."""
        return copy.replace(self, optional=True)

    def default(self, value, /):
        """Return a copy of this field filled with `value` when absent."""
        return copy.replace(self, default=value)

    def coerce(self):
        """Return a copy of this field that converts raw string tokens to its kind."""
        return copy.replace(self, coerce=True)

    def describe(self, descr, /):
        """Return a copy of this field with a help description."""
        return copy.replace(self, descr=descr)

    def convert(self, value, /):
        """
        Validate and coerce one raw value.

        A bare value-taking flag arrives as True (no value was given after it) and is
        reported as "expected a value" for every non-boolean kind.

        Returns
        - the typed value.

        Raises
        - ValueError: with the human-readable reason as its message.
        """
        if value is True and self._kind not in (Kind.BOOLEAN, Kind.CUSTOM):
            raise ValueError("expected a value")

        match self._kind:
            case Kind.STRING:
                if not isinstance(value, str):
                    raise ValueError("expected string, received %s" % _describe(value))
                return value
            case Kind.NUMBER:
                if isinstance(value, int | float) and not isinstance(value, bool):
                    return value
                if isinstance(value, str) and self._is_coerced:
                    return _to_number(value)
                raise ValueError("expected number, received %s" % _describe(value))
            case Kind.BOOLEAN:
                if isinstance(value, bool):
                    return value
                if isinstance(value, str) and self._is_coerced:
                    if (word := value.strip().lower()) in _TRUTHY:
                        return True
                    if word in _FALSY:
                        return False
                raise ValueError("expected boolean, received %s" % _describe(value))
            case Kind.CHOICE:
                if isinstance(value, str) and value in self._choices:
                    return value
                raise ValueError("expected one of %s, received %s" % (
                    ", ".join(map(repr, self._choices)), _describe(value)
                ))
            case Kind.CUSTOM:
                try:
                    return self._converter(value)
                except (ValueError, TypeError) as error:
                    raise ValueError(str(error) or "invalid value %s" % _describe(value)) from error
            case Kind.SEQUENCE:
                if (
                    isinstance(value, Sequence) and
                    not isinstance(value, str) and
                    all(isinstance(item, str) for item in value)
                ):
                    return list(value)
                raise ValueError("expected a sequence of strings, received %s" % _describe(value))


def string():
    """A plain string field."""
    return Field(Kind.STRING)


def number():
    """A number field coerced from its string token."""
    return Field(Kind.NUMBER, coerce=True)


def boolean():
    """A presence switch: --name sets True, --no-name sets False."""
    return Field(Kind.BOOLEAN)


def choice(*values):
    """A string field restricted to `values`."""
    return Field(Kind.CHOICE, choices=values)


def custom(converter, /):
    """
    A field built by `converter` from the raw token.

    The converter receives the raw string (or True for a bare flag) and may raise
    ValueError/TypeError; the message becomes the validation reason.
    """
    return Field(Kind.CUSTOM, converter=converter)


__all__ = (
    "Kind",
    "Field",
    "string",
    "number",
    "boolean",
    "choice",
    "custom",
)
