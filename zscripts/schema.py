"""
zscripts schema: a closed validator compiled from a definition.

What this module provides
- Schema: an immutable, ordered mapping of field name -> Field with validate(data).
  The field set is closed (strict): any key outside it is rejected.
- build_schema(definition): positionals (declaration order), then flags (declaration
  order), then the implicit catch-all "_" (optional sequence of raw strings).

Validation rules (per field, schema order)
- present          → Field.convert(value)
- absent + default → the declared default (a fresh copy)
- absent + optional→ omitted from the result
- otherwise        → "missing required value"
Switches that were not given are filled in as False by the parser, so a required
boolean positional is still reported as missing.

Every issue of a pass is collected; SchemaError names the first one and keeps all of
them in `issues`. Unknown keys are reported before field issues.
"""
import difflib
from collections.abc import Mapping

from .faults import SchemaError, DefinitionConflictError, FaultCode
from .fields import Field, Kind
from .utils import *

CATCH_ALL = "_"

_RAW_TOKENS = Field(Kind.SEQUENCE, optional=True)


class Schema(metaclass=DeclarationType):
    """
    Closed validator over a mapping of field name -> value.

    Properties
    - fields: dict name -> Field (a fresh copy, insertion order = documentation order)
    - names: tuple of field names, "_" last
    """

    __introspectable__ = ("fields",)

    def __init__(self, fields, /):
        if not isinstance(fields, Mapping):
            raise TypeError("schema 'fields' must be a mapping")
        for name, field in fields.items():
            if not isinstance(name, str):
                raise TypeError("schema field names must be strings")
            if not isinstance(field, Field):
                raise TypeError("schema field %r must be a field" % name)
        self._fields = dict(fields)
        self.__sealed__ = True

    @property
    def names(self):
        return tuple(self._fields)

    def __contains__(self, name):
        return name in self._fields

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self):
        return hash(tuple(self._fields))

    def validate(self, data, /):
        """
        Validate and coerce `data` against the closed field set.

        Returns
        - dict: one entry per present/defaulted field, in schema order.

        Raises
        - TypeError: when data is not a mapping.
        - SchemaError: with field, reason and issues of the failed pass.
        """
        if not isinstance(data, Mapping):
            raise TypeError("validate() argument must be a mapping")

        issues = []
        declared = [name for name in self._fields if name != CATCH_ALL]

        for name in data:
            if name not in self._fields:
                issues.append((name, "unknown field", FaultCode.UNKNOWN_FIELD))

        result = {}
        for name, field in self._fields.items():
            if name in data:
                try:
                    result[name] = field.convert(data[name])
                except ValueError as error:
                    issues.append((name, str(error), FaultCode.INVALID_VALUE))
            elif field.has_default:
                result[name] = field.default_value
            elif field.is_optional:
                continue
            else:
                issues.append((name, "missing required value", FaultCode.MISSING_FIELD))

        if not issues:
            return result

        name, reason, code = issues[0]
        match code:
            case FaultCode.UNKNOWN_FIELD:
                message = "unknown field %r" % name
                title = "unknown field"
                if suggestions := difflib.get_close_matches(name, declared, 1):
                    hint = "did you mean %r?" % suggestions[0]
                else:
                    hint = "remove it; declared fields are %s" % (", ".join(map(repr, declared)) or "none")
            case FaultCode.MISSING_FIELD:
                message = "missing required value for %r" % name
                title = "missing value"
                hint = "provide a value for %r" % name
            case _:
                message = "invalid value for %r: %s" % (name, reason)
                title = "invalid value"
                hint = "fix the value of %r" % name

        if len(issues) > 1:
            message += " (and %d more %s)" % (len(issues) - 1, "issue" if len(issues) == 2 else "issues")

        raise SchemaError(
            message,
            title=title,
            code=code,
            hint=hint,
            field=name,
            reason=reason,
            issues=tuple((name, reason) for name, reason, _ in issues),
        )


def build_schema(definition, /):
    """
    Compile a definition into a closed Schema.

    Contract
    - every positional and every flag becomes a field with its declared descriptor;
    - "_" (optional sequence of raw strings) is always appended;
    - names must be unique across positionals and flags, and "_" is reserved.

    Raises
    - DefinitionConflictError: on a positional/flag collision or use of "_".
    """
    fields = {}
    for positional in definition.positionals:
        if positional.name in fields:
            raise DefinitionConflictError(
                "positional %r is declared more than once" % positional.name,
                title="name collision",
                code=FaultCode.NAME_COLLISION,
                names=(positional.name,),
                hint="give each positional a distinct name",
            )
        fields[positional.name] = positional.field

    for name, field in definition.flags.items():
        if name in fields:
            raise DefinitionConflictError(
                "flag %r collides with the positional of the same name" % name,
                title="name collision",
                code=FaultCode.NAME_COLLISION,
                names=(name,),
                hint="rename either the flag or the positional",
            )
        fields[name] = field

    if CATCH_ALL in fields:
        raise DefinitionConflictError(
            "%r is reserved for the raw positional tokens" % CATCH_ALL,
            title="reserved name",
            code=FaultCode.RESERVED_NAME,
            names=(CATCH_ALL,),
            hint="choose another name",
        )

    fields[CATCH_ALL] = _RAW_TOKENS
    return Schema(fields)


__all__ = (
    "CATCH_ALL",
    "Schema",
    "build_schema",
)
