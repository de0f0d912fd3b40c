r"""
zscripts parsing: argv tokens -> validated ParsedArgs.

Pipeline (every step is pure; nothing here reads sys.argv or the environment)
1. boolean_keys(): which flag spellings are zero-argument switches.
2. tokenize(): split argv into flag assignments and leftover positional tokens.
3. normalize_aliases(): promote alias keys to their canonical key.
4. positional mapping: the i-th leftover token becomes the i-th declared positional;
   the full leftover list is always kept under "_".
5. Schema.validate(): closed validation + coercion; failures become ValidationError.

Token grammar
- --name, --name=value, --name value (value-taking flags only)
- --no-name                          (boolean switches only; sets False)
- -x, -x=value, -x value             (short spellings, usually aliases)
- -alias                             (a declared multi-letter alias or flag name)
- -abc                               (grouped switches: a, b on; c follows the -x rules)
- -c3                                (letter + non-letter remainder: inline value "3")
- --                                 (stop: every later token is a raw positional)
Every other "--..." token is a flag too, so "--my.flag" reaches validation and is
rejected as an unknown option. A spelling given twice keeps its last value.
A value is taken from the next token only when that token exists, is not "--" and
does not look like a flag; "-" and negative numbers such as "-3" are values.
"""
import difflib
import re
from collections import deque
from collections.abc import Iterable, Mapping

from .faults import SchemaError, ValidationError, FaultCode
from .fields import Kind
from .schema import CATCH_ALL, build_schema

_LONG_FLAG = re.compile(r"--(?P<name>[^=]+)(=(?P<value>.*))?", re.DOTALL)
_SHORT_FLAG = re.compile(r"-(?P<name>[^\W\d_][\w-]*)(=(?P<value>.*))?", re.DOTALL)


def is_boolean(field, /):
    """
    Return True when `field` is a zero-argument switch.

    The decision is a tag match on the field kind; optional/default/coerce modifiers
    never change it. Custom fields always take a value.
    """
    return field.kind is Kind.BOOLEAN


def boolean_keys(definition, /):
    """
    Return the frozenset of spellings that never consume the following token:
    boolean flag names plus every alias pointing at one of them.
    """
    booleans = {name for name, field in definition.flags.items() if is_boolean(field)}
    booleans.update(alias for alias, canonical in definition.aliases.items() if canonical in booleans)
    return frozenset(booleans)


def normalize_aliases(raw, aliases, /):
    """
    Return a new mapping where alias keys are replaced by their canonical key.

    Rules
    - alias and canonical both present: the canonical value is kept, the alias dropped.
    - alias only: its value is promoted to the canonical key.
    - keys that are not aliases (including undeclared ones) pass through unchanged.
    The input mapping is never mutated.
    """
    normalized = dict(raw)
    for alias, canonical in aliases.items():
        if alias not in normalized:
            continue
        value = normalized.pop(alias)
        normalized.setdefault(canonical, value)
    return normalized


def _spelling(name):
    return ("-" if len(name) == 1 else "--") + name


def _match_flag(token):
    if token.startswith("--"):
        return "--", _LONG_FLAG.fullmatch(token)
    return "-", _SHORT_FLAG.fullmatch(token)


def _looks_like_value(token):
    return token != "--" and not _match_flag(token)[1]


def tokenize(argv, /, *, booleans=frozenset(), known=frozenset()):
    """
    Split argv into flag assignments and leftover positional tokens.

    Parameters
    - argv: iterable of str (a bare str is rejected).
    - booleans: spellings that are switches (see boolean_keys).
    - known: every declared flag name and alias; a single-dash token whose body is a
      known name is read as that name rather than as grouped switches.

    Returns
    - tuple[dict[str, str | bool], list[str]]: assignments keyed by the spelling used
      (without dashes), in order of first appearance, and the leftover tokens. A
      spelling given more than once keeps its last value.

    Raises
    - TypeError: when argv is not an iterable of strings.
    """
    if isinstance(argv, str) or not isinstance(argv, Iterable):
        raise TypeError("tokenize() argument must be an iterable of strings")
    tokens = deque(argv)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("tokenize() argument must be an iterable of strings")

    assignments = {}
    leftovers = []

    while tokens:
        token = tokens.popleft()

        if token == "--":
            leftovers.extend(tokens)
            break

        dashes, match = _match_flag(token)
        if not match:
            leftovers.append(token)
            continue

        name, value = match["name"], match["value"]

        if dashes == "-" and len(name) > 1 and name not in known:
            if name.isalpha():
                # grouped switches: every letter but the last is a switch
                for letter in name[:-1]:
                    assignments[letter] = True
                name = name[-1]
            elif value is None:
                name, value = name[0], name[1:]

        if value is None:
            if name in booleans:
                value = True
            elif dashes == "--" and name.startswith("no-") and name[3:] in booleans:
                name, value = name[3:], False
            elif tokens and _looks_like_value(tokens[0]):
                value = tokens.popleft()
            else:
                value = True
        elif name in booleans and value.lower() in ("true", "false"):
            value = value.lower() == "true"

        assignments[name] = value

    return assignments, leftovers


class ParsedArgs(Mapping):
    """
    Validated result of one parse() call: a read-only mapping of field name -> value.

    - Absent optional fields are not keys of the mapping.
    - Attribute access is allowed for every declared field: args.count reads the
      value, or None when that optional field is absent. "_" holds the raw tokens.
    - Equality follows Mapping semantics, so a ParsedArgs compares equal to a dict.
    """
    __slots__ = ("_values", "_declared")

    def __init__(self, values, declared=(), /):
        object.__setattr__(self, "_values", dict(values))
        object.__setattr__(self, "_declared", frozenset(declared) | frozenset(values))

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        values = object.__getattribute__(self, "_values")
        if name in values:
            return values[name]
        if name in object.__getattribute__(self, "_declared"):
            return None
        raise AttributeError("parsed arguments have no field %r" % name)

    def __setattr__(self, name, value):
        raise AttributeError("parsed arguments are read-only")

    def __reduce__(self):
        return ParsedArgs, (self._values, self._declared)

    def __repr__(self):
        return "parsed-args(%s)" % ", ".join("%s=%r" % item for item in self._values.items())


def parse(definition, argv, /, *, schema=None):
    """
    Parse argv against `definition`.

    Parameters
    - definition: the Definition to honor.
    - argv: iterable of raw string tokens (never read from the process).
    - schema: a Schema previously built from the same definition (built on demand).

    Returns
    - ParsedArgs: every present/defaulted field plus "_" (all leftover tokens, in order).

    Raises
    - ValidationError: with field, reason and issues; nothing is returned partially.
    """
    if schema is None:
        schema = build_schema(definition)

    aliases = definition.aliases
    assignments, leftovers = tokenize(
        argv,
        booleans=boolean_keys(definition),
        known=frozenset(definition.flags) | frozenset(aliases),
    )

    composed = normalize_aliases(assignments, aliases)
    # a switch that was not given is off unless it declares otherwise
    for name, field in definition.flags.items():
        if is_boolean(field) and not (field.has_default or field.is_optional):
            composed.setdefault(name, False)
    for positional, token in zip(definition.positionals, leftovers):
        composed[positional.name] = token
    composed[CATCH_ALL] = list(leftovers)

    try:
        values = schema.validate(composed)
    except SchemaError as error:
        options = dict(error.options)
        if error.options.get("code") is FaultCode.UNKNOWN_FIELD:
            spellings = [_spelling(name) for name in (*definition.flags, *aliases)]
            options["title"] = "unknown option"
            options["hint"] = "see --help for the available options"
            if suggestions := difflib.get_close_matches(_spelling(error.field), spellings, 1):
                options["hint"] = "did you mean %r? see --help for the available options" % suggestions[0]
            message = "unknown option %r" % _spelling(error.field)
            if len(error.issues) > 1:
                message += " (and %d more)" % (len(error.issues) - 1)
        else:
            message = error.message
        raise ValidationError(message, **options) from error

    return ParsedArgs(values, schema.names)


__all__ = (
    "is_boolean",
    "boolean_keys",
    "normalize_aliases",
    "tokenize",
    "ParsedArgs",
    "parse",
)
