"""
zscripts faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and make searches predictable.
- CliException: base type that carries message + options and knows how to render
  itself (lowercased, header + message + single hint) through rich.
- Concrete faults
  • DefinitionConflictError: the declaration itself is unusable (construction time).
  • SchemaError / ValidationError: a token map failed the closed schema; both carry
    the offending field, the reason and every collected issue.
  • UnknownScriptError / ScriptExistsError / ScriptOutsideError: dispatcher and
    scaffolding failures.
- trigger(): central entry point to surface a fault (raise, or print in shell mode).

Propagation policy
- The parsing core never prints: it raises. Presentation belongs to the caller;
  the dispatcher triggers faults in shell mode and follows them with help text.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - definitions (1010x)
      • NAME_COLLISION, UNDECLARED_ALIAS_TARGET, ALIAS_SHADOWING, RESERVED_NAME
    - validation (1111x)
      • UNKNOWN_FIELD, MISSING_FIELD, INVALID_VALUE
    - dispatcher (1310x)
      • UNKNOWN_SCRIPT, SCRIPT_EXISTS, SCRIPT_OUTSIDE
    """
    # --- definition errors (10xxx) ---
    NAME_COLLISION              = 10101
    UNDECLARED_ALIAS_TARGET     = 10102
    ALIAS_SHADOWING             = 10103
    RESERVED_NAME               = 10104

    # --- validation errors (11xxx) ---
    UNKNOWN_FIELD               = 11111
    MISSING_FIELD               = 11112
    INVALID_VALUE               = 11113

    # --- dispatcher errors (13xxx) ---
    UNKNOWN_SCRIPT              = 13101
    SCRIPT_EXISTS               = 13102
    SCRIPT_OUTSIDE              = 13103

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CliException(Exception):
    """
    base fault: a message plus read-only rendering/context options.

    common options
    - code: FaultCode
    - title: short lowercase title for the header
    - hint: one actionable sentence
    - prog: program name for the header (overridden by __prog__ in __main__)
    - shell, deferred, fancy, colorful: presentation switches used by trigger()
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "zscripts")), styler("prog-name"))

        code = self.options.get("code")
        code = code.normalize() if isinstance(code, FaultCode) else "?"

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, styler("code")),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))

        renders = [message]
        if self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class DefinitionConflictError(CliException):
    """a declaration is unusable: colliding names, dangling aliases, reserved names."""

    @property
    def names(self):
        return tuple(self.options.get("names", ()))


class SchemaError(CliException):
    """
    a mapping failed validation against a closed schema.

    attributes
    - field: name of the first offending field
    - reason: why it was rejected (e.g., "expected number, received 'abc'")
    - issues: every (field, reason) pair collected in the same pass, in schema order
    """

    @property
    def field(self):
        return self.options.get("field")

    @property
    def reason(self):
        return self.options.get("reason")

    @property
    def issues(self):
        return tuple(self.options.get("issues", ((self.field, self.reason),)))


class ValidationError(SchemaError):
    """raised by Cli.parse() when argv does not satisfy the definition."""


class UnknownScriptError(CliException):
    """the dispatcher cannot resolve a script by name."""


class ScriptExistsError(CliException):
    """scaffolding refused to overwrite an existing script."""


class ScriptOutsideError(CliException):
    """scaffolding refused to write outside the scripts directory."""


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CliException).
    - options are merged into the fault via copy.replace() before triggering.
    - outside shell mode the fault is raised; in shell mode it is printed on the
      stderr console and the process exits with status 1 unless deferred=True.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "CliException",
    "DefinitionConflictError",
    "SchemaError",
    "ValidationError",
    "UnknownScriptError",
    "ScriptExistsError",
    "ScriptOutsideError",
    "FaultCode",
    "trigger",
)
