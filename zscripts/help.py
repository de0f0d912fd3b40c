"""
zscripts help text generator.

Layout (fixed order, empty sections omitted, sections separated by one blank line)
    usage: zscripts <script> <pos1> <pos2> [options]

    <description>

    <hint>

    Positionals:
      pos1  description

    Options:
      --name <kind> (-a, -b)  description (default: value)

    Examples:
      zscripts <script> ...

Palette keys
- usage-label, program-name, script-name, usage-section
- description-section, hint-section
- section-label, positional-name, option-name, alias-name, metavar
- argument-description, default, example

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- Define __prog__ in __main__ to change the program name shown in usage.
- colorful=False renders the same text without styles (help_text() uses it).
"""
from collections import defaultdict

from rich.text import Text

__all__ = (
    "render_help",
    "help_text",
)


def _format_default(value):
    return repr(value) if isinstance(value, str) else str(value)


def render_help(definition, name=None, /, *, colorful=True):
    """
    Render the help of `definition` as rich Text.

    Parameters
    - definition: the Definition to document.
    - name: the script name shown in usage ("<script>" when None).
    - colorful: apply the palette (True) or render plain text (False).

    Never raises for a valid definition; the output only depends on its inputs
    and the __main__ overrides.
    """
    main = __import__("__main__")

    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "script-name": "bold #36C5F0",  # SKY-BLUE
        "usage-section": "#36C5F0",
        "description-section": "italic #A3A3A3",  # Neutral gray
        "hint-section": "italic #9CE19C",  # gentle green

        # === Sections ===
        "section-label": "bold #FFFFFF",  # Pure white headers
        "positional-name": "bold #FFD600",  # AMBER
        "option-name": "bold #00E6FF",  # CYAN for options
        "alias-name": "#00E6FF",
        "metavar": "bold #FFD600",
        "argument-description": "#9CA3AF",  # Muted gray
        "default": "dim #9CA3AF",
        "example": "#E5E7EB",
    } | getattr(main, "__styles__", {}))

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

    def columns(rows):
        # left column padded to the widest entry plus two spaces
        width = max(len(left) for left, _ in rows)
        lines = []
        for left, right in rows:
            line = Text("  ").append(left)
            if right:
                line.append(" " * (width - len(left) + 2)).append(right)
            lines.append(line)
        return lines

    sections = []

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(text(getattr(main, "__prog__", "zscripts"), styler("program-name"))).append(" ")
    usage.append(text(name or "<script>", styler("script-name")))
    for positional in definition.positionals:
        usage.append(" ").append(text("<%s>" % positional.name, styler("usage-section")))
    usage.append(" ").append(text("[options]", styler("usage-section")))
    sections.append([usage])

    if definition.description:
        sections.append([text(definition.description, styler("description-section"))])

    if definition.hint:
        sections.append([text(definition.hint, styler("hint-section"))])

    if positionals := definition.positionals:
        rows = []
        for positional in positionals:
            rows.append((
                text(positional.name, styler("positional-name")),
                text(positional.descr, styler("argument-description")),
            ))
        sections.append([Text.assemble(text("Positionals", styler("section-label")), ":"), *columns(rows)])

    if flags := definition.flags:
        aliases = definition.aliases
        rows = []
        for flag, field in flags.items():
            left = text("--" + flag, styler("option-name"))
            if (metavar := field.metavar) is not None:
                left.append(" ").append(text("<%s>" % metavar, styler("metavar")))
            if spellings := ["-" + alias for alias, canonical in aliases.items() if canonical == flag]:
                left.append(" (").append(Text(", ").join(text(spelling, styler("alias-name")) for spelling in spellings)).append(")")

            right = text(field.descr, styler("argument-description"))
            if field.has_default:
                default = text("(default: %s)" % _format_default(field.default_value), styler("default"))
                right = Text(" ").join(part for part in (right, default) if part)
            rows.append((left, right))
        sections.append([Text.assemble(text("Options", styler("section-label")), ":"), *columns(rows)])

    if examples := definition.examples:
        sections.append([
            Text.assemble(text("Examples", styler("section-label")), ":"),
            *(Text("  ").append(text(example, styler("example"))) for example in examples),
        ])

    return Text("\n\n").join(Text("\n").join(lines) for lines in sections)


def help_text(definition, name=None, /):
    """Plain-text help of `definition` (render_help() without styles)."""
    return render_help(definition, name, colorful=False).plain
