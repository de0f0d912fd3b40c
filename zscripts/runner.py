"""
zscripts dispatcher: `zscripts <script> [args...]`.

Command line
- zscripts | zscripts help | zscripts --help | zscripts -h   general help
- zscripts hint <script>                                     script help
- zscripts <script> --help | -h | help                       script help
- zscripts <script> [args...]                                run the script

Script resolution
- Core scripts are the modules of zscripts.scripts (list, gen, example); they win
  over user scripts of the same name.
- User scripts live under the scripts directory: $ZSCRIPTS_HOME/scripts/<name>.py
  (ZSCRIPTS_HOME defaults to the current working directory). Names may contain "/"
  for nested directories ("tools/resize-image").

Script module contract
- cli + run(args): argv is parsed with cli.parse() and run receives ParsedArgs.
  A ValidationError is reported on stderr followed by the script's help (exit 1).
- run(argv) or main(argv) without cli: the callable receives the raw argv list.
- A coroutine result is driven with asyncio.run(); an int result is the exit status.

This is the only module that reads sys.argv, the environment or the filesystem to
find scripts; the parsing core never does.
"""
import asyncio
import difflib
import importlib
import importlib.util
import inspect
import os
import pkgutil
import re
import sys
from pathlib import Path

from rich.console import Console
from rich.text import Text

from . import scripts as _core
from .faults import UnknownScriptError, ValidationError, FaultCode, trigger

console = Console()

_HELP = ("help", "--help", "-h")


def scripts_home(environ=None, /):
    """Return the zscripts home directory ($ZSCRIPTS_HOME or the current directory)."""
    environ = os.environ if environ is None else environ
    return Path(environ.get("ZSCRIPTS_HOME") or os.getcwd()).resolve()


def scripts_dir(environ=None, /):
    """Return the user scripts directory (<home>/scripts)."""
    return scripts_home(environ) / "scripts"


def core_scripts():
    """Sorted names of the bundled scripts."""
    return sorted(
        module.name for module in pkgutil.iter_modules(_core.__path__)
        if not module.name.startswith("_")
    )


def user_scripts(directory=None, /):
    """Sorted names of the user scripts ("/"-separated for nested ones); [] when missing."""
    directory = scripts_dir() if directory is None else Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        path.relative_to(directory).with_suffix("").as_posix()
        for path in directory.rglob("*.py")
        if path.is_file() and not any(part.startswith(("_", ".")) for part in path.relative_to(directory).parts)
    )


def _resolve_user_script(name, directory):
    # refuse anything that escapes the scripts directory
    path = (directory / (name + ".py")).resolve()
    if not path.is_relative_to(directory.resolve()) or not path.is_file():
        return None
    return path


def load_script(name, /, *, directory=None):
    """
    Import the script called `name` and return its module.

    Raises
    - UnknownScriptError: when neither a core nor a user script has this name.
    """
    directory = scripts_dir() if directory is None else Path(directory)

    if name in core_scripts():
        return importlib.import_module(f"{_core.__name__}.{name}")

    if path := _resolve_user_script(name, directory):
        spec = importlib.util.spec_from_file_location(
            "_zscripts_script_" + re.sub(r"\W", "_", name), path
        )
        module = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(spec.name, None)
            raise
        return module

    known = [*core_scripts(), *user_scripts(directory)]
    if suggestions := difflib.get_close_matches(name, known, 1):
        hint = "did you mean %r?" % suggestions[0]
    else:
        hint = "run 'zscripts list' to see the available scripts"
    raise UnknownScriptError(
        "script %r not found" % name,
        title="unknown script",
        code=FaultCode.UNKNOWN_SCRIPT,
        hint=hint,
        name=name,
    )


def general_help():
    """Return the general help as rich Text."""
    return Text("\n").join([
        Text.assemble(("usage", "bold #00E6FF"), ": ", ("zscripts", "bold #FF4D94"), " <script> [args] [options]"),
        Text(""),
        Text.assemble(("Examples", "bold #FFFFFF"), ":"),
        Text("  zscripts list"),
        Text("  zscripts gen <script>"),
        Text("  zscripts <script> --help"),
        Text("  zscripts hint <script>"),
        Text(""),
        Text("Tip: export a 'cli' built with zscripts.define_cli() from your script to get typed arguments and help", "italic #9CA3AF"),
    ])


def script_help(name, module, /):
    """
    Return the help of a loaded script as rich Text.

    Falls back to the module docstring when the script exports no cli.
    """
    if (cli := getattr(module, "cli", None)) is not None and callable(getattr(cli, "render_help", None)):
        return cli.render_help(name)
    if doc := inspect.getdoc(module):
        return Text(doc)
    return Text("no help found for script %r; export a 'cli' built with zscripts.define_cli() to enable help" % name)


def _complete(result):
    if inspect.iscoroutine(result):
        result = asyncio.run(result)
    return result if isinstance(result, int) and not isinstance(result, bool) else 0


def run_script(name, argv, /, *, directory=None):
    """
    Load and run one script with `argv` (the tokens after its name).

    Returns the exit status. UnknownScriptError propagates to the caller.
    """
    module = load_script(name, directory=directory)
    cli = getattr(module, "cli", None)
    run = getattr(module, "run", None)

    if cli is not None and callable(run):
        try:
            args = cli.parse(argv)
        except ValidationError as error:
            trigger(error, shell=True, deferred=True, prog=f"zscripts {name}")
            console.print()
            console.print(cli.render_help(name))
            return 1
        return _complete(run(args))

    for entry in (run, getattr(module, "main", None)):
        if callable(entry):
            return _complete(entry(list(argv)))

    # scripts without an entry point do their work on import
    return 0


def dispatch(argv, /, *, directory=None):
    """
    Route one zscripts command line (without the program name) and return the exit status.
    """
    argv = list(argv)

    if not argv or argv[0] in _HELP:
        console.print(general_help())
        return 0

    entry, *params = argv

    try:
        if entry == "hint":
            if not params:
                console.print(Text("usage: zscripts hint <script>"))
                return 1
            console.print(script_help(params[0], load_script(params[0], directory=directory)))
            return 0

        if "--help" in params or "-h" in params or params[:1] == ["help"]:
            console.print(script_help(entry, load_script(entry, directory=directory)))
            return 0

        return run_script(entry, params, directory=directory)
    except UnknownScriptError as error:
        trigger(error, shell=True, deferred=True)
        return 1


def main(argv=None, /):
    """Console entry point."""
    sys.exit(dispatch(sys.argv[1:] if argv is None else argv))


__all__ = (
    "scripts_home",
    "scripts_dir",
    "core_scripts",
    "user_scripts",
    "load_script",
    "general_help",
    "script_help",
    "run_script",
    "dispatch",
    "main",
)
