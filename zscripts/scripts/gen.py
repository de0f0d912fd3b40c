"""Scaffold a new typed script inside the scripts directory."""
from zscripts import define_cli, string, boolean, trigger, runner
from zscripts.faults import ScriptExistsError, ScriptOutsideError, FaultCode

cli = define_cli(
    description="Generate a new zscripts script file inside the scripts/ directory.",
    hint="Usage: zscripts gen <name> [--force]",
    examples=[
        "zscripts gen hello-world",
        "zscripts gen tools/resize-image",
    ],
    positionals={
        "name": string(),
    },
    flags={
        "force": boolean().default(False),
    },
    aliases={
        "f": "force",
    },
    docs={
        "positionals": {
            "name": "Script name, e.g. 'hello-world' or 'tools/resize-image'",
        },
        "flags": {
            "force": "Overwrite existing files if they already exist",
        },
    },
)

TEMPLATE = '''\
"""Describe what {name} does."""
from zscripts import define_cli, string, number, boolean, runner

cli = define_cli(
    description="Describe what {name} does.",
    hint="Usage: zscripts {name} <input> [--count=1]",
    examples=[
        "zscripts {name} foo",
        "zscripts {name} foo --count=3",
    ],
    positionals={{
        "input": string(),
    }},
    flags={{
        "count": number().default(1),
        "verbose": boolean().default(False),
    }},
    aliases={{"c": "count", "v": "verbose"}},
    docs={{
        "positionals": {{"input": "Primary input"}},
        "flags": {{"count": "Number of times", "verbose": "Enable verbose logging"}},
    }},
)


def run(args):
    if args.verbose:
        runner.console.print("Running {name}...")
    runner.console.print({{"input": args.input, "count": args.count}})
'''


def generate(name, /, *, directory, force=False):
    """
    Write the script template for `name` under `directory` and return its path.

    Raises
    - ScriptOutsideError: when the target resolves outside `directory`.
    - ScriptExistsError: when the target exists and force is False.
    """
    route = name.lstrip("/").removesuffix(".py")
    directory = directory.resolve()
    target = (directory / (route + ".py")).resolve()

    if not route or target == directory or not target.is_relative_to(directory):
        raise ScriptOutsideError(
            "refusing to write outside %s: %s" % (directory, target),
            title="script outside",
            code=FaultCode.SCRIPT_OUTSIDE,
            hint="use a name relative to the scripts directory",
        )
    if target.exists() and not force:
        raise ScriptExistsError(
            "refusing to overwrite existing file: %s" % target,
            title="script exists",
            code=FaultCode.SCRIPT_EXISTS,
            hint="use --force to overwrite it",
        )

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(TEMPLATE.format(name=target.relative_to(directory).with_suffix("").as_posix()), encoding="utf-8")
    return target


def run(args):
    try:
        target = generate(args.name, directory=runner.scripts_dir(), force=args.force)
    except (ScriptExistsError, ScriptOutsideError) as error:
        trigger(error, shell=True, deferred=True, prog="zscripts gen")
        return 1
    runner.console.print("Created %s" % target, highlight=False)
