"""A minimal typed script; copy it as a starting point."""
from zscripts import define_cli, string, number, boolean, runner

cli = define_cli(
    description="Describe what your script does",
    hint="Usage: zscripts example <input> [--count=<n>]",
    examples=["zscripts example foo --count=3"],
    positionals={
        "input": string(),
    },
    flags={
        "count": number().optional(),
        "verbose": boolean().optional(),
    },
    aliases={
        "c": "count",
        "v": "verbose",
    },
)


def run(args):
    if args.verbose:
        runner.console.print("Verbose mode on")
    runner.console.print({"input": args.input, "count": args.count})
