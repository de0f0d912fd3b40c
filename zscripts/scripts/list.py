"""List every available script, bundled and user-defined, one per line."""
from zscripts import runner


def run(argv):
    for name in sorted({*runner.core_scripts(), *runner.user_scripts()}):
        runner.console.print(name, highlight=False)
