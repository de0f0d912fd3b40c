# python
"""
Argument parser behavioral tests.

Scope
- Boolean-flag detection and alias normalization.
- Token grammar: long/short flags, inline values, grouped switches, negation,
  negative numbers, the "--" terminator.
- Positional mapping and the "_" catch-all.
- Validation failures surface as ValidationError with field and reason.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from unittest import TestCase

from zscripts import (
    FaultCode,
    ParsedArgs,
    SchemaError,
    ValidationError,
    boolean,
    boolean_keys,
    choice,
    custom,
    define_cli,
    is_boolean,
    normalize_aliases,
    number,
    string,
    tokenize,
)


def _cli():
    return define_cli(
        positionals={"input": string()},
        flags={
            "count": number().optional(),
            "verbose": boolean().default(False),
        },
        aliases={"c": "count", "v": "verbose"},
    )


class TestBooleanDetection(TestCase):

    def testBooleanWithModifiers(self):
        self.assertTrue(is_boolean(boolean()))
        self.assertTrue(is_boolean(boolean().optional()))
        self.assertTrue(is_boolean(boolean().default(True).describe("switch")))

    def testValueTakingKinds(self):
        for field in (string(), number(), choice("a"), custom(bool)):
            self.assertFalse(is_boolean(field))

    def testBooleanKeysIncludeAliases(self):
        self.assertEqual(boolean_keys(_cli().definition), frozenset({"verbose", "v"}))


class TestNormalizeAliases(TestCase):

    def testAliasPromoted(self):
        self.assertEqual(normalize_aliases({"c": "3"}, {"c": "count"}), {"count": "3"})

    def testCanonicalWins(self):
        self.assertEqual(normalize_aliases({"c": "1", "count": "2"}, {"c": "count"}), {"count": "2"})

    def testUnknownKeysPassThrough(self):
        self.assertEqual(normalize_aliases({"x": True}, {"c": "count"}), {"x": True})

    def testInputNotMutated(self):
        raw = {"c": "3"}
        normalize_aliases(raw, {"c": "count"})
        self.assertEqual(raw, {"c": "3"})


class TestTokenize(TestCase):

    def testLongForms(self):
        assignments, leftovers = tokenize(["--a=1", "--b", "2", "pos"])
        self.assertEqual(assignments, {"a": "1", "b": "2"})
        self.assertEqual(leftovers, ["pos"])

    def testBooleanNeverConsumesNextToken(self):
        assignments, leftovers = tokenize(["--verbose", "x"], booleans={"verbose"})
        self.assertEqual(assignments, {"verbose": True})
        self.assertEqual(leftovers, ["x"])

    def testNegation(self):
        assignments, _ = tokenize(["--no-verbose"], booleans={"verbose"})
        self.assertEqual(assignments, {"verbose": False})

    def testNegationOnlyForBooleans(self):
        assignments, _ = tokenize(["--no-count"], booleans={"verbose"})
        self.assertEqual(assignments, {"no-count": True})

    def testInlineBooleanWords(self):
        assignments, _ = tokenize(["--verbose=FALSE", "-q=true"], booleans={"verbose", "q"})
        self.assertEqual(assignments, {"verbose": False, "q": True})

    def testGroupedSwitches(self):
        assignments, leftovers = tokenize(["-abc", "3"], booleans={"a", "b"})
        self.assertEqual(assignments, {"a": True, "b": True, "c": "3"})
        self.assertEqual(leftovers, [])

    def testInlineShortValue(self):
        assignments, _ = tokenize(["-c3"])
        self.assertEqual(assignments, {"c": "3"})

    def testMultiLetterAlias(self):
        assignments, _ = tokenize(["-dry"], booleans={"dry"}, known={"dry"})
        self.assertEqual(assignments, {"dry": True})

    def testNegativeNumbersAreValues(self):
        assignments, leftovers = tokenize(["-c", "-3", "-4.5"])
        self.assertEqual(assignments, {"c": "-3"})
        self.assertEqual(leftovers, ["-4.5"])

    def testDashAloneIsPositional(self):
        self.assertEqual(tokenize(["-"]), ({}, ["-"]))

    def testValueNotTakenFromFlag(self):
        assignments, _ = tokenize(["--count", "--verbose"], booleans={"verbose"})
        self.assertEqual(assignments, {"count": True, "verbose": True})

    def testTerminator(self):
        assignments, leftovers = tokenize(["a", "--", "-b", "--c", "--"])
        self.assertEqual(assignments, {})
        self.assertEqual(leftovers, ["a", "-b", "--c", "--"])

    def testValueNotTakenFromTerminator(self):
        assignments, leftovers = tokenize(["--name", "--", "x"])
        self.assertEqual(assignments, {"name": True})
        self.assertEqual(leftovers, ["x"])

    def testRepeatedSpellingKeepsLastValue(self):
        assignments, _ = tokenize(["--count", "1", "-v", "--count", "2", "-v"], booleans={"v"})
        self.assertEqual(assignments, {"count": "2", "v": True})

    def testAnyLongTokenIsAFlag(self):
        for token in ("--my.flag", "--2fa", "--force!", "--dry+run"):
            assignments, leftovers = tokenize([token])
            self.assertEqual(assignments, {token[2:]: True})
            self.assertEqual(leftovers, [])

    def testLongTokenIsNotTakenAsValue(self):
        assignments, leftovers = tokenize(["--name", "--my.flag", "x"])
        self.assertEqual(assignments, {"name": True, "my.flag": "x"})
        self.assertEqual(leftovers, [])

    def testStringArgvRejected(self):
        with self.assertRaises(TypeError):
            tokenize("--count 3")
        with self.assertRaises(TypeError):
            tokenize(["--count", 3])


class TestParse(TestCase):

    def testShortAliasWithValue(self):
        args = _cli().parse(["foo.txt", "-c", "3"])
        self.assertIsInstance(args, ParsedArgs)
        self.assertEqual(args, {"input": "foo.txt", "count": 3, "verbose": False, "_": ["foo.txt"]})

    def testInvalidNumberNamesTheField(self):
        with self.assertRaises(ValidationError) as context:
            _cli().parse(["foo.txt", "--count", "abc"])
        error = context.exception
        self.assertIsInstance(error, SchemaError)
        self.assertEqual(error.field, "count")
        self.assertEqual(error.reason, "expected number, received 'abc'")
        self.assertIsInstance(error.__cause__, SchemaError)

    def testBooleanAliasDoesNotConsumePositional(self):
        args = _cli().parse(["-v", "x"])
        self.assertIs(args.verbose, True)
        self.assertEqual(args.input, "x")

    def testTerminatorKeepsFlagsAsPositionals(self):
        cli = define_cli(flags={"b": boolean().optional()})
        args = cli.parse(["a", "--", "-b", "--c"])
        self.assertEqual(args["_"], ["a", "-b", "--c"])
        self.assertNotIn("b", args)
        self.assertNotIn("c", args)

    def testCatchAllKeepsEveryLeftover(self):
        args = _cli().parse(["a", "b", "--count=2", "c"])
        self.assertEqual(args.input, "a")
        self.assertEqual(args._, ["a", "b", "c"])

    def testCanonicalWinsOverAlias(self):
        self.assertEqual(_cli().parse(["x", "-c", "1", "--count", "2"]).count, 2)

    def testInlineValues(self):
        cli = _cli()
        self.assertEqual(cli.parse(["x", "--count=5"]).count, 5)
        self.assertEqual(cli.parse(["x", "-c=5"]).count, 5)
        self.assertEqual(cli.parse(["x", "-c5"]).count, 5)

    def testNegativeNumber(self):
        self.assertEqual(_cli().parse(["x", "-c", "-3"]).count, -3)
        cli = define_cli(positionals={"delta": number()})
        self.assertEqual(cli.parse(["-3"]).delta, -3)

    def testNegatedSwitch(self):
        cli = define_cli(flags={"color": boolean().default(True)})
        self.assertIs(cli.parse([]).color, True)
        self.assertIs(cli.parse(["--no-color"]).color, False)

    def testMultiLetterAlias(self):
        cli = define_cli(flags={"dry-run": boolean()}, aliases={"dry": "dry-run"})
        self.assertIs(cli.parse(["-dry"])["dry-run"], True)

    def testBareValueFlag(self):
        with self.assertRaises(ValidationError) as context:
            _cli().parse(["x", "--count"])
        self.assertEqual(context.exception.field, "count")
        self.assertEqual(context.exception.reason, "expected a value")

    def testUnknownOption(self):
        with self.assertRaises(ValidationError) as context:
            _cli().parse(["x", "--bogus"])
        error = context.exception
        self.assertEqual(error.field, "bogus")
        self.assertIs(error.options["code"], FaultCode.UNKNOWN_FIELD)
        self.assertIn("--bogus", str(error))

    def testUnknownOptionSuggestion(self):
        with self.assertRaises(ValidationError) as context:
            _cli().parse(["x", "--verbos"])
        self.assertIn("--verbose", context.exception.options["hint"])

    def testMissingPositional(self):
        with self.assertRaises(ValidationError) as context:
            _cli().parse([])
        self.assertEqual(context.exception.field, "input")

    def testRepeatedFlagLastWins(self):
        args = _cli().parse(["x", "-v", "-v", "--count", "1", "--count", "2"])
        self.assertIs(args.verbose, True)
        self.assertEqual(args.count, 2)

    def testUnknownGroupedSwitches(self):
        with self.assertRaises(ValidationError) as context:
            _cli().parse(["x", "-foo"])
        error = context.exception
        self.assertIs(error.options["code"], FaultCode.UNKNOWN_FIELD)
        self.assertIn("unknown option '-f'", str(error))

    def testMalformedLongFlagRejected(self):
        with self.assertRaises(ValidationError) as context:
            _cli().parse(["--my.flag"])
        error = context.exception
        self.assertIs(error.options["code"], FaultCode.UNKNOWN_FIELD)
        self.assertEqual(error.field, "my.flag")
        self.assertIn("--my.flag", str(error))

    def testAbsentSwitchIsOff(self):
        cli = define_cli(flags={"quiet": boolean()}, aliases={"q": "quiet"})
        self.assertIs(cli.parse([]).quiet, False)
        self.assertIs(cli.parse(["-q"]).quiet, True)

    def testMissingBooleanPositional(self):
        with self.assertRaises(ValidationError) as context:
            define_cli(positionals={"on": boolean()}).parse([])
        self.assertEqual(context.exception.field, "on")
        self.assertEqual(context.exception.reason, "missing required value")

    def testParseIsPure(self):
        cli = _cli()
        argv = ["foo.txt", "-c", "3", "extra"]
        self.assertEqual(cli.parse(argv), cli.parse(argv))
        self.assertEqual(argv, ["foo.txt", "-c", "3", "extra"])

    def testChoiceAndCustom(self):
        cli = define_cli(
            flags={
                "format": choice("json", "yaml").default("json"),
                "port": custom(int).optional(),
            },
            aliases={"p": "port"},
        )
        args = cli.parse(["--format", "yaml", "-p", "8080"])
        self.assertEqual(args.format, "yaml")
        self.assertEqual(args.port, 8080)
        with self.assertRaises(ValidationError):
            cli.parse(["--format", "xml"])


class TestParsedArgs(TestCase):

    def testAbsentOptionalReadsAsNone(self):
        args = _cli().parse(["x"])
        self.assertIsNone(args.count)
        self.assertNotIn("count", args)

    def testUndeclaredAttributeRejected(self):
        with self.assertRaises(AttributeError):
            _cli().parse(["x"]).nope

    def testReadOnly(self):
        args = _cli().parse(["x"])
        with self.assertRaises(AttributeError):
            args.input = "y"
        with self.assertRaises(TypeError):
            args["input"] = "y"

    def testRepr(self):
        self.assertEqual(repr(ParsedArgs({"a": 1})), "parsed-args(a=1)")

    def testCopyAndPickle(self):
        args = _cli().parse(["x"])
        for clone in (copy.copy(args), copy.deepcopy(args), pickle.loads(pickle.dumps(args))):
            self.assertIsInstance(clone, ParsedArgs)
            self.assertEqual(clone, args)
            self.assertIsNone(clone.count)
        self.assertIsNot(copy.deepcopy(args)["_"], args["_"])


if __name__ == "__main__":
    unittest.main()
