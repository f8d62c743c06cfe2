"""
Command tree construction tests (builder rules, implicit flags, introspection).

Scope
- Validate that declaration rules fail fast with the matching BuilderError.
- Validate implicit --help/-h and --version flags.
- Validate parent/root/path/usage and the read-only introspection surface.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (command, Command, add_option/add_positional/add_subcommand).
"""
import gc
import unittest
from unittest import TestCase

from arbor import command, Command, Option
from arbor.faults import (
    BuilderError,
    OptionOrderError,
    MixedOperandsError,
    VariadicPositionError,
    MultipleDefaultError,
    DuplicateNameError,
    MalformedNameError,
    FaultCode,
)


class TestBuilderRules(TestCase):
    """Declaration-order and schema rules."""

    def testOptionAfterPositionalRejected(self):
        tool = command("tool").add_positional("file")
        with self.assertRaises(OptionOrderError):
            tool.add_option("--verbose")

    def testOptionAfterSubcommandRejected(self):
        tool = command("tool")
        tool.add_subcommand("run")
        with self.assertRaises(OptionOrderError):
            tool.add_option("--verbose")

    def testPositionalAfterSubcommandRejected(self):
        tool = command("tool")
        tool.add_subcommand("run")
        with self.assertRaises(MixedOperandsError):
            tool.add_positional("file")

    def testSubcommandAfterPositionalRejected(self):
        tool = command("tool").add_positional("file")
        with self.assertRaises(MixedOperandsError):
            tool.add_subcommand("run")
        self.assertEqual(tool.children, {})

    def testPositionalAfterVariadicRejected(self):
        tool = command("tool").add_positional("files", multiple=True)
        with self.assertRaises(VariadicPositionError):
            tool.add_positional("dest")

    def testVariadicLastAccepted(self):
        tool = command("tool").add_positional("dest").add_positional("files", multiple=True)
        self.assertEqual(list(tool.positionals), ["dest", "files"])

    def testMultipleDefaultRejected(self):
        with self.assertRaises(MultipleDefaultError):
            command("tool").add_option("--tag", default="x", multiple=True)

    def testDuplicateLongNameRejected(self):
        tool = command("tool").add_option("--verbose")
        with self.assertRaises(DuplicateNameError):
            tool.add_option("--verbose", "x")

    def testDuplicateShortRejected(self):
        tool = command("tool").add_option("--verbose", "v")
        with self.assertRaises(DuplicateNameError):
            tool.add_option("--version-check", "v")

    def testImplicitHelpNameTaken(self):
        with self.assertRaises(DuplicateNameError):
            command("tool").add_option("--host", "h")

    def testDuplicatePositionalRejected(self):
        tool = command("tool").add_positional("file")
        with self.assertRaises(DuplicateNameError):
            tool.add_positional("file")

    def testDuplicateSubcommandRejected(self):
        tool = command("tool")
        tool.add_subcommand("run")
        with self.assertRaises(DuplicateNameError):
            tool.add_subcommand("run")

    def testMalformedCommandNameRejected(self):
        with self.assertRaises(MalformedNameError):
            command("-tool")
        with self.assertRaises(MalformedNameError):
            command("two words")

    def testNonStringVersionRejected(self):
        with self.assertRaises(TypeError):
            command("tool", version=1)

    def testBuilderErrorsAreValueErrors(self):
        with self.assertRaises(ValueError):
            command("tool").add_positional("a", multiple=True).add_positional("b")

    def testBuilderErrorCarriesContext(self):
        tool = command("tool").add_positional("file")
        try:
            tool.add_option("--late")
        except BuilderError as error:
            self.assertIs(error.code, FaultCode.OPTION_ORDER)
            self.assertEqual(error.input, "--late")
            self.assertIs(error.tool, tool)
        else:
            self.fail("OptionOrderError not raised")


class TestImplicitFlags(TestCase):
    """Implicit --help and --version flags."""

    def testHelpAlwaysDeclared(self):
        options = command("tool").options
        self.assertIn("--help", options)
        self.assertEqual(options["--help"].short, "-h")

    def testVersionOnlyWithVersionString(self):
        self.assertNotIn("--version", command("tool").options)
        self.assertIn("--version", command("tool", version="1.0").options)

    def testSubcommandGetsOwnHelp(self):
        child = command("tool").add_subcommand("run")
        self.assertIn("--help", child.options)
        self.assertNotIn("--version", child.options)

    def testHelpDeclaredFirst(self):
        tool = command("tool", version="1.0").add_option("--verbose")
        self.assertEqual(list(tool.options), ["--help", "--version", "--verbose"])


class TestIntrospection(TestCase):
    """Parent links, usage text, and read-only views."""

    def setUp(self):
        self.root = command("foo", descr="the foo tool", version="2.0")
        self.root.add_option("--verbose", "v", multiple=True)
        self.cat = self.root.add_subcommand("cat", descr="feed the cat")
        self.cat.add_option("--rate", default="10000").add_positional("food")

    def testChainingReturnsSelf(self):
        tool = command("tool")
        self.assertIs(tool.add_option("--a"), tool)
        self.assertIs(tool.add_positional("b"), tool)

    def testAddSubcommandReturnsChild(self):
        self.assertIsInstance(self.cat, Command)
        self.assertEqual(self.cat.name, "cat")
        self.assertIs(self.root.children["cat"], self.cat)

    def testParentRootPath(self):
        self.assertIsNone(self.root.parent)
        self.assertIs(self.cat.parent, self.root)
        self.assertIs(self.cat.root, self.root)
        self.assertEqual(self.cat.path, (self.root, self.cat))

    def testParentLinkIsWeak(self):
        child = command("tool").add_subcommand("run")
        gc.collect()
        self.assertIsNone(child.parent)

    def testUsage(self):
        self.assertEqual(self.root.usage, "foo [options] <command>")
        self.assertEqual(self.cat.usage, "foo cat [options] <food>")

    def testVariadicUsage(self):
        tool = command("tool").add_positional("files", multiple=True)
        self.assertEqual(tool.usage, "tool [options] <files>...")

    def testMetadata(self):
        self.assertEqual(self.root.descr, "the foo tool")
        self.assertEqual(self.root.version, "2.0")
        self.assertIsNone(self.cat.version)

    def testViewsAreCopies(self):
        self.root.options.clear()
        self.root.children.clear()
        self.assertIn("--verbose", self.root.options)
        self.assertIn("cat", self.root.children)

    def testOptionSpecsExposed(self):
        rate = self.cat.options["--rate"]
        self.assertIsInstance(rate, Option)
        self.assertEqual(rate.default, "10000")

    def testRepr(self):
        text = repr(self.root)
        self.assertTrue(text.startswith("command("))
        self.assertIn("name='foo'", text)
        self.assertIn("children=['cat']", text)


if __name__ == "__main__":
    unittest.main()
