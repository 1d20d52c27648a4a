"""
Parse driver behavioral tests (dispatch, rejections, sub-commands, built-ins).

Scope
- Validate option/positional dispatch in every accepted spelling.
- Validate the fixed order of option checks (redundant, missing, unexpected).
- Validate sub-command resolution, scope layering and arity checks.
- Validate the Eat protocol and the Status outcome of whole parses.
- Validate built-in --help/--usage/--version/--verbosity handling.

Conventions
- Test method names follow CamelCase per project convention.
- Consoles write into StringIO buffers so rendered messages can be asserted.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from arbor import (
    Command,
    Eat,
    LogConfig,
    Option,
    Parser,
    Program,
    Status,
    Verbosity,
    command,
    parse,
)
from arbor.faults import (
    CallbackResultError,
    CommandStackOverflowError,
    DuplicateOptionError,
    EmptyArgumentsError,
    InvalidPositionalError,
    MissingArgumentError,
    OptionNotEatenError,
    PositionalCountError,
    PositionalNotEatenError,
    RedundantOptionError,
    UnexpectedArgumentError,
    UnknownOptionError,
)
from arbor.utils import Unset


class Recorder:
    """
    Callback recording every (option label, value, context) it is offered.
    """

    def __init__(self, answer=Eat.OK):
        self.answer = answer
        self.calls = []

    def __call__(self, option, value, context):
        self.calls.append((option.label if option else None, value))
        self.context = context
        return self.answer


class ParserTestCase(TestCase):

    def program(self, *args, **kwargs):
        self.stdout = Console(file=io.StringIO(), width=200)
        self.stderr = Console(file=io.StringIO(), width=200)
        kwargs.setdefault("eat", self.root)
        return Program(*args, stdout=self.stdout, stderr=self.stderr, **kwargs)

    def setUp(self):
        self.root = Recorder()
        self.force = Option("force", "f")
        self.output = Option("output", "o", "FILE")
        self.key = Option(key="k")
        self.jobs = Option("jobs", "j", "N", multiple=True)


class TestOptionDispatch(ParserTestCase):

    def testShortOnlyFlag(self):
        program = self.program(options=[self.key])
        result = parse(program, ["prog", "-k"])
        self.assertIs(result.status, Status.OK)
        self.assertEqual(self.root.calls, [("-k", None)])

    def testLongInlineAndSpacedValuesMatch(self):
        program = self.program(options=[self.output])
        parse(program, ["prog", "--output=out.bin"])
        inline = list(self.root.calls)
        self.root.calls.clear()
        parse(program, ["prog", "--output", "out.bin"])
        self.assertEqual(inline, [("-o/--output", "out.bin")])
        self.assertEqual(self.root.calls, inline)

    def testShortInlineAndSpacedValuesMatch(self):
        program = self.program(options=[self.output])
        parse(program, ["prog", "-oout.bin"])
        inline = list(self.root.calls)
        self.root.calls.clear()
        parse(program, ["prog", "-o", "out.bin"])
        self.assertEqual(inline, [("-o/--output", "out.bin")])
        self.assertEqual(self.root.calls, inline)

    def testClusterValueComesFromNextArgument(self):
        program = self.program(options=[self.force, self.key, self.output])
        result = parse(program, ["prog", "-fko", "value"])
        self.assertIs(result.status, Status.OK)
        self.assertEqual(self.root.calls, [
            ("-f/--force", None),
            ("-k", None),
            ("-o/--output", "value"),
        ])

    def testValueLookingLikeOptionIsMissingArgument(self):
        program = self.program(options=[self.force, self.output])
        with self.assertRaises(MissingArgumentError):
            Parser(program, ["prog", "-o", "-f"]).run()
        self.assertEqual(self.root.calls, [])

    def testValueAfterDoubleDash(self):
        program = self.program(options=[self.output])
        Parser(program, ["prog", "-o", "--", "-f"]).run()
        self.assertEqual(self.root.calls, [("-o/--output", "-f")])

    def testMissingArgumentAtEnd(self):
        program = self.program(options=[self.output])
        with self.assertRaises(MissingArgumentError) as context:
            Parser(program, ["prog", "--output"]).run()
        self.assertEqual(str(context.exception), "prog: option requires an argument -- '-o/--output'")

    def testUnexpectedArgument(self):
        program = self.program(options=[self.force])
        with self.assertRaises(UnexpectedArgumentError):
            Parser(program, ["prog", "--force=yes"]).run()
        with self.assertRaises(UnexpectedArgumentError):
            Parser(program, ["prog", "-f=yes"]).run()
        self.assertEqual(self.root.calls, [])

    def testEmptyInlineValueIsDelivered(self):
        program = self.program(options=[self.output])
        parse(program, ["prog", "--output="])
        self.assertEqual(self.root.calls, [("-o/--output", "")])

    def testRedundantOnSecondOccurrenceOnly(self):
        program = self.program(options=[self.force])
        with self.assertRaises(RedundantOptionError):
            Parser(program, ["prog", "-f", "--force"]).run()
        self.assertEqual(self.root.calls, [("-f/--force", None)])

    def testRedundantInsideCluster(self):
        program = self.program(options=[self.force])
        with self.assertRaises(RedundantOptionError):
            Parser(program, ["prog", "-ff"]).run()

    def testMultipleOptionRepeats(self):
        program = self.program(options=[self.jobs])
        result = parse(program, ["prog", "-j1", "--jobs", "2", "-j=3"])
        self.assertIs(result.status, Status.OK)
        self.assertEqual([value for _, value in self.root.calls], ["1", "2", "3"])

    def testRedundantCheckedBeforeMissingArgument(self):
        program = self.program(options=[self.output])
        with self.assertRaises(RedundantOptionError):
            Parser(program, ["prog", "-o", "a", "-o"]).run()

    def testUnknownOption(self):
        program = self.program(options=[self.force])
        result = parse(program, ["prog", "--unknown"])
        self.assertIs(result.status, Status.USER_ERROR)
        self.assertIsNone(result.command)
        self.assertEqual(self.root.calls, [])
        self.assertEqual(self.stderr.file.getvalue(), (
            "prog: invalid option -- '--unknown'\n"
            "Try `prog --help' or `prog --usage' for more information.\n"
        ))

    def testUnknownShortOptionSpelling(self):
        program = self.program(no_usage=True)
        parse(program, ["prog", "-x"])
        self.assertEqual(self.stderr.file.getvalue(), (
            "prog: invalid option -- '-x'\n"
            "Try `prog --help' for more information.\n"
        ))

    def testNoTryLineWithoutHelpers(self):
        program = self.program(no_help=True, no_usage=True)
        with self.assertRaises(UnknownOptionError):
            Parser(program, ["prog", "-h"]).run()
        parse(program, ["prog", "-h"])
        self.assertEqual(self.stderr.file.getvalue(), "prog: invalid option -- '-h'\n")


class TestPositionals(ParserTestCase):

    def testDoubleDashMakesOptionShapedPositional(self):
        program = self.program(options=[self.force])
        result = parse(program, ["prog", "--", "-x"])
        self.assertIs(result.status, Status.OK)
        self.assertEqual(self.root.calls, [(None, "-x")])

    def testArityZeroOrTwo(self):
        program = self.program(args="\nSOURCE DEST")
        for argv, status in (
                ([], Status.OK),
                (["a"], Status.USER_ERROR),
                (["a", "b"], Status.OK),
                (["a", "b", "c"], Status.USER_ERROR),
        ):
            with self.subTest(argv=argv):
                self.assertIs(parse(program, ["prog", *argv]).status, status)

    def testPositionalCountFault(self):
        program = self.program(args="INPUT")
        with self.assertRaises(PositionalCountError) as context:
            Parser(program, ["prog"]).run()
        self.assertEqual(context.exception.options["count"], 0)
        self.assertEqual(str(context.exception), "prog: invalid positional arguments count")

    def testAnyCountWithoutSpec(self):
        program = self.program()
        self.assertIs(parse(program, ["prog", "a", "b", "c", "d"]).status, Status.OK)
        self.assertEqual(len(self.root.calls), 4)

    def testUnrecognizedPositional(self):
        self.root.answer = Eat.UNRECOGNIZED
        program = self.program()
        with self.assertRaises(InvalidPositionalError) as context:
            Parser(program, ["prog", "bogus"]).run()
        self.assertEqual(context.exception.message, "invalid argument -- 'bogus'")

    def testPositionalNotEaten(self):
        program = self.program(eat=Unset)
        with self.assertRaises(PositionalNotEatenError):
            Parser(program, ["prog", "file"]).run()

    def testOptionNotEaten(self):
        self.root.answer = Eat.NOT_EATEN
        program = self.program(options=[self.force])
        with self.assertRaises(OptionNotEatenError) as context:
            Parser(program, ["prog", "-f"]).run()
        self.assertEqual(context.exception.message, "option not eaten -- '-f/--force'")


class TestSubCommands(ParserTestCase):

    def setUp(self):
        super().setUp()
        self.build = Recorder()
        self.buildcmd = Command(
            "build",
            [self.output],
            args="INPUT",
            eat=self.build,
            context="build-context",
        )

    def testEndToEndScenario(self):
        program = self.program(
            options=[Option("verbosity", "V", "LEVEL")],
            commands=[self.buildcmd],
            no_logging=True,
        )
        result = parse(program, ["prog", "--verbosity=3", "build", "-o", "out.bin", "a.c"])
        self.assertIs(result.status, Status.OK)
        self.assertIs(result.command, self.buildcmd)
        self.assertEqual(result.path, ("prog", "build"))
        self.assertEqual(self.root.calls, [("-V/--verbosity", "3")])
        self.assertEqual(self.build.calls, [("-o/--output", "out.bin"), (None, "a.c")])
        self.assertEqual(self.build.context, "build-context")

    def testSubCommandNameNeverPositional(self):
        program = self.program(args="FIRST\nFIRST SECOND", commands=[self.buildcmd])
        result = parse(program, ["prog", "x", "build", "a.c"])
        self.assertIs(result.command, self.buildcmd)
        self.assertEqual(self.root.calls, [(None, "x")])
        self.assertEqual(self.build.calls, [(None, "a.c")])

    def testParentArityNotCheckedAfterSubCommand(self):
        program = self.program(args="ONE TWO", commands=[self.buildcmd])
        self.assertIs(parse(program, ["prog", "build", "a.c"]).status, Status.OK)

    def testSubCommandArityChecked(self):
        program = self.program(commands=[self.buildcmd])
        with self.assertRaises(PositionalCountError) as context:
            Parser(program, ["prog", "build"]).run()
        self.assertEqual(context.exception.options["path"], "prog build")

    def testParentOptionGoesToParentCallback(self):
        program = self.program(options=[self.force], commands=[self.buildcmd])
        parse(program, ["prog", "build", "-f", "a.c"])
        self.assertEqual(self.root.calls, [("-f/--force", None)])
        self.assertEqual(self.build.calls, [(None, "a.c")])

    def testChildOptionUnknownInParent(self):
        program = self.program(commands=[self.buildcmd])
        with self.assertRaises(UnknownOptionError):
            Parser(program, ["prog", "-o", "x", "build", "a.c"]).run()

    def testChildShadowsParentOption(self):
        program = self.program(options=[Option("output", "o")], commands=[self.buildcmd])
        parse(program, ["prog", "build", "-o", "out.bin", "a.c"])
        self.assertEqual(self.build.calls[0], ("-o/--output", "out.bin"))
        self.assertEqual(self.root.calls, [])

    def testOccurrencesSharedAcrossScopes(self):
        program = self.program(options=[self.force], commands=[self.buildcmd])
        with self.assertRaises(RedundantOptionError):
            Parser(program, ["prog", "-f", "build", "-f", "a.c"]).run()

    def testNestedPath(self):
        add = Command("add", args="NAME URL", eat=Recorder())
        remote = Command("remote", commands=[add])
        program = self.program(commands=[remote])
        parser = Parser(program, ["git", "remote", "add", "origin", "url"])
        status, resolved = parser.run()
        self.assertIs(status, Status.OK)
        self.assertIs(resolved, add)
        self.assertEqual(parser.stack.render(), "git remote add")

    def testStackOverflowIsFatal(self):
        leaf = Command("leaf")
        middle = Command("middle", commands=[leaf])
        program = self.program(commands=[middle], max_depth=2)
        with self.assertRaises(CommandStackOverflowError):
            Parser(program, ["prog", "middle", "leaf"]).run()
        self.assertIs(parse(program, ["prog", "middle", "leaf"]).status, Status.FATAL)

    def testRejectionPrefixedWithPath(self):
        program = self.program(commands=[self.buildcmd])
        result = parse(program, ["prog", "build", "--nope"])
        self.assertIs(result.status, Status.USER_ERROR)
        self.assertEqual(result.path, ("prog", "build"))
        self.assertTrue(self.stderr.file.getvalue().startswith("prog build: invalid option -- '--nope'\n"))
        self.assertIn("`prog build --help'", self.stderr.file.getvalue())


class TestOutcomes(ParserTestCase):

    def testOkExitStopsParsing(self):
        self.root.answer = Eat.OK_EXIT
        program = self.program(options=[self.force], args="ONE")
        result = parse(program, ["prog", "-f", "--unknown"])
        self.assertIs(result.status, Status.OK_EXIT)
        self.assertEqual(self.root.calls, [("-f/--force", None)])

    def testBadCallbackResultIsFatal(self):
        self.root.answer = None
        program = self.program()
        with self.assertRaises(CallbackResultError):
            Parser(program, ["prog", "x"]).run()
        self.assertIs(parse(program, ["prog", "x"]).status, Status.FATAL)

    def testEmptyVectorIsFatal(self):
        program = self.program()
        with self.assertRaises(EmptyArgumentsError):
            Parser(program, []).run()
        self.assertIs(parse(program, []).status, Status.FATAL)

    def testDuplicateOptionIsFatal(self):
        program = self.program(options=[Option("force", "f"), Option("fast", "f")])
        self.assertIs(parse(program, ["prog"]).status, Status.FATAL)

    def testOptionClashingWithBuiltinIsFatal(self):
        program = self.program(options=[Option("help", "H")])
        with self.assertRaises(DuplicateOptionError):
            Parser(program, ["prog"]).run()

    def testDisabledBuiltinFreesItsName(self):
        program = self.program(options=[Option("help", "H")], no_help=True)
        self.assertIs(parse(program, ["prog", "--help"]).status, Status.OK)
        self.assertEqual(self.root.calls, [("-H/--help", None)])

    def testParserRunsOnce(self):
        parser = Parser(self.program(), ["prog"])
        parser.run()
        with self.assertRaises(RuntimeError):
            parser.run()

    def testTableReleasedAfterParse(self):
        parser = Parser(self.program(options=[self.force]), ["prog", "--bad"])
        parser.parse()
        self.assertEqual(len(parser.db), 0)
        self.assertEqual(parser.stack.names, ("prog",))

    def testIdempotentParses(self):
        build = Recorder()
        program = self.program(
            options=[self.force, self.jobs],
            commands=[Command("build", [self.output], args="INPUT", eat=build)],
        )
        argv = ["prog", "-fj2", "build", "-o", "x", "a.c"]
        first = parse(program, argv)
        calls = (list(self.root.calls), list(build.calls))
        self.root.calls.clear()
        build.calls.clear()
        second = parse(program, argv)
        self.assertEqual(first, second)
        self.assertEqual((self.root.calls, build.calls), calls)

    def testCommandDecorator(self):
        calls = []

        @command("build", [self.output], args="INPUT")
        def build(option, value, context):
            calls.append(value)
            return Eat.OK

        program = self.program(commands=[build])
        result = parse(program, ["prog", "build", "-ox", "a.c"])
        self.assertIs(result.command, build)
        self.assertEqual(calls, ["x", "a.c"])

    def testPrintPath(self):
        program = self.program(commands=[Command("build", eat=Recorder())])
        parser = Parser(program, ["prog", "build"])
        parser.run()
        console = Console(file=io.StringIO(), width=80)
        self.assertEqual(parser.print_path(console), len("prog build"))
        self.assertEqual(console.file.getvalue(), "prog build")


class TestCallbackState(ParserTestCase):

    def testMappingContextIsWritable(self):
        def store(option, value, context):
            context[option.name if option else "input"] = value
            return Eat.OK

        settings = {}
        program = self.program(options=[self.output], eat=store, context=settings)
        result = parse(program, ["prog", "-o", "x", "a.c"])
        self.assertIs(result.status, Status.OK)
        self.assertEqual(settings, {"output": "x", "input": "a.c"})

    def testListContextIsWritable(self):
        def collect(option, value, context):
            context.append(value)
            return Eat.OK

        inputs = []
        build = Command("build", args="\nA B", eat=collect, context=inputs)
        program = self.program(commands=[build])
        self.assertIs(parse(program, ["prog", "build", "a", "b"]).status, Status.OK)
        self.assertEqual(inputs, ["a", "b"])

    def testEntrypointOfResolvedCommand(self):
        ran = []

        def add(program, command):
            ran.append((program, command.name))
            return 0

        remote = Command("remote", commands=[Command("add", args="NAME", eat=Recorder(), entrypoint=add)])
        program = self.program(commands=[remote], entrypoint=lambda program, command: 1)
        result = parse(program, ["git", "remote", "add", "origin"])
        self.assertIs(result.status, Status.OK)
        self.assertIsNone(remote.entrypoint)
        self.assertEqual(result.command.entrypoint(program, result.command), 0)
        self.assertEqual(ran, [(program, "add")])


class TestBuiltins(ParserTestCase):

    def testHelpAbsorbed(self):
        program = self.program(options=[self.force])
        result = parse(program, ["prog", "-h"])
        self.assertIs(result.status, Status.OK_EXIT)
        self.assertEqual(self.root.calls, [])
        self.assertTrue(self.stdout.file.getvalue().startswith("Usage: prog [OPTION...]\n"))

    def testHelpOfSubCommand(self):
        program = self.program(commands=[Command("build", args="INPUT", eat=Recorder())])
        result = parse(program, ["prog", "build", "--help"])
        self.assertIs(result.status, Status.OK_EXIT)
        self.assertTrue(self.stdout.file.getvalue().startswith("Usage: prog build [OPTION...] INPUT\n"))

    def testUsage(self):
        program = self.program(args="A\nA B")
        result = parse(program, ["prog", "-?"])
        self.assertIs(result.status, Status.OK_EXIT)
        self.assertEqual(self.stdout.file.getvalue(), (
            "Usage: prog [OPTION...] A\n"
            "   or: prog [OPTION...] A B\n"
        ))

    def testVersion(self):
        program = self.program(version="1.2.3")
        result = parse(program, ["prog", "--version"])
        self.assertIs(result.status, Status.OK_EXIT)
        self.assertEqual(self.stdout.file.getvalue(), "1.2.3\n")

    def testVersionAbsentWithoutVersionString(self):
        program = self.program()
        self.assertIs(parse(program, ["prog", "--version"]).status, Status.USER_ERROR)

    def testVerbosityOptions(self):
        logconfig = LogConfig()
        program = self.program(logconfig=logconfig)
        parse(program, ["prog", "--verbosity=e"])
        self.assertIs(logconfig.verbosity, Verbosity.ERROR)
        parse(program, ["prog", "--verbosity", "1", "-vvv"])
        self.assertIs(logconfig.verbosity, Verbosity.INFO)
        parse(program, ["prog", "-qqqqqqq"])
        self.assertIs(logconfig.verbosity, Verbosity.SILENT)
        parse(program, ["prog", "--verbosity="])
        self.assertIs(logconfig.verbosity, Verbosity.INFO)
        self.assertEqual(self.root.calls, [])

    def testVerbosityRequiresValue(self):
        program = self.program()
        with self.assertRaises(MissingArgumentError):
            Parser(program, ["prog", "--verbosity"]).run()

    def testVerbosityNotRepeatable(self):
        program = self.program()
        with self.assertRaises(RedundantOptionError):
            Parser(program, ["prog", "--verbosity=1", "--verbosity=2"]).run()

    def testSubCommandMayShadowBuiltin(self):
        verbose = Recorder()
        program = self.program(commands=[Command("build", [Option("verbose", "v")], eat=verbose)])
        parse(program, ["prog", "build", "-v"])
        self.assertEqual(verbose.calls, [("-v/--verbose", None)])


if __name__ == "__main__":
    unittest.main()
