"""
Help renderer behavioral tests.

Scope
- Validate the usage line, the flags section and the environment section.
- Validate print_help output on stdout and the program-name resolution.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked on plain text (colorful=False).
"""
import io
import unittest
from contextlib import redirect_stdout
from unittest import TestCase

from rich.text import Text

from argtag import Argument, Converters, build, declarations, program, render_help, print_help, uint16


class Server:
    addr: str = Argument("short=a,long=addr,env=ADDR,default=0.0.0.0,help=address to connect to")
    verbose: bool = Argument("short,long,help=chatty output")
    token: str = Argument("env,required,help=api token")
    host: str = Argument("positional,help=host to connect to")
    port: uint16 = Argument("positional,default=8080")


class Bare:
    name: str = Argument("long")


EXPECTED = "\n".join((
    "usage: tool [flags] <host> <port>",
    "",
    "flags:",
    "  -a, --addr [env: ADDR] - address to connect to (default: 0.0.0.0)",
    "  -v, --verbose - chatty output",
    "  -h, --help - print this help message",
    "",
    "environment variables:",
    "  [env: TOKEN] - api token (required)",
))


def registry(record):
    target = record()
    return build(declarations(target), target, Converters())


class TestRenderHelp(TestCase):
    """Behavioral tests for render_help."""

    def testLayout(self):
        help = render_help(registry(Server), "tool", colorful=False)
        self.assertIsInstance(help, Text)
        self.assertEqual(help.plain, EXPECTED)

    def testColorfulKeepsText(self):
        help = render_help(registry(Server), "tool")
        self.assertEqual(help.plain, EXPECTED)
        self.assertTrue(help.spans)

    def testPlainHasNoStyles(self):
        help = render_help(registry(Server), "tool", colorful=False)
        self.assertFalse([span for span in help.spans if span.style])

    def testNoEnvironmentSection(self):
        help = render_help(registry(Bare), "tool", colorful=False).plain
        self.assertEqual(help.splitlines(), [
            "usage: tool [flags]",
            "",
            "flags:",
            "  --name",
            "  -h, --help - print this help message",
        ])


class TestPrintHelp(TestCase):
    """Behavioral tests for print_help and program."""

    def testPrintsOnStdout(self):
        stream = io.StringIO()
        with redirect_stdout(stream):
            print_help(Server, prog="tool", colorful=False)
        self.assertEqual(stream.getvalue().rstrip("\n"), EXPECTED)

    def testRecordIsNotWritten(self):
        server = Server()
        with redirect_stdout(io.StringIO()):
            print_help(server, prog="tool", colorful=False)
        self.assertIsInstance(server.__dict__.get("addr", Server.addr), Argument)

    def testProgram(self):
        self.assertEqual(program("tool"), "tool")
        self.assertIsInstance(program(), str)


if __name__ == "__main__":
    unittest.main()
