"""
Argtag help rendering.

render_help() turns a Registry into a rich Text:

    usage: server [flags] <Host> <Port>

    flags:
      -a, --addr [env: ADDR] - address to connect to (default: 0.0.0.0)
      -v, --verbose - chatty output
      -h, --help - print this help message

    environment variables:
      [env: TOKEN] - api token (required)

Palette keys: usage-label, program-name, positional, flag-name, env-name,
flag-help, default, required, group-label. Define a mapping named __styles__
in __main__ to override any entry; colorful=False drops every style.
"""
import os.path
import sys
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .converters import default_converters
from .registry import build, declarations as walk
from .utils import *


def program(prog=Unset, /):
    """
    name shown in the usage line: explicit prog, then __main__.__prog__, then argv[0].
    """
    if prog is not Unset:
        return prog
    return getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0]) if sys.argv else "")


def render_help(registry, prog=Unset, /, *, colorful=True):
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # cyan headline
        "program-name": "bold #FF4D94",  # magenta-pink brand pop
        "positional": "bold #FFD600",  # amber for values
        "flag-name": "bold #22C55E",  # green for flags
        "env-name": "#36C5F0",  # sky-blue environment names
        "flag-help": "#9CA3AF",  # muted gray
        "default": "italic #A3A3A3",
        "required": "bold #EF4444",
        "group-label": "bold #FFFFFF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(program(prog), styler("program-name"))
    usage.append(" [flags]")
    for field in registry.positionals:
        usage.append(" ").append("<%s>" % field.name, styler("positional"))

    flags = []
    environment = []
    for field in registry:
        if field.positional:
            continue

        line = Text("  ")
        names = [spelling for spelling in (
            "-" + field.short if field.short else None,
            "--" + field.long if field.long else None,
        ) if spelling]
        line.append_text(Text(", ").join(Text(name, styler("flag-name")) for name in names))
        if field.env:
            line.append(" " if names else "").append("[env: %s]" % field.env, styler("env-name"))
        if field.help:
            line.append(" - ").append(field.help, styler("flag-help"))
        if field.default is not None:
            line.append(" ").append("(default: %s)" % field.default, styler("default"))
        if field.required:
            line.append(" ").append("(required)", styler("required"))

        (flags if names else environment).append(line)

    helper = Text("  ")
    helper.append("-h", styler("flag-name")).append(", ").append("--help", styler("flag-name"))
    helper.append(" - ").append("print this help message", styler("flag-help"))
    flags.append(helper)

    sections = [usage, Text("")]
    sections.append(Text("flags", styler("group-label")).append(":"))
    sections.extend(flags)
    if environment:
        sections.append(Text(""))
        sections.append(Text("environment variables", styler("group-label")).append(":"))
        sections.extend(environment)

    return Text("\n").join(sections)


def print_help(target, /, *, converters=Unset, prog=Unset, colorful=True):
    """
    render the help of a record (class or instance) on stdout.

    the record is only used to read its declarations; nothing is written to it.
    """
    converters = coalesce(converters, default_converters)
    scratch = type("scratch", (), {})()
    registry = build(walk(target), scratch, converters)
    Console(no_color=not colorful).print(render_help(registry, prog, colorful=colorful))


__all__ = (
    "program",
    "render_help",
    "print_help",
)
