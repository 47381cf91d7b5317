"""
Argtag command-line scanner: tokens in, populated record out.

What this module provides
- Scanner: consumes the token list against a Registry (scan), then resolves
  every field still unset through its fallbacks (validate).
- parse(target, argv): the one-call entry point (build + scan + validate),
  surfacing faults according to the runtime options (shell/colorful/fancy).

Token grammar
    args       := ( flag-token value-token? | positional-token )*
    flag-token := "-" char | "--" identifier | "-h" | "--help"

Scanning rules
- "-h"/"--help" anywhere stops everything and raises HelpRequested carrying the
  rendered help (in shell mode: printed on stdout, exit status 0), even when
  required fields are missing.
- the first "--" switches irrevocably to positional-only mode.
- flags come first: a dash token after a positional was filled is an error.
- a bool flag is set by its presence; any other flag consumes the next token
  verbatim as its value (so "-n -5" gives -5 to n).
- a flag given twice keeps its last value and emits DuplicatedFlagWarning.

Fallback order (validate, declaration order)
    explicit flag -> positional slot -> environment variable -> default -> required-error

Quick start
    from argtag import Argument, parse, uint16

    class Options:
        host: str = Argument("positional,help=host to connect to")
        port: uint16 = Argument("positional,default=8080")
        verbose: bool = Argument("short,long")
        token: str = Argument("env,required,help=api token")

    options = parse(Options, shell=True)
"""
import difflib
import os
import shlex
import sys
from collections import deque
from collections.abc import Iterable
from enum import Enum

from .converters import default_converters
from .faults import *
from .helper import program, render_help
from .registry import build, declarations as walk
from .utils import *


class State(Enum):
    IDLE = "idle"
    AWAITING_VALUE = "awaiting-value"
    EXPLICIT_POSITIONAL = "explicit-positional"
    DONE = "done"
    ERROR = "error"


class Scanner:
    """
    token-by-token matcher over one Registry.

    - environ: mapping consulted for env fallbacks (absent and "" mean no value).
    - options: runtime options forwarded to warnings (shell, colorful, fancy, prog).
    """

    def __init__(self, registry, /, environ=Unset, **options):
        self._registry = registry
        self._environ = coalesce(environ, os.environ)
        self._options = options
        self._index = 0
        self.state = State.IDLE

    def _fail(self, fault, /, **context):
        self.state = State.ERROR
        trigger(fault, **context)

    def _convert(self, field, value, source):
        try:
            field.convert(value)
        except ConversionError as fault:
            if source == "command line":
                self._fail(fault, source=source, index=self._index)
            self._fail(fault, source=source)

    def _help(self):
        self.state = State.DONE
        trigger(HelpRequested(render_help(
            self._registry,
            self._options.get("prog", Unset),
            colorful=self._options.get("colorful", True),
        )))

    def _helpindex(self, tokens):
        """
        1-based position of the first help token, skipping the value tokens of
        value-taking flags; 0 when help was not asked for.
        """
        explicit = False
        pending = False
        for index, token in enumerate(tokens, 1):
            if pending:
                pending = False
                continue
            if token in ("-h", "--help"):
                return index
            if explicit:
                continue
            if token == "--":
                explicit = True
            elif token.startswith("--"):
                field = self._registry.longs.get(token[2:])
                pending = field is not None and not field.flag
            elif token.startswith("-"):
                field = self._registry.shorts.get(token[1:])
                pending = field is not None and not field.flag
        return 0

    def _flag(self, token, tokens, seen):
        registry = self._registry
        if token.startswith("--"):
            name, field = token[2:], registry.longs.get(token[2:])
        else:
            name, field = token[1:], registry.shorts.get(token[1:])

        if field is None:
            spellings = ["-h", "--help"]
            spellings += ["-" + short for short in registry.shorts]
            spellings += ["--" + long for long in registry.longs]
            suggestions = difflib.get_close_matches(token, spellings, 3)
            try:
                hint = "did you mean %r? run with --help to see all flags" % suggestions[0]
            except IndexError:
                hint = "run with --help to see all flags"
            return self._fail(UnknownArgumentError(
                "unknown argument name (%s) at %s position" % (name, ordinal(self._index)),
                title="unknown argument",
                code=FaultCode.UNKNOWN_ARGUMENT,
                token=token,
                index=self._index,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
            ))

        if id(field) in seen:
            trigger(DuplicatedFlagWarning(
                "flag %s at %s position was already provided" % (token, ordinal(self._index)),
                title="duplicated flag",
                code=FaultCode.DUPLICATED_FLAG,
                field=field.name,
                token=token,
                index=self._index,
                hint="keep a single %s; the last one wins" % token,
                docs=getdoc(FaultCode.DUPLICATED_FLAG),
            ), **self._options)
        seen.add(id(field))

        if field.flag:
            return self._convert(field, "true", "command line")

        self.state = State.AWAITING_VALUE
        try:
            value = tokens.popleft()
        except IndexError:
            return self._fail(MissingValueError(
                "missing value for %s at %s position" % (token, ordinal(self._index)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                field=field.name,
                token=token,
                index=self._index,
                hint="pass it as %s <value>" % token,
                docs=getdoc(FaultCode.MISSING_VALUE),
            ))
        self._index += 1
        self._convert(field, value, "command line")
        self.state = State.IDLE

    def scan(self, tokens, /):
        """
        match every token against the registry (program name excluded).
        """
        tokens = deque(tokens)
        positionals = deque(self._registry.positionals)
        filled = 0
        seen = set()
        self._index = 0
        self.state = State.IDLE

        # help wins over any fault an earlier token would raise
        if index := self._helpindex(tokens):
            self._index = index
            return self._help()

        while tokens:
            token = tokens.popleft()
            self._index += 1

            if token == "--" and self.state is not State.EXPLICIT_POSITIONAL:
                self.state = State.EXPLICIT_POSITIONAL
                continue

            if token.startswith("-") and self.state is not State.EXPLICIT_POSITIONAL:
                if filled:
                    self._fail(FlagAfterPositionalError(
                        "positional arguments must be at the end (%s at %s position)" % (token, ordinal(self._index)),
                        title="flag after positional",
                        code=FaultCode.FLAG_AFTER_POSITIONAL,
                        token=token,
                        index=self._index,
                        hint="move %s before the positional arguments" % token,
                        docs=getdoc(FaultCode.FLAG_AFTER_POSITIONAL),
                    ))
                self._flag(token, tokens, seen)
                continue

            try:
                field = positionals.popleft()
            except IndexError:
                self._fail(UnexpectedArgumentError(
                    "unexpected argument (%s) at %s position" % (token, ordinal(self._index)),
                    title="unexpected argument",
                    code=FaultCode.UNEXPECTED_ARGUMENT,
                    token=token,
                    index=self._index,
                    hint="remove this extra value or run with --help to see the expected usage",
                    docs=getdoc(FaultCode.UNEXPECTED_ARGUMENT),
                ))
            self._convert(field, token, "command line")
            filled += 1

        self.state = State.DONE

    def validate(self):
        """
        resolve every unset field through env, default, then required.
        """
        for field in self._registry:
            if field.was_set:
                continue

            if field.positional:
                if field.default is not None:
                    self._convert(field, field.default, "default")
                    continue
                self._fail(PositionalNotSetError(
                    "positional argument not set (%s)" % field.name,
                    title="positional not set",
                    code=FaultCode.POSITIONAL_NOT_SET,
                    field=field.name,
                    hint="add a value for <%s> after the flags" % field.name,
                    docs=getdoc(FaultCode.POSITIONAL_NOT_SET),
                ))

            if field.env and (value := self._environ.get(field.env)):
                self._convert(field, value, "environment")
                continue

            if field.default is not None:
                self._convert(field, field.default, "default")
                continue

            if field.required:
                spellings = [spelling for spelling in (
                    "-" + field.short if field.short else None,
                    "--" + field.long if field.long else None,
                    "$" + field.env if field.env else None,
                ) if spelling]
                self._fail(RequiredNotSetError(
                    "required argument not set (%s)" % field.name,
                    title="required argument not set",
                    code=FaultCode.REQUIRED_NOT_SET,
                    field=field.name,
                    hint="set it with %s" % " or ".join(spellings),
                    docs=getdoc(FaultCode.REQUIRED_NOT_SET),
                ))


def _tokens(argv):
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argv must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argv must be a string or an iterable of strings")


def _instantiate(target):
    if isinstance(target, type):
        try:
            return target()
        except TypeError as exception:
            trigger(InvalidTargetError(
                "argument must be a record instantiable without arguments (%s): %s" % (target.__name__, exception),
                title="invalid target",
                code=FaultCode.INVALID_TARGET,
                hint="give every field of %s a default or pass an instance" % target.__name__,
                docs=getdoc(FaultCode.INVALID_TARGET),
            ))
    if target is None or isinstance(target, (str, bytes, int, float, complex, tuple, list, dict, set, frozenset)):
        trigger(InvalidTargetError(
            "argument must be a record, not %s" % type(target).__name__,
            title="invalid target",
            code=FaultCode.INVALID_TARGET,
            hint="pass a class (or an instance) declaring its arguments",
            docs=getdoc(FaultCode.INVALID_TARGET),
        ))
    return target


def parse(
        target,
        argv=Unset,
        /,
        *,
        environ=Unset,
        converters=Unset,
        declarations=Unset,
        prog=Unset,
        shell=False,
        colorful=True,
        fancy=False,
):
    """
    bind the command line (and environment) into `target` and return it.

    Parameters
    - target: a record class (instantiated without arguments) or instance.
    - argv: Unset (sys.argv[1:]), a shell-like string, or an iterable of tokens.
    - environ: mapping for env fallbacks (default: os.environ).
    - converters: Converters registry (default: argtag.default_converters).
    - declarations: explicit Declarations instead of reading them from target.
    - prog: program name for the usage line and fault headers.
    - shell: print faults/help and exit instead of raising.
    - colorful / fancy: rendering options for shell mode.

    Raises
    - ArgtagError subclasses (configuration, grammar, input, conversion).
    - HelpRequested when -h/--help is given.
    """
    options = {
        "shell": shell,
        "colorful": colorful,
        "fancy": fancy,
        "prog": program(prog),
    }
    try:
        target = _instantiate(target)
        tokens = _tokens(argv)
        registry = build(
            walk(target) if declarations is Unset else declarations,
            target,
            coalesce(converters, default_converters),
            **options,
        )
        scanner = Scanner(registry, environ, **options)
        scanner.scan(tokens)
        scanner.validate()
    except (ArgtagError, HelpRequested) as fault:
        trigger(fault, **options)
    return target


__all__ = (
    "State",
    "Scanner",
    "parse",
)
