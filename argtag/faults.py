"""
Argtag faults (errors, warnings, help exits) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (configuration, grammar, input, conversion,
  warnings) so logs and searches stay predictable.
- ArgtagError / ArgtagWarning: base types that carry message + options and
  know how to render themselves with rich. str() of every error starts with
  the fixed "argtag: " prefix, so callers can tell library failures apart
  from errors raised by their own code.
- HelpRequested: informational exit raised (or printed, in shell mode) when
  -h/--help is seen. It is not an ArgtagError.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The registry builder and the scanner build faults with a title, a code and a
  single hint, then call trigger(fault, **runtime_options).
- In non-shell mode, exceptions are raised and warnings go through `warnings`;
  in shell mode, both are rendered via rich and errors exit the process.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

PREFIX = "argtag"

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the binder (stable identifiers).

    grouping (by high-level domain)
    - configuration (11xxx): the target record cannot be bound at all.
    - grammar (12xxx): an attribute string is malformed.
    - input (13xxx): the command line (or environment) does not satisfy the record.
    - conversion (14xxx): a raw string does not convert into the field kind.
    - warnings (15xxx): soft feedback, parsing continues.

    normalize() lets the host relabel codes through a __codes__ mapping in __main__.
    """
    # --- configuration errors (11xxx) ---
    INVALID_TARGET          = 11101
    UNBINDABLE_FIELD        = 11102
    UNSUPPORTED_TYPE        = 11103
    DUPLICATE_NAME          = 11104
    POSITIONAL_ORDER        = 11105
    CONVERTER_EXISTS        = 11106

    # --- grammar errors (12xxx) ---
    MALFORMED_ATTRIBUTE     = 12101
    UNKNOWN_ATTRIBUTE       = 12102
    INVALID_ATTRIBUTE_VALUE = 12103
    MISSING_ATTRIBUTE_VALUE = 12104
    SHORT_NOT_SINGLE_CHAR   = 12105
    RESERVED_NAME           = 12106
    CONFLICTING_ATTRIBUTES  = 12107

    # --- input errors (13xxx) ---
    UNKNOWN_ARGUMENT        = 13101
    UNEXPECTED_ARGUMENT     = 13102
    MISSING_VALUE           = 13103
    FLAG_AFTER_POSITIONAL   = 13104
    REQUIRED_NOT_SET        = 13105
    POSITIONAL_NOT_SET      = 13106

    # --- conversion errors (14xxx) ---
    CONVERSION_FAILED       = 14101

    # --- warnings (15xxx) ---
    REDUNDANT_REQUIRED      = 15101
    DUPLICATED_FLAG         = 15102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, title_style, message_style):
    """
    shared rich layout for errors and warnings: header, message, hint (and docs).
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", options.get("prog") or PREFIX), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(options["code"].normalize() if "code" in options else PREFIX, styler("code")),
        " | ",
        text(options.get("title", type(fault).__name__).title(), styler(title_style)),
        " ]"
    )
    parts = [text(fault.message, styler(message_style))]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
    if docs := options.get("docs"):
        parts.append(text(docs, styler("docs")))

    if fancy:
        return Panel(Group(*parts), title=header, title_align="left", width=console.width - 4)

    return Group(header, *parts)


class ArgtagError(Exception):
    """
    base of every failure raised by argtag.

    - message: short, lowercased, one-sentence body.
    - options: read-only mapping with the code, title, hint and any context the
      reporter may want to show (field, token, index, value, ...).
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return f"{PREFIX}: {self.message}"

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "underline #00E5FF dim",
        }, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class ConfigurationError(ArgtagError): ...
class GrammarError(ArgtagError): ...
class InputError(ArgtagError): ...

class InvalidTargetError(ConfigurationError): ...
class UnbindableFieldError(ConfigurationError): ...
class UnsupportedTypeError(ConfigurationError): ...
class DuplicateNameError(ConfigurationError): ...
class PositionalOrderError(ConfigurationError): ...
class ConverterExistsError(ConfigurationError): ...

class MalformedAttributeError(GrammarError): ...
class UnknownAttributeError(GrammarError): ...
class InvalidAttributeValueError(GrammarError): ...
class MissingAttributeValueError(GrammarError): ...
class ShortNotSingleCharError(GrammarError): ...
class ReservedNameError(GrammarError): ...
class ConflictingAttributesError(GrammarError): ...

class UnknownArgumentError(InputError): ...
class UnexpectedArgumentError(InputError): ...
class MissingValueError(InputError): ...
class FlagAfterPositionalError(InputError): ...
class RequiredNotSetError(InputError): ...
class PositionalNotSetError(InputError): ...

class ConversionError(ArgtagError): ...


class ArgtagWarning(Warning):
    """
    base of soft feedback: parsing goes on, the host is told about it.
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return f"{PREFIX}: {self.message}"

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RedundantRequiredWarning(ArgtagWarning): ...
class DuplicatedFlagWarning(ArgtagWarning): ...


class HelpRequested(Exception):
    """
    informational exit: -h/--help was found on the command line.

    carries the rendered help (a rich Text) in `help`. in shell mode it prints
    the help on stdout and exits with status 0 instead of being raised.
    """

    def __init__(self, help, /, **options):
        super().__init__(help.plain if isinstance(help, Text) else str(help))
        self.help = help
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.args[0]

    def __rich__(self):
        return self.help

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        Console(no_color=not self.options.get("colorful", True)).print(self)
        sys.exit(0)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.help, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "PREFIX",
    "FaultCode",
    "ArgtagError",
    "ConfigurationError",
    "GrammarError",
    "InputError",
    "InvalidTargetError",
    "UnbindableFieldError",
    "UnsupportedTypeError",
    "DuplicateNameError",
    "PositionalOrderError",
    "ConverterExistsError",
    "MalformedAttributeError",
    "UnknownAttributeError",
    "InvalidAttributeValueError",
    "MissingAttributeValueError",
    "ShortNotSingleCharError",
    "ReservedNameError",
    "ConflictingAttributesError",
    "UnknownArgumentError",
    "UnexpectedArgumentError",
    "MissingValueError",
    "FlagAfterPositionalError",
    "RequiredNotSetError",
    "PositionalNotSetError",
    "ConversionError",
    "ArgtagWarning",
    "RedundantRequiredWarning",
    "DuplicatedFlagWarning",
    "HelpRequested",
    "trigger",
    "getdoc",
)
