r"""
Argtag attribute grammar and field descriptors.

Overview
- Field: one parsed argument specification (names, positional/required/flag
  markers, help, default) plus, once bound by the registry, the converter and
  the storage it writes into.
- parse_attributes(name, text): turn a whole attribute string into a Field.
- parse_attribute(name, attribute, field): apply a single "key[=value]" token.

Grammar
    attr-string := attr ( "," attr )*
    attr        := key [ "=" value ]
    key         := "short" | "long" | "positional" | "required" | "env" | "help" | "default"

- Tokens are split on the first "=" only, so help/default values may contain "=".
- short[=X]      bare: lowercase first character of the identifier; X is one letter.
- long[=X]       bare: lowercase identifier; X matches [A-Za-z][A-Za-z0-9_]*.
- env[=X]        bare: uppercase identifier; X matches the same pattern.
- positional / required [=bool]   bare means true; 1/t/true/0/f/false, any case.
- help=X / default=X              X is mandatory and kept verbatim.

Defaults and reservations
- A field with no short, long, env or positional setting gets both a short and a
  long name derived from its identifier.
- "-h" and "--help" belong to the built-in help trigger.
- A positional field cannot also carry short, long or env names.

Quick example:
    >>> field = parse_attributes("Port", "short,env,default=8080,help=listen port")
    >>> field.short, field.long, field.env, field.default
    ('p', None, 'PORT', '8080')
"""
import functools
import operator
import re

from .converters import boolean
from .faults import *
from .utils import *

IDENTIFIER = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

KEYS = ("short", "long", "positional", "required", "env", "help", "default")


class Field:
    """
    Field descriptor: everything known about one declared argument.

    Parsed attributes
    - name: the declaring identifier (diagnostics, usage line).
    - short / long / env: flag and environment names, None when absent.
    - positional / required: markers from the attribute string.
    - help / default: verbatim strings, None when absent.

    Binding (set by the registry builder)
    - kind / optional: resolved converter key and one-level optionality.
    - flag: True for non-positional bool fields (presence sets True).
    - was_set: becomes True the first time convert() succeeds.
    """

    __introspectable__ = (
        "name",
        "short",
        "long",
        "env",
        "positional",
        "required",
        "flag",
        "help",
        "default",
    )

    def __init__(self, name, /):
        self.name = name
        self.short = None
        self.long = None
        self.env = None
        self.positional = False
        self.required = False
        self.flag = False
        self.help = None
        self.default = None
        self.kind = None
        self.optional = False
        self.was_set = False
        self._target = None
        self._converter = None

    def bind(self, target, converter, /):
        """
        attach the storage (an object whose attribute `name` receives the value)
        and the converter used by convert().
        """
        self._target = target
        self._converter = converter

    def convert(self, value, /):
        """
        convert a raw string and write it into the bound storage.

        raises ConversionError (chained to the converter failure) when the
        converter rejects the value; was_set is left untouched in that case.
        """
        try:
            result = self._converter(value)
        except Exception as exception:
            raise ConversionError(
                "could not set value (%s = %s): %s" % (self.name, value, exception),
                title="could not set value",
                code=FaultCode.CONVERSION_FAILED,
                field=self.name,
                value=value,
                hint="check the expected type of %s" % self.display,
                docs=getdoc(FaultCode.CONVERSION_FAILED),
            ) from exception
        setattr(self._target, self.name, result)
        self.was_set = True
        return result

    @property
    def display(self):
        """
        how the field is spelled on the command line (or in the environment).
        """
        if self.positional:
            return "<%s>" % self.name
        if self.long:
            return "--" + self.long
        if self.short:
            return "-" + self.short
        return "$" + self.env

    def __eq__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__introspectable__)

    __hash__ = None

    def __repr__(self):
        return f"field({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)


def _identifier(value, /):
    if not IDENTIFIER.fullmatch(value):
        trigger(InvalidAttributeValueError(
            "attribute has invalid value (%s)" % value,
            title="invalid attribute value",
            code=FaultCode.INVALID_ATTRIBUTE_VALUE,
            value=value,
            hint="names start with a letter followed by letters, digits or '_'",
            docs=getdoc(FaultCode.INVALID_ATTRIBUTE_VALUE),
        ))
    return value


def _boolean(value, /):
    if not value:
        return True
    try:
        return boolean(value)
    except ValueError:
        trigger(InvalidAttributeValueError(
            "attribute has invalid value (%s)" % value,
            title="invalid attribute value",
            code=FaultCode.INVALID_ATTRIBUTE_VALUE,
            value=value,
            hint="use true or false (or leave the value out for true)",
            docs=getdoc(FaultCode.INVALID_ATTRIBUTE_VALUE),
        ))


def _mandatory(key, value, /):
    if not value:
        trigger(MissingAttributeValueError(
            "attribute missing value (%s)" % key,
            title="attribute missing value",
            code=FaultCode.MISSING_ATTRIBUTE_VALUE,
            key=key,
            hint="write it as %s=<value>" % key,
            docs=getdoc(FaultCode.MISSING_ATTRIBUTE_VALUE),
        ))
    return value


def parse_attribute(name, attribute, field, /):
    """
    apply one "key[=value]" token of the attribute string of `name` to `field`.
    """
    key, _, value = attribute.partition("=")

    match key:
        case "":
            trigger(MalformedAttributeError(
                "malformed attribute (%s)" % attribute,
                title="malformed attribute",
                code=FaultCode.MALFORMED_ATTRIBUTE,
                attribute=attribute,
                hint="attributes look like key or key=value, separated by ','",
                docs=getdoc(FaultCode.MALFORMED_ATTRIBUTE),
            ))
        case "short":
            if not value:
                field.short = name[:1].lower()
            elif len(value) != 1:
                trigger(ShortNotSingleCharError(
                    "short attribute value must be a single character (%s)" % value,
                    title="short name too long",
                    code=FaultCode.SHORT_NOT_SINGLE_CHAR,
                    value=value,
                    hint="use long=%s for multi-character names" % value,
                    docs=getdoc(FaultCode.SHORT_NOT_SINGLE_CHAR),
                ))
            else:
                field.short = _identifier(value)
        case "long":
            field.long = _identifier(value) if value else name.lower()
        case "env":
            field.env = _identifier(value) if value else name.upper()
        case "positional":
            field.positional = _boolean(value)
        case "required":
            field.required = _boolean(value)
        case "help":
            field.help = _mandatory(key, value)
        case "default":
            field.default = _mandatory(key, value)
        case _:
            trigger(UnknownAttributeError(
                "unknown attribute (%s)" % key,
                title="unknown attribute",
                code=FaultCode.UNKNOWN_ATTRIBUTE,
                key=key,
                hint="known attributes are %s" % ", ".join(KEYS),
                docs=getdoc(FaultCode.UNKNOWN_ATTRIBUTE),
            ))


def parse_attributes(name, text, /):
    """
    parse the attribute string declared on `name`.

    returns None for an empty string (the field is not an argument), otherwise
    a fresh, unbound Field.
    """
    if not isinstance(text, str):
        raise TypeError("parse_attributes() attribute string must be a string")
    if not text:
        return None

    field = Field(name)
    for attribute in text.split(","):
        parse_attribute(name, attribute, field)

    if field.positional and (field.short or field.long or field.env):
        trigger(ConflictingAttributesError(
            "positional argument cannot have short, long or env names (%s)" % name,
            title="conflicting attributes",
            code=FaultCode.CONFLICTING_ATTRIBUTES,
            field=name,
            hint="drop positional or drop the short/long/env attributes",
            docs=getdoc(FaultCode.CONFLICTING_ATTRIBUTES),
        ))

    if not (field.short or field.long or field.env or field.positional):
        field.short = name[:1].lower()
        field.long = name.lower()

    if field.short == "h" or field.long == "help":
        trigger(ReservedNameError(
            "name is reserved for the help flag (%s)" % ("-h" if field.short == "h" else "--help"),
            title="reserved name",
            code=FaultCode.RESERVED_NAME,
            field=name,
            hint="choose another short/long name for %s" % name,
            docs=getdoc(FaultCode.RESERVED_NAME),
        ))

    return field


__all__ = (
    "Field",
    "parse_attribute",
    "parse_attributes",
)
