"""
Argtag type conversion registry.

Overview
- Kind: tagged variant over the primitive kinds a field can be bound to
  (string, bool, sized signed/unsigned integers, float32/float64, any).
- Sized aliases: int8 ... uint64, float32, float64 are `typing.Annotated`
  aliases that carry their Kind, so a record can declare `port: uint16`.
- Converters: kind -> converter mapping. A converter takes the raw string and
  returns the typed value, raising ValueError/TypeError when it cannot.
  Kinds are Kind members for primitives, or any class for user types.
- default_converters: the documented default registry (built-in kinds only). Every
  parse call may be given another Converters object instead.

Resolution rules (Converters.resolve)
- `str`, `bool`, `int` (64-bit), `float` (64-bit) map to their Kind.
- `typing.Any` and `object` map to Kind.ANY (the raw string is stored).
- `Annotated[..., Kind.X]` maps to Kind.X.
- `X | None` / `Optional[X]` dereferences one level: the field starts as None
  and is only filled when a value is converted.
- any other annotation is its own key (user-registered types).

Quick example:
    >>> @dataclass
    ... class Point:
    ...     x: int
    ...     y: int
    >>> register(Point, lambda raw: Point(*map(int, raw.split(","))))
"""
import math
import re
import struct
import types
import typing
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Union

from .faults import *
from .utils import *


class Kind(Enum):
    """
    primitive kinds known by the built-in converters.
    """
    STRING  = "string"
    BOOL    = "bool"
    INT     = "int"
    INT8    = "int8"
    INT16   = "int16"
    INT32   = "int32"
    INT64   = "int64"
    UINT    = "uint"
    UINT8   = "uint8"
    UINT16  = "uint16"
    UINT32  = "uint32"
    UINT64  = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    ANY     = "any"

    def __repr__(self):
        return f"Kind.{self.name}"


int8 = Annotated[int, Kind.INT8]
int16 = Annotated[int, Kind.INT16]
int32 = Annotated[int, Kind.INT32]
int64 = Annotated[int, Kind.INT64]
uint = Annotated[int, Kind.UINT]
uint8 = Annotated[int, Kind.UINT8]
uint16 = Annotated[int, Kind.UINT16]
uint32 = Annotated[int, Kind.UINT32]
uint64 = Annotated[int, Kind.UINT64]
float32 = Annotated[float, Kind.FLOAT32]
float64 = Annotated[float, Kind.FLOAT64]

# Value a bound field holds until some source sets it.
ZEROS = {
    Kind.STRING: "",
    Kind.BOOL: False,
    Kind.FLOAT32: 0.0,
    Kind.FLOAT64: 0.0,
    Kind.ANY: None,
} | dict.fromkeys((
    Kind.INT, Kind.INT8, Kind.INT16, Kind.INT32, Kind.INT64,
    Kind.UINT, Kind.UINT8, Kind.UINT16, Kind.UINT32, Kind.UINT64,
), 0)

_BOOLEANS = {
    "1": True,
    "t": True,
    "true": True,
    "0": False,
    "f": False,
    "false": False,
}


def boolean(value, /):
    """
    tolerant boolean parser: 1/t/true and 0/f/false, case-insensitive.

    shared by the `bool` converter and the `positional`/`required` attributes.
    """
    try:
        return _BOOLEANS[value.lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"invalid boolean {value!r}") from None


def _integer(bits, signed):
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        syntax = re.compile(r"[+-]?[0-9]+")
    else:
        low, high = 0, (1 << bits) - 1
        syntax = re.compile(r"[0-9]+")

    @rename(f"{'' if signed else 'u'}int{bits}")
    def converter(value, /):
        if not syntax.fullmatch(value):
            raise ValueError(f"invalid syntax for {'' if signed else 'u'}int{bits}: {value!r}")
        number = int(value, 10)
        if not low <= number <= high:
            raise ValueError(f"value {value!r} out of range for {'' if signed else 'u'}int{bits}")
        return number

    return converter


def _floating(bits):
    @rename(f"float{bits}")
    def converter(value, /):
        # float() is laxer than the command line should be (spaces, digit separators)
        if value != value.strip() or "_" in value:
            raise ValueError(f"invalid syntax for float{bits}: {value!r}")
        number = float(value)
        if math.isinf(number) and "inf" not in value.lower():
            raise ValueError(f"value {value!r} out of range for float{bits}")
        if bits == 32 and math.isfinite(number):
            try:
                number, = struct.unpack("f", struct.pack("f", number))
            except OverflowError:
                raise ValueError(f"value {value!r} out of range for float32") from None
            # packing rounds past the float32 maximum to inf instead of raising
            if math.isinf(number):
                raise ValueError(f"value {value!r} out of range for float32")
        return number

    return converter


def _string(value, /):
    return value


BUILTINS = MappingProxyType({
    Kind.STRING: _string,
    Kind.BOOL: boolean,
    Kind.INT: _integer(64, True),
    Kind.INT8: _integer(8, True),
    Kind.INT16: _integer(16, True),
    Kind.INT32: _integer(32, True),
    Kind.INT64: _integer(64, True),
    Kind.UINT: _integer(64, False),
    Kind.UINT8: _integer(8, False),
    Kind.UINT16: _integer(16, False),
    Kind.UINT32: _integer(32, False),
    Kind.UINT64: _integer(64, False),
    Kind.FLOAT32: _floating(32),
    Kind.FLOAT64: _floating(64),
    Kind.ANY: rename(lambda value, /: value, "any"),
})


def kindname(kind, /):
    """
    display name of a kind: 'uint16' for Kind.UINT16, the class name otherwise.
    """
    if isinstance(kind, Kind):
        return kind.value
    return getattr(kind, "__name__", repr(kind))


class Converters:
    """
    kind -> converter mapping, used to bind every field of a record.

    a fresh Converters() knows the built-in kinds; register() adds user kinds
    and refuses to override an existing one. the module-level `default_converters`
    instance is the default used by parse(); pass another instance (for
    example `default_converters.copy()`) to keep registrations private.
    """

    def __init__(self, *, builtins=True):
        self._converters = dict(BUILTINS) if builtins else {}

    def register(self, kind, converter, /):
        """
        add a converter for `kind` (a Kind member or a class).

        raises ConverterExistsError when the kind already has one.
        """
        if not callable(converter):
            raise TypeError("register() converter must be callable")
        if kind in self._converters:
            trigger(ConverterExistsError(
                "converter already exists (%s)" % kindname(kind),
                title="converter already exists",
                code=FaultCode.CONVERTER_EXISTS,
                kind=kind,
                hint="register each kind once, at startup",
                docs=getdoc(FaultCode.CONVERTER_EXISTS),
            ))
        self._converters[kind] = converter
        return converter

    def resolve(self, annotation, /):
        """
        map a field annotation to (kind, optional).

        one level of optionality (X | None) is dereferenced; the kind returned
        is not checked against the registry (see lookup()).
        """
        optional = False
        if typing.get_origin(annotation) in (Union, types.UnionType):
            members = typing.get_args(annotation)
            others = [member for member in members if member is not type(None)]
            if len(others) == 1 and len(members) == 2:
                annotation, optional = others[0], True

        if typing.get_origin(annotation) is Annotated:
            for metadata in annotation.__metadata__:
                if isinstance(metadata, Kind):
                    return metadata, optional
            annotation = typing.get_args(annotation)[0]

        if annotation is Any or annotation is object:
            return Kind.ANY, optional

        try:
            return {
                str: Kind.STRING,
                bool: Kind.BOOL,
                int: Kind.INT,
                float: Kind.FLOAT64,
            }.get(annotation, annotation), optional
        except TypeError:  # unhashable annotation
            return annotation, optional

    def lookup(self, kind, /):
        """
        return the converter of `kind`, or None when nothing is registered.
        """
        try:
            return self._converters.get(kind)
        except TypeError:
            return None

    def copy(self):
        clone = type(self)(builtins=False)
        clone._converters = dict(self._converters)
        return clone

    def __contains__(self, kind):
        return self.lookup(kind) is not None

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"Converters({', '.join(map(kindname, self._converters))})"


default_converters = Converters()
"""
Default, process-wide registry (built-in kinds). Extend it once at startup
with register(); concurrent registration while parsing is out of contract.
"""


def register(kind, converter, /):
    """
    register a converter on the default registry (see Converters.register).
    """
    return default_converters.register(kind, converter)


__all__ = (
    "Kind",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "float32",
    "float64",
    "boolean",
    "kindname",
    "Converters",
    "default_converters",
    "register",
)
