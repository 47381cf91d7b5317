"""
Argtag argument registry: from a record's declarations to indexed fields.

What this module provides
- Argument: marker used as a class attribute default to declare an argument:
      class Options:
          host: str = Argument("short=a,long=addr,help=address to connect to")
          port: uint16 = Argument("positional,default=8080")
- argument(): the dataclass flavour (a dataclasses.field carrying the attribute
  string in its metadata under "argtag").
- Declaration: explicit (name, attributes, annotation) triple, for callers that
  prefer listing bindings over class introspection.
- declarations(target): walk a record in declaration order and yield its
  Declarations (fields without attribute string are yielded too, and skipped
  by the builder).
- Registry: shorts/longs/envs lookup tables plus ordered positionals, with the
  uniqueness and positional-ordering invariants enforced on insertion.
- build(declarations, target, converters): grammar + converter resolution +
  registry insertion, one declaration at a time.

Invariants
- No two fields share a short, long or env name (error, never last-write-wins).
- A positional field with a default closes the positional list: any positional
  declared after it is rejected, defaulted or not.
"""
import dataclasses
import inspect
import typing
from typing import NamedTuple, Any

from .attributes import parse_attributes
from .converters import Kind, ZEROS, kindname
from .faults import *
from .utils import *

TAG = "argtag"


class Argument:
    """
    class attribute marker carrying the attribute string of one field.
    """
    __slots__ = ("attributes",)

    def __init__(self, attributes="", /):
        if not isinstance(attributes, str):
            raise TypeError("Argument() attribute string must be a string")
        self.attributes = attributes

    def __repr__(self):
        return f"Argument({self.attributes!r})"


def argument(attributes, /, **options):
    """
    dataclasses.field(...) with the attribute string stored in its metadata.

    without default (or default_factory) the field defaults to Unset, which the
    builder replaces with the zero value of its kind.
    """
    if not isinstance(attributes, str):
        raise TypeError("argument() attribute string must be a string")
    if "default_factory" not in options:
        options.setdefault("default", Unset)
    return dataclasses.field(metadata={TAG: attributes}, **options)


class Declaration(NamedTuple):
    name: str
    attributes: str
    annotation: Any = str


def declarations(target, /):
    """
    yield the Declarations of a record class (or instance) in declaration order.

    dataclasses are read from their fields' metadata; other classes from their
    annotations (base classes first) and Argument defaults.
    """
    cls = target if isinstance(target, type) else type(target)
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as exception:
        trigger(InvalidTargetError(
            "cannot read the field annotations of %s: %s" % (cls.__name__, exception),
            title="invalid target",
            code=FaultCode.INVALID_TARGET,
            hint="make every annotation resolvable at parse time",
            docs=getdoc(FaultCode.INVALID_TARGET),
        ))

    if dataclasses.is_dataclass(cls):
        for field in dataclasses.fields(cls):
            yield Declaration(field.name, field.metadata.get(TAG, ""), hints.get(field.name, field.type))
        return

    for name, annotation in hints.items():
        default = inspect.getattr_static(cls, name, None)
        yield Declaration(name, default.attributes if isinstance(default, Argument) else "", annotation)

    for name, default in inspect.getmembers_static(cls, lambda x: isinstance(x, Argument)):
        if name not in hints:
            trigger(InvalidTargetError(
                "argument without annotation (%s)" % name,
                title="invalid target",
                code=FaultCode.INVALID_TARGET,
                field=name,
                hint="annotate %s with its type, e.g. %s: str = %r" % (name, name, default),
                docs=getdoc(FaultCode.INVALID_TARGET),
            ))


class Registry:
    """
    Argument registry: the fields of one parse call, indexed for scanning.

    - shorts / longs / envs: name -> Field (unique keys).
    - positionals: positional Fields in declaration order.
    - fields: every Field in declaration order (validation walks this).
    """

    __introspectable__ = (
        "shorts",
        "longs",
        "envs",
        "positionals",
        "fields",
    )

    shorts = mirror("shorts")
    longs = mirror("longs")
    envs = mirror("envs")
    positionals = mirror("positionals")
    fields = mirror("fields")

    def __init__(self):
        self._shorts = {}
        self._longs = {}
        self._envs = {}
        self._positionals = []
        self._fields = []
        self._defaulted = None

    def add(self, field, /):
        """
        insert a parsed Field, enforcing uniqueness and positional ordering.
        """
        if field.positional:
            if self._defaulted is not None:
                trigger(PositionalOrderError(
                    "positional arguments can have a default value only if no arguments without one follow (%s)" % field.name,
                    title="positional after defaulted positional",
                    code=FaultCode.POSITIONAL_ORDER,
                    field=field.name,
                    hint="move %s before %s or make it a flag" % (field.name, self._defaulted.name),
                    docs=getdoc(FaultCode.POSITIONAL_ORDER),
                ))
            self._positionals.append(field)
            if field.default is not None:
                self._defaulted = field
            self._fields.append(field)
            return

        for table, key, spelling in (
            (self._envs, field.env, "$%s"),
            (self._shorts, field.short, "-%s"),
            (self._longs, field.long, "--%s"),
        ):
            if key is None:
                continue
            if (other := table.setdefault(key, field)) is not field:
                trigger(DuplicateNameError(
                    "duplicate flag name, consider changing the short or long attribute (%s)" % key,
                    title="duplicate name",
                    code=FaultCode.DUPLICATE_NAME,
                    field=field.name,
                    key=key,
                    hint="%s is already used by %s" % (spelling % key, other.name),
                    docs=getdoc(FaultCode.DUPLICATE_NAME),
                ))
        self._fields.append(field)

    def __len__(self):
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)


def _storage(field, target, /):
    """
    make sure `target` can hold the field and starts from a readable value.
    """
    current = getattr(target, field.name, Unset)
    if isinstance(current, (Argument, UnsetType)):
        current = None if field.optional else ZEROS.get(field.kind)
    try:
        setattr(target, field.name, current)
    except AttributeError:
        trigger(UnbindableFieldError(
            "field must be assignable (%s)" % field.name,
            title="unbindable field",
            code=FaultCode.UNBINDABLE_FIELD,
            field=field.name,
            hint="drop __slots__ restrictions, properties or frozen=True for %s" % field.name,
            docs=getdoc(FaultCode.UNBINDABLE_FIELD),
        ))


def build(declarations, target, converters, /, **options):
    """
    build the Registry of `declarations`, binding every field to `target`.

    options are the runtime options forwarded to build-time warnings
    (shell, colorful, fancy, prog).
    """
    registry = Registry()

    for name, attributes, annotation in declarations:
        if not attributes:
            continue

        if name.startswith("_"):
            trigger(UnbindableFieldError(
                "field must be public (%s)" % name,
                title="unbindable field",
                code=FaultCode.UNBINDABLE_FIELD,
                field=name,
                hint="rename %s without the leading underscore" % name,
                docs=getdoc(FaultCode.UNBINDABLE_FIELD),
            ))

        field = parse_attributes(name, attributes)

        field.kind, field.optional = converters.resolve(annotation)
        if (converter := converters.lookup(field.kind)) is None:
            trigger(UnsupportedTypeError(
                "unsupported type (%s)" % kindname(field.kind),
                title="unsupported type",
                code=FaultCode.UNSUPPORTED_TYPE,
                field=name,
                kind=field.kind,
                hint="register a converter for %s before parsing" % kindname(field.kind),
                docs=getdoc(FaultCode.UNSUPPORTED_TYPE),
            ))
        field.flag = field.kind is Kind.BOOL and not field.positional

        if field.required and field.default is not None:
            trigger(RedundantRequiredWarning(
                "required argument has a default value (%s)" % name,
                title="redundant required",
                code=FaultCode.REDUNDANT_REQUIRED,
                field=name,
                hint="the default always applies; drop required or the default",
                docs=getdoc(FaultCode.REDUNDANT_REQUIRED),
            ), **options)

        registry.add(field)
        _storage(field, target)
        field.bind(target, converter)

    return registry


__all__ = (
    "TAG",
    "Argument",
    "argument",
    "Declaration",
    "declarations",
    "Registry",
    "build",
)
