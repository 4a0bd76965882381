"""Action parameter binding and string conversion.

Each action's signature is compiled into ``ParamSpec`` entries once, at
registration time, so unsupported annotations surface at startup. At
request time ``bind()`` walks the specs in order and converts raw string
values into a positional argument list.

Supported annotations:

- ``str`` (or no annotation): passed through unchanged
- ``int``, ``float``, ``bool``, ``Decimal``, ``Enum`` subclasses
- ``object`` / ``Any``: the raw string
- ``list[X]``, ``tuple[X, ...]``, bare ``list`` / ``tuple``: split on the
  array separator, every token converted to ``X``
- ``X | None`` / ``Optional[X]``: converted against ``X``

A parameter is optional when it declares a default value. A missing or
empty raw value for a required parameter fails the whole bind. Converters
report failure through their return value; nothing here raises at
request time.
"""

import enum
import inspect
import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, TypeAlias, Union, get_args, get_origin

from wren._internal.multimap import MultiValueSource
from wren.errors import ConfigurationError

# (ok, value): value is meaningless when ok is False
ConversionResult: TypeAlias = tuple[bool, Any]
Converter: TypeAlias = Callable[[str], ConversionResult]

_FAILED: ConversionResult = (False, None)

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


# =============================================================================
# Converters
# =============================================================================


def _to_str(raw: str) -> ConversionResult:
    return True, raw


def _to_int(raw: str) -> ConversionResult:
    try:
        return True, int(raw)
    except ValueError:
        return _FAILED


def _to_float(raw: str) -> ConversionResult:
    try:
        return True, float(raw)
    except ValueError:
        return _FAILED


def _to_decimal(raw: str) -> ConversionResult:
    try:
        return True, Decimal(raw.strip())
    except InvalidOperation:
        return _FAILED


def _to_bool(raw: str) -> ConversionResult:
    word = raw.strip().lower()
    if word in _TRUE_WORDS:
        return True, True
    if word in _FALSE_WORDS:
        return True, False
    return _FAILED


def _to_enum(enum_type: type[enum.Enum], raw: str) -> ConversionResult:
    """Match a member by value first, then by name (case-insensitive)."""
    for member in enum_type:
        if str(member.value) == raw:
            return True, member
    lowered = raw.strip().lower()
    for name, member in enum_type.__members__.items():
        if name.lower() == lowered:
            return True, member
    return _FAILED


CONVERTERS: dict[Any, Converter] = {
    str: _to_str,
    int: _to_int,
    float: _to_float,
    bool: _to_bool,
    Decimal: _to_decimal,
    object: _to_str,
    Any: _to_str,
}


def converter_for(target: Any) -> Converter | None:
    """Return the converter for *target*, or ``None`` if it is unsupported."""
    converter = CONVERTERS.get(target)
    if converter is not None:
        return converter
    if isinstance(target, type) and issubclass(target, enum.Enum):
        return lambda raw: _to_enum(target, raw)
    return None


def convert(raw: str, target: Any) -> ConversionResult:
    """Convert *raw* to *target*. Unsupported targets fail the conversion."""
    converter = converter_for(target)
    if converter is None:
        return _FAILED
    return converter(raw)


# =============================================================================
# Parameter specs
# =============================================================================


class ParamKind(enum.Enum):
    """How a raw value is turned into an argument."""

    TEXT = "text"
    SCALAR = "scalar"
    ARRAY = "array"
    OPTIONAL = "optional"


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """A compiled action parameter.

    ``target`` is the scalar type a raw value converts to. For arrays it
    is the element type and ``container`` is ``list`` or ``tuple``.
    """

    name: str
    kind: ParamKind
    target: Any
    has_default: bool = False
    default: Any = None
    container: type | None = None


def param_specs(func: Callable[..., Any], *, skip_self: bool = True) -> tuple[ParamSpec, ...]:
    """Compile *func*'s signature into ``ParamSpec`` entries.

    Raises ``ConfigurationError`` for annotations that cannot be bound
    from query strings, and for ``*args``, ``**kwargs``, or keyword-only
    parameters (arguments are always passed positionally).
    """
    qualname = getattr(func, "__qualname__", repr(func))
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError) as exc:
        msg = f"Cannot resolve annotations of {qualname}: {exc}"
        raise ConfigurationError(msg) from exc

    params = list(inspect.signature(func).parameters.values())
    if skip_self and params:
        params = params[1:]

    specs: list[ParamSpec] = []
    for param in params:
        if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            msg = f"{qualname}: parameter {param.name!r} must be positional."
            raise ConfigurationError(msg)

        annotation = hints.get(param.name, str)
        has_default = param.default is not inspect.Parameter.empty
        default = param.default if has_default else None
        specs.append(_compile_param(qualname, param.name, annotation, has_default, default))
    return tuple(specs)


def _compile_param(
    qualname: str,
    name: str,
    annotation: Any,
    has_default: bool,
    default: Any,
) -> ParamSpec:
    optional = _is_optional(annotation)
    if optional:
        annotation = _unwrap_optional(annotation)

    container, element = _array_parts(annotation)
    if container is not None:
        if converter_for(element) is None:
            msg = f"{qualname}: unsupported element type for {name!r}: {element!r}"
            raise ConfigurationError(msg)
        return ParamSpec(name, ParamKind.ARRAY, element, has_default, default, container)

    if converter_for(annotation) is None:
        msg = f"{qualname}: unsupported type for {name!r}: {annotation!r}"
        raise ConfigurationError(msg)

    if annotation is str:
        kind = ParamKind.TEXT
    elif optional:
        kind = ParamKind.OPTIONAL
    else:
        kind = ParamKind.SCALAR
    return ParamSpec(name, kind, annotation, has_default, default)


def _array_parts(annotation: Any) -> tuple[type | None, Any]:
    """Return ``(container, element_type)`` for array annotations."""
    if annotation is list or annotation is tuple:
        return annotation, str

    origin = get_origin(annotation)
    if origin is list:
        args = get_args(annotation)
        return list, args[0] if args else str
    if origin is tuple:
        args = get_args(annotation)
        # Only homogeneous tuple[X, ...] makes sense for a split string
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple, args[0]
        return tuple, None
    return None, None


def _is_optional(annotation: Any) -> bool:
    """Check if an annotation is X | None."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(annotation)
    return False


def _unwrap_optional(annotation: Any) -> Any:
    """Extract the non-None type from X | None."""
    non_none = [a for a in get_args(annotation) if a is not type(None)]
    if len(non_none) == 1:
        return non_none[0]
    # Multi-type union: not bindable, reported by the caller
    return annotation


# =============================================================================
# Binding
# =============================================================================


def bind(
    specs: tuple[ParamSpec, ...],
    source: Mapping[str, Any],
    *,
    separator: str = ",",
    ignore_case: bool = False,
) -> tuple[bool, list[Any] | None]:
    """Bind raw request parameters to an action's parameters.

    Returns ``(True, args)`` with one argument per spec, in order, or
    ``(False, None)`` if a required value is missing or any value fails to
    convert. Binding is all-or-nothing.
    """
    args: list[Any] = []
    for spec in specs:
        values = _raw_values(source, spec.name, ignore_case)

        if spec.kind is ParamKind.ARRAY:
            raw = separator.join(values)
        else:
            raw = values[0] if values else ""

        if not raw:
            if not spec.has_default:
                return False, None
            args.append(spec.default)
            continue

        if spec.kind is ParamKind.TEXT:
            args.append(raw)
            continue

        if spec.kind is ParamKind.ARRAY:
            ok, value = _convert_array(raw, spec, separator)
        else:
            ok, value = convert(raw, spec.target)
        if not ok:
            return False, None
        args.append(value)
    return True, args


def _convert_array(raw: str, spec: ParamSpec, separator: str) -> ConversionResult:
    items: list[Any] = []
    for token in raw.split(separator):
        ok, value = convert(token, spec.target)
        if not ok:
            return _FAILED
        items.append(value)
    if spec.container is tuple:
        return True, tuple(items)
    return True, items


def _raw_values(source: Mapping[str, Any], name: str, ignore_case: bool) -> list[str]:
    """Return every raw value supplied for *name*."""
    key = name
    if key not in source and ignore_case:
        lowered = name.lower()
        key = next((k for k in source if isinstance(k, str) and k.lower() == lowered), name)

    if isinstance(source, MultiValueSource):
        return [str(v) for v in source.get_list(key)]

    value = source.get(key)
    if value is None:
        return []
    if isinstance(value, list | tuple):
        return [str(v) for v in value]
    return [str(value)]
