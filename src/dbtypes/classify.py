"""
Structural classification of Python types for converter lookup.

A requested type is classified once, before any registry lookup, into a
TypeCategory together with the ordered registry keys that should be tried
for it. Placeholder classes stand in for the unbounded families of enum,
array and plain-class types.
"""
import collections.abc
import enum
import logging
import numbers
import types
import typing
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class EnumPlaceholder:
    """Registry key for every enum.Enum subclass."""


class ArrayPlaceholder:
    """Registry key for every tuple form (Python's homogeneous array)."""


class PocoPlaceholder:
    """Registry key for plain classes with no better registration."""


PLACEHOLDER_TYPES = (EnumPlaceholder, ArrayPlaceholder, PocoPlaceholder)


class TypeCategory(enum.Enum):
    EXACT = 'exact'
    GENERIC_SHAPE = 'generic_shape'
    ENUM = 'enum'
    ARRAY = 'array'
    ASSIGNABLE_SUPERTYPE = 'assignable_supertype'
    POCO = 'poco'
    UNSUPPORTED = 'unsupported'


@dataclass(frozen=True)
class TypeClassification:
    """Primary category of a type plus the ordered (category, key) candidates."""
    category: TypeCategory
    candidates: tuple[tuple[TypeCategory, Any], ...] = ()

    @property
    def keys(self) -> tuple:
        return tuple(key for _, key in self.candidates)


_UNSUPPORTED_CLASSES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    types.ModuleType,
    types.CodeType,
    types.FrameType,
    types.GeneratorType,
    types.CoroutineType,
    )

_ABSTRACT_MODULES = {'collections.abc', 'typing', '_collections_abc', 'abc'}


def normalize_language_type(tp: Any) -> Any:
    """Strip wrappers that do not change the storage type.

    Optional[T] and T | None become T, Annotated[T, ...] becomes T, a NewType
    becomes its supertype and typing.Any becomes object.
    """
    while True:
        if tp is Any:
            return object
        supertype = getattr(tp, '__supertype__', None)
        if supertype is not None:
            tp = supertype
            continue
        origin = typing.get_origin(tp)
        if origin is typing.Annotated:
            tp = typing.get_args(tp)[0]
            continue
        if origin is typing.Union or origin is types.UnionType:
            members = [a for a in typing.get_args(tp) if a is not type(None)]
            if len(members) == 1:
                tp = members[0]
                continue
        return tp


def get_friendly_name(tp: Any) -> str:
    """Readable name for a type or typing construct."""
    if isinstance(tp, type) and typing.get_origin(tp) is None:
        return tp.__name__
    return repr(tp).replace('typing.', '')


def is_enum_type(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, enum.Enum)


def is_array_type(tp: Any) -> bool:
    """Tuples are Python's array shape: bare tuple, tuple[T, ...] or fixed tuples."""
    if tp is tuple:
        return True
    origin = typing.get_origin(tp)
    if origin is tuple:
        return True
    return isinstance(tp, type) and issubclass(tp, tuple) and not hasattr(tp, '_fields')


def get_array_element_type(tp: Any) -> Any | None:
    """Element type of tuple[T, ...]; None when the tuple is not homogeneous.

    A fixed tuple whose members are all the same type also counts as homogeneous.
    """
    if typing.get_origin(tp) is not tuple:
        return None
    args = typing.get_args(tp)
    if len(args) == 2 and args[1] is Ellipsis:
        return normalize_language_type(args[0])
    if args and all(a == args[0] for a in args):
        return normalize_language_type(args[0])
    return None


def is_generic_collection_type(tp: Any) -> bool:
    """Parameterised list/set/collection shape, e.g. list[int] or Sequence[str]."""
    origin = typing.get_origin(tp)
    if origin is None or not isinstance(origin, type):
        return False
    if origin is tuple or issubclass(origin, collections.abc.Mapping):
        return False
    return issubclass(origin, collections.abc.Collection) and not issubclass(origin, (str, bytes))


def get_collection_element_type(tp: Any) -> Any | None:
    if not is_generic_collection_type(tp):
        return None
    args = typing.get_args(tp)
    return normalize_language_type(args[0]) if args else None


def is_dictionary_type(tp: Any) -> bool:
    origin = typing.get_origin(tp) or tp
    return isinstance(origin, type) and issubclass(origin, collections.abc.Mapping)


def is_enumerable_type(tp: Any) -> bool:
    origin = typing.get_origin(tp) or tp
    if not isinstance(origin, type) or issubclass(origin, (str, bytes, bytearray, memoryview)):
        return False
    return issubclass(origin, collections.abc.Iterable)


def is_unsupported_type(tp: Any) -> bool:
    """Function, method, module and callable shapes cannot be stored."""
    origin = typing.get_origin(tp)
    if origin is collections.abc.Callable or tp is collections.abc.Callable:
        return True
    if origin is typing.Union or origin is types.UnionType or origin is typing.Literal:
        return True
    if isinstance(tp, typing.TypeVar):
        return True
    return isinstance(tp, type) and issubclass(tp, _UNSUPPORTED_CLASSES)


def is_numeric_type(tp: Any) -> bool:
    target = typing.get_origin(tp) or tp
    return isinstance(target, type) and issubclass(target, numbers.Number)


def is_class_like(tp: Any) -> bool:
    """A concrete class, other than object, that may be stored as a whole."""
    if is_unsupported_type(tp):
        return False
    origin = typing.get_origin(tp)
    target = origin if origin is not None else tp
    return isinstance(target, type) and target is not object


def _is_scannable_key(key: Any) -> bool:
    """Registered keys that may serve as an assignable supertype."""
    if not isinstance(key, type) or typing.get_origin(key) is not None:
        return False
    if key is object or key in PLACEHOLDER_TYPES:
        return False
    return key.__module__ not in _ABSTRACT_MODULES


def find_assignable_key(tp: Any, keys: typing.Iterable[Any]) -> Any | None:
    """First registered key, in registration order, that tp subclasses."""
    target = typing.get_origin(tp) or tp
    for key in keys:
        if key is target or not _is_scannable_key(key):
            continue
        try:
            if issubclass(target, key):
                return key
        except TypeError:
            continue
    return None


def classify_language_type(tp: Any, keys: typing.Collection[Any]) -> TypeClassification:
    """Classify a normalised type against the registered keys.

    The candidate order is exact key, generic origin, enum placeholder, array
    placeholder, assignable supertype and finally the POCO placeholder.
    """
    candidates: list[tuple[TypeCategory, Any]] = []
    if is_unsupported_type(tp):
        return TypeClassification(TypeCategory.UNSUPPORTED)

    try:
        if tp in keys:
            candidates.append((TypeCategory.EXACT, tp))
    except TypeError:
        logger.debug(f'Unhashable type {tp!r} cannot be looked up')
        return TypeClassification(TypeCategory.UNSUPPORTED)

    origin = typing.get_origin(tp)
    if origin is not None and origin in keys:
        candidates.append((TypeCategory.GENERIC_SHAPE, origin))

    if is_enum_type(tp):
        candidates.append((TypeCategory.ENUM, EnumPlaceholder))

    if is_array_type(tp):
        candidates.append((TypeCategory.ARRAY, ArrayPlaceholder))
    elif is_class_like(tp) and not is_enum_type(tp):
        supertype = find_assignable_key(tp, keys)
        if supertype is not None:
            candidates.append((TypeCategory.ASSIGNABLE_SUPERTYPE, supertype))
        # numbers are never stored as serialized objects
        if not is_numeric_type(tp):
            candidates.append((TypeCategory.POCO, PocoPlaceholder))

    if not candidates:
        return TypeClassification(TypeCategory.UNSUPPORTED)
    return TypeClassification(candidates[0][0], tuple(candidates))
