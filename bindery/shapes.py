"""
Bindery shapes: what a parameter's declared type looks like to the coercion engine.

Overview
- Shape: the structural wrapper around a leaf type
  (SCALAR, OPTIONAL, SEQUENCE, SET, COLLECTION).
- LeafKind: how a single token becomes a leaf value
  (ENUMERATION, PATH, CONSTRUCTIBLE, PASSTHROUGH).
- TypeDescriptor: immutable (shape, element, container) triple consumed by
  bindery.coercion. `container` is the class that assembles container shapes.
- describe(annotation): turn a plain Python annotation (list[int], Color | None,
  frozenset[Path], Collection[Decimal], ...) into a TypeDescriptor.

Rules worth knowing
- str, bytes and bytearray are leaves, never containers.
- Optional only ever wraps the outermost shape; `list[int | None]` is rejected.
  `list[int] | None` describes as a SEQUENCE: its absence is the caller's business.
- Containers never nest; `list[list[int]]` is rejected.
- A class that is both a Sequence and a Set is ambiguous and rejected.

Every rejection is a ConfigurationError: a bug in the declaration, not in the input.
"""
import collections
import inspect
import pathlib
import types
import typing
from collections.abc import Collection, Iterable, Mapping, MutableSequence, MutableSet, Sequence, Set
from enum import Enum
from typing import Any, final

from .faults import ConfigurationError
from .utils import Unset, coalesce


class Shape(Enum):
    """Structural wrapper around a leaf type."""
    SCALAR = "scalar"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"
    SET = "set"
    COLLECTION = "collection"

    @property
    def container(self):
        """True for the shapes that take any number of tokens."""
        return self in (Shape.SEQUENCE, Shape.SET, Shape.COLLECTION)


class LeafKind(Enum):
    """How a single token is turned into a leaf value."""
    ENUMERATION = "enumeration"
    PATH = "path"
    CONSTRUCTIBLE = "constructible"
    PASSTHROUGH = "passthrough"


# Abstract container origins and the concrete class that assembles each of them.
_ASSEMBLERS = {
    Sequence: list,
    MutableSequence: list,
    Set: set,
    MutableSet: set,
    Collection: tuple,
    Iterable: tuple,
}

_TEXTUAL = (str, bytes, bytearray)


def typename(object, /):
    """Short display name for a type or annotation ("int", "list[int]", "Color")."""
    if isinstance(object, type) and not isinstance(object, types.GenericAlias):
        return object.__name__
    return repr(object).removeprefix("typing.")


def _nullable(annotation):
    return typing.get_origin(annotation) in (typing.Union, types.UnionType) and type(None) in typing.get_args(annotation)


def _shape_of(cls):
    """
    Shape of a container class, or None when the class is a leaf.

    Raises ConfigurationError for mappings (other than Counter) and for classes
    that are both a sequence and a set.
    """
    if cls in _ASSEMBLERS:
        return {list: Shape.SEQUENCE, set: Shape.SET, tuple: Shape.COLLECTION}[_ASSEMBLERS[cls]]
    if not isinstance(cls, type) or issubclass(cls, _TEXTUAL):
        return None
    if issubclass(cls, collections.Counter):
        return Shape.COLLECTION
    if issubclass(cls, Mapping):
        raise ConfigurationError(f"unknown collection type {typename(cls)!r}", type=cls)
    is_sequence, is_set = issubclass(cls, Sequence), issubclass(cls, Set)
    if is_sequence and is_set:
        raise ConfigurationError(
            f"collection type {typename(cls)!r} is both a sequence and a set; declare one of them explicitly",
            type=cls,
        )
    if is_sequence:
        return Shape.SEQUENCE
    if is_set:
        return Shape.SET
    if issubclass(cls, Collection):
        return Shape.COLLECTION
    return None


def _check_element(element):
    """Raise ConfigurationError unless `element` can be built from a single string."""
    if element is Any:
        return
    if element is type(None) or _nullable(element):
        raise ConfigurationError(
            f"cannot construct a {typename(element)!r} from a string; is this an optional inside an optional or a collection?",
            type=element,
        )
    if typing.get_origin(element) in (typing.Union, types.UnionType):
        raise ConfigurationError(f"union type {typename(element)!r} is not supported as an argument value type", type=element)
    if typing.get_origin(element) is not None or not isinstance(element, type):
        raise ConfigurationError(f"don't know how to make a {typename(element)!r} from a single string", type=element)
    if _shape_of(element) is not None:
        raise ConfigurationError(f"don't know how to make a {typename(element)!r} from a single string", type=element)


def classify(element, /):
    """
    Return the LeafKind of a leaf type.

    - object / typing.Any     → PASSTHROUGH
    - enum.Enum subclasses    → ENUMERATION
    - pathlib.PurePath family → PATH
    - anything else           → CONSTRUCTIBLE
    """
    if element is Any or element is object:
        return LeafKind.PASSTHROUGH
    if isinstance(element, type) and issubclass(element, Enum):
        return LeafKind.ENUMERATION
    if isinstance(element, type) and issubclass(element, pathlib.PurePath):
        return LeafKind.PATH
    return LeafKind.CONSTRUCTIBLE


@final
class TypeDescriptor:
    """
    Immutable (shape, element, container) triple.

    Parameters
    - shape: Shape
    - element: the leaf type (a class, or typing.Any); never Optional, never a container.
    - container: for container shapes, the class that assembles the leaf values.
      Defaults to list (SEQUENCE), set (SET) or tuple (COLLECTION). Must be left
      unset for SCALAR and OPTIONAL.

    Raises
    - TypeError for a non-Shape shape or a non-class container.
    - ConfigurationError for an element or container the engine cannot build.
    """
    __slots__ = ("shape", "element", "container")

    def __new__(cls, shape, element, container=Unset):
        if not isinstance(shape, Shape):
            raise TypeError("type-descriptor 'shape' must be a Shape")
        _check_element(element)
        if shape.container:
            container = coalesce(container, {Shape.SEQUENCE: list, Shape.SET: set, Shape.COLLECTION: tuple}[shape])
            if not isinstance(container, type):
                raise TypeError("type-descriptor 'container' must be a class")
            if inspect.isabstract(container):
                raise ConfigurationError(
                    f"collection of type {typename(container)!r} cannot be constructed or auto-initialized",
                    type=container,
                )
        elif container is not Unset:
            raise TypeError(f"{shape.value} type-descriptor cannot specify a 'container'")
        else:
            container = None

        self = super().__new__(cls)
        object.__setattr__(self, "shape", shape)
        object.__setattr__(self, "element", element)
        object.__setattr__(self, "container", container)
        return self

    @property
    def kind(self):
        """LeafKind of the element type."""
        return classify(self.element)

    def __setattr__(self, name, value, /):
        raise AttributeError("type-descriptor is read-only")

    def __delattr__(self, name, /):
        raise AttributeError("type-descriptor is read-only")

    def __eq__(self, other):
        if not isinstance(other, TypeDescriptor):
            return NotImplemented
        return (self.shape, self.element, self.container) == (other.shape, other.element, other.container)

    def __hash__(self):
        return hash((self.shape, self.element, self.container))

    def __rich_repr__(self):
        yield "shape", self.shape.value
        yield "element", typename(self.element)
        if self.container is not None:
            yield "container", typename(self.container)

    def __repr__(self):
        return "type-descriptor(%s)" % ", ".join("%s=%s" % field for field in self.__rich_repr__())


def describe(annotation, /):
    """
    Build a TypeDescriptor from a Python type annotation.

    Examples
    - int                  → SCALAR int
    - Color | None         → OPTIONAL Color
    - list[Path]           → SEQUENCE Path (assembled as list)
    - tuple[int, ...]      → SEQUENCE int (assembled as tuple)
    - frozenset[str]       → SET str (assembled as frozenset)
    - Collection[Decimal]  → COLLECTION Decimal (assembled as tuple)
    - Counter[str]         → COLLECTION str (assembled as Counter)
    - list                 → SEQUENCE object (tokens kept as strings)

    Raises
    - ConfigurationError for anything else (mappings, heterogeneous tuples,
      unions of several types, nested containers or optionals, non-types).
    """
    if annotation is Any or annotation is object:
        return TypeDescriptor(Shape.SCALAR, annotation)

    origin, arguments = typing.get_origin(annotation), typing.get_args(annotation)

    if origin in (typing.Union, types.UnionType):
        members = [member for member in arguments if member is not type(None)]
        if len(members) != 1:
            raise ConfigurationError(f"union type {typename(annotation)!r} is not supported as an argument value type", type=annotation)
        # Unions flatten, so members[0] is never itself optional.
        if (inner := describe(members[0])).shape is Shape.SCALAR:
            return TypeDescriptor(Shape.OPTIONAL, inner.element)
        return inner

    if origin is typing.Annotated:
        return describe(arguments[0])

    if origin is None:
        if not isinstance(annotation, type):
            raise ConfigurationError(f"don't know how to make a {typename(annotation)!r}", type=annotation)
        if (shape := _shape_of(annotation)) is None:
            return TypeDescriptor(Shape.SCALAR, annotation)
        return TypeDescriptor(shape, object, _ASSEMBLERS.get(annotation, annotation))

    if not isinstance(origin, type) or (shape := _shape_of(origin)) is None:
        raise ConfigurationError(f"don't know how to make a {typename(annotation)!r}", type=annotation)

    if not arguments:
        return TypeDescriptor(shape, object, _ASSEMBLERS.get(origin, origin))

    if origin is tuple:
        if len(arguments) != 2 or arguments[1] is not Ellipsis:
            raise ConfigurationError(
                f"tuple type {typename(annotation)!r} is not supported; use tuple[T, ...]",
                type=annotation,
            )
        return TypeDescriptor(Shape.SEQUENCE, arguments[0], tuple)

    if len(arguments) != 1:
        raise ConfigurationError(f"don't know how to make a {typename(annotation)!r}", type=annotation)

    return TypeDescriptor(shape, arguments[0], _ASSEMBLERS.get(origin, origin))


__all__ = (
    "Shape",
    "LeafKind",
    "TypeDescriptor",
    "classify",
    "describe",
    "typename",
)
