"""
Bindery discovery: find the program classes that live in a set of namespaces.

What this module provides
- Program / @program: the descriptor attached to a program class
  (description, group, omit-from-command-line, hidden).
- scan(namespace, marker): import a namespace and return every class in it
  that transitively subclasses `marker`.
- collect(classes, excluded, include_omitted=...): filter, validate and map an
  explicit set of classes to their descriptors.
- discover(namespaces, marker, excluded, include_omitted=...): scan + collect.

Filtering (collect)
1. non-concrete classes are dropped: abstract classes, Protocols, builtins,
   dynamically synthesized classes and classes defined inside functions.
2. subclasses of any `excluded` type are dropped.
3. a remaining class without its own @program descriptor is a ConfigurationError.
4. programs marked `omit=True` are dropped unless include_omitted is set.
5. simple names (`cls.__name__`) must be unique across the survivors; every
   collision group is reported at once in a single CollisionError.

The result is a read-only mapping {class: Program}, ordered by qualified name.

Quick example
    from bindery import Program, program, discover

    class Task: ...

    @program(descr="align reads", group="alignment")
    class Align(Task): ...

    programs = discover(["mytool.tasks"], Task)
"""
import importlib
import inspect
from collections import defaultdict
from collections.abc import Iterable
from types import MappingProxyType
from typing import final

from .faults import *
from .utils import Unset, coalesce, mglob, pluralize, qualname, rename


@final
class Program:
    """
    Descriptor attached to a program class by @program.

    Fields (read-only)
    - descr: str | None      short description shown next to the program name.
    - group: str             category used when listing programs ("programs" by default).
    - omit: bool             omit from the command line; discovery skips it by default.
    - hidden: bool           keep it invokable but out of listings.
    """
    __slots__ = ("_descr", "_group", "_omit", "_hidden")
    __introspectable__ = ("descr", "group", "omit", "hidden")

    def __new__(cls, descr=Unset, group=Unset, *, omit=False, hidden=False):
        if not isinstance(descr, str | Unset):
            raise TypeError("program 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError("program 'descr' cannot be empty")

        if not isinstance(group, str | Unset):
            raise TypeError("program 'group' must be a string")
        elif isinstance(group, str) and not (group := group.strip()):
            raise ValueError("program 'group' cannot be empty")

        self = super().__new__(cls)
        object.__setattr__(self, "_descr", coalesce(descr))
        object.__setattr__(self, "_group", coalesce(group, pluralize("program")))
        object.__setattr__(self, "_omit", bool(omit))
        object.__setattr__(self, "_hidden", bool(hidden))
        return self

    descr = property(rename(lambda self: self._descr, "descr"))
    group = property(rename(lambda self: self._group, "group"))
    omit = property(rename(lambda self: self._omit, "omit"))
    hidden = property(rename(lambda self: self._hidden, "hidden"))

    def __setattr__(self, name, value, /):
        raise AttributeError("program descriptor is read-only")

    def __eq__(self, other):
        if not isinstance(other, Program):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash(tuple(self.__rich_repr__()))

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "program(%s)" % ", ".join("%s=%r" % field for field in self.__rich_repr__())


def program(source=Unset, /, *args, **kwargs):
    """
    Attach a Program descriptor to a class.

    Forms
    - @program                      → default descriptor
    - @program("descr", group="x")  → descriptor built from the arguments

    The descriptor is stored as `__program__` in the class's own namespace, so
    subclasses do not inherit it and need their own @program.

    Raises
    - TypeError when applied to a non-class or twice to the same class.
    """
    if source is not Unset and not isinstance(source, type):
        # @program("descr") passes the description positionally.
        args, source = (source, *args), Unset

    descriptor = Program(*args, **kwargs)

    @rename("program")
    def wrapper(cls, /):
        if not isinstance(cls, type):
            raise TypeError("@program() must be applied to a class")
        if "__program__" in vars(cls):
            raise TypeError("@program() must be applied only once")
        cls.__program__ = descriptor
        return cls

    return wrapper(source) if source is not Unset else wrapper


def _descriptor(cls, /):
    """Return the Program attached to exactly `cls`, or None when it has none."""
    return vars(cls).get("__program__")


def concrete(cls, /):
    """
    True when `cls` can be instantiated as a program.

    Rejected: abstract classes, Protocols, builtins ("primitive" types),
    synthesized classes (no module or a non-identifier name) and classes
    defined inside a function.
    """
    if not isinstance(cls, type):
        return False
    if inspect.isabstract(cls) or getattr(cls, "_is_protocol", False):
        return False
    if not isinstance(module := cls.__module__, str) or module == "builtins":
        return False
    if not cls.__name__.isidentifier() or "<locals>" in cls.__qualname__:
        return False
    return True


def scan(namespace, marker, /):
    """
    Import `namespace` and return the classes in it that subclass `marker`.

    Parameters
    - namespace: str
      A dotted package/module name ("mytool.tasks"), or a module glob
      ("mytool.*.tasks", see mglob). A plain name covers the package and all of
      its submodules.
    - marker: type
      The marker capability; every transitive subclass qualifies (the marker
      itself does not).

    Returns
    - frozenset of classes whose __module__ is one of the imported modules.
      A namespace whose root does not exist yields an empty set.

    Raises
    - TypeError for a non-string namespace or non-class marker.
    - ConfigurationError when the namespace or a module inside it raises while importing.
    """
    if not isinstance(namespace, str):
        raise TypeError("scan() first argument must be a string")
    if not isinstance(marker, type):
        raise TypeError("scan() second argument must be a class")

    pattern = namespace.strip()
    if not set(pattern) & set("*?[]!\\"):
        pattern += ".**"

    try:
        names = mglob(pattern)
    except ImportError as error:
        raise ConfigurationError(f"unable to import module {error.name!r}", module=error.name) from error

    modules = set()
    for name in names:
        try:
            importlib.import_module(name)
        except Exception as error:
            raise ConfigurationError(f"unable to import module {name!r}", module=name) from error
        modules.add(name)

    found, seen, pending = set(), set(), [marker]
    while pending:
        for subclass in type.__subclasses__(pending.pop()):
            if subclass in seen:
                continue
            seen.add(subclass)
            pending.append(subclass)
            if subclass.__module__ in modules:
                found.add(subclass)
    return frozenset(found)


def collect(classes, excluded=(), /, *, include_omitted=False):
    """
    Filter `classes` down to the program classes and map each to its Program.

    Parameters
    - classes: Iterable[type]; duplicates are ignored.
    - excluded: Iterable[type]; subclasses of any of these are dropped.
    - include_omitted: keep programs declared with omit=True.

    Returns
    - MappingProxyType {class: Program}, ordered by qualified name.

    Raises
    - TypeError: non-class entries.
    - ConfigurationError: a concrete class without its own @program descriptor.
    - CollisionError: two or more classes share a simple name.
    """
    if not isinstance(classes, Iterable):
        raise TypeError("collect() first argument must be iterable")
    if not isinstance(excluded, Iterable):
        raise TypeError("collect() second argument must be iterable")
    excluded = tuple(excluded)
    if not all(isinstance(cls, type) for cls in excluded):
        raise TypeError("collect() excluded types must be classes")

    programs = {}
    for cls in dict.fromkeys(classes):
        if not isinstance(cls, type):
            raise TypeError("collect() classes must be classes")
        if not concrete(cls) or issubclass(cls, excluded):
            continue
        if (descriptor := _descriptor(cls)) is None:
            raise ConfigurationError(
                f"class {qualname(cls)!r} is missing its @program descriptor",
                code=FaultCode.MISSING_DESCRIPTOR,
                title="missing descriptor",
                hint="decorate the class with @program(...) or make it abstract",
                type=cls,
            )
        if descriptor.omit and not include_omitted:
            continue
        programs[cls] = descriptor

    groups = defaultdict(list)
    for cls in programs:
        groups[cls.__name__].append(qualname(cls))
    if collisions := sorted(sorted(group) for group in groups.values() if len(group) > 1):
        raise CollisionError(
            "simple class name %s: %s" % (
                pluralize("collision", len(collisions)), "; ".join(", ".join(group) for group in collisions)
            ),
            collisions=tuple(map(tuple, collisions)),
        )

    return MappingProxyType(dict(sorted(programs.items(), key=lambda entry: qualname(entry[0]))))


def discover(namespaces, marker, excluded=(), /, *, include_omitted=False):
    """
    Find every program class implementing `marker` in `namespaces`.

    Parameters
    - namespaces: Iterable[str] (not a bare string); see scan() for the syntax.
    - marker: type; the marker capability.
    - excluded: Iterable[type]; families of programs to suppress.
    - include_omitted: keep programs declared with omit=True.

    Returns
    - MappingProxyType {class: Program}; see collect().
    """
    if isinstance(namespaces, str) or not isinstance(namespaces, Iterable):
        raise TypeError("discover() first argument must be an iterable of strings")
    classes = set()
    for namespace in namespaces:
        classes |= scan(namespace, marker)
    return collect(classes, excluded, include_omitted=include_omitted)


__all__ = (
    "Program",
    "program",
    "concrete",
    "scan",
    "collect",
    "discover",
)
