"""
Bindery utilities (small helpers shared by the coercion and discovery layers).

Overview
- UnsetType / Unset
  • Singleton sentinel meaning "not provided", distinct from None.
- coalesce(value, default=None)
  • Materialize Unset into a default while preserving None, 0, "", [].
- rename(callable, name) / @rename("name")
  • Give generated callables stable __name__/__qualname__ for tracebacks.
- pluralize(word, count)
  • Pick the singular or plural form of a word for fault messages.
- qualname(cls)
  • Fully-qualified "module.QualName" of a class, used in fault messages.
- mglob(pattern)
  • Expand a dotted module glob ("pkg.**", "pkg.tools.*") into module names.

Stability
- Names not listed in __all__ are internal and may change without notice.
"""
import builtins
import functools
import importlib
import pkgutil
import re
from typing import final


@final
class UnsetType:
    """
    Sentinel type for "no value was provided".

    Characteristics
    - Falsy, but never equal to None or 0.
    - repr(Unset) -> "Unset".
    - Singleton per process and sealed against subclassing.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` unchanged.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or build a decorator that will.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator

    Raises
    - TypeError on wrong arity, a non-string name, or a callable whose
      names cannot be updated (e.g., built-ins).
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


@functools.cache
def pluralize(word, count=2, /):
    """
    Return `word` or its plural form depending on `count`.

    Only the regular English rules that fault messages actually need are
    covered (s/sh/ch/x/z -> +es, consonant+y -> -ies, otherwise +s).

    Examples
    - pluralize("string", 1) -> "string"
    - pluralize("string", 3) -> "strings"
    - pluralize("class")     -> "classes"
    - pluralize("entry")     -> "entries"
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() first argument must be a string")
    if not isinstance(count, int):
        raise TypeError("pluralize() second argument must be an integer")
    if count == 1 or not word:
        return word
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def qualname(cls, /):
    """
    Return the fully-qualified name of a class ("package.module.Outer.Inner").

    Builtins are reported by their bare name, which keeps messages short for
    the common int/str/bool cases.
    """
    module = getattr(cls, "__module__", None)
    name = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", None) or repr(cls)
    if not module or module == "builtins":
        return name
    return f"{module}.{name}"


@functools.cache
def _resolve_segment(segment):
    """
    translate one pattern segment into a regex snippet (never crosses dots).
      *       → zero or more non-dot chars
      ?       → exactly one non-dot char
      [...]   → character class, [!...] negated
      \\x      → literal x
    """
    length = len(segment)
    index = 0
    parts = []
    while index < length:
        char = segment[index]
        if char == '\\' and index + 1 < length:
            parts.append(re.escape(segment[index + 1]))
            index += 2
            continue
        if char == '*':
            parts.append(r'[^.]*')
        elif char == '?':
            parts.append(r'[^.]')
        elif char == '[':
            start = index + 1
            negated = ''
            if start < length and segment[start] in ('!', '^'):
                negated = '^'
                start += 1
            pivot = start
            while pivot < length and segment[pivot] != ']':
                pivot += 2 if segment[pivot] == '\\' and pivot + 1 < length else 1
            if pivot >= length:
                parts.append(r'\[')
            else:
                parts.append(f'[{negated}{segment[start:pivot]}]')
                index = pivot
        else:
            parts.append(re.escape(char))
        index += 1
    return ''.join(parts)


@functools.cache
def _compile_regex(pattern):
    """
    compile a dotted module glob; a whole '**' segment spans zero or more segments.
    """
    parts = []
    for segment in pattern.split('.'):
        if segment == '**':
            parts.append(r'(?:\.[A-Za-z_]\w*)*')
        else:
            parts.append(r'\.' + _resolve_segment(segment))
    body = ''.join(parts)
    return re.compile(body[2:] if body.startswith(r'\.') else body)


def mglob(source, /):
    """
    expand a dotted module glob into sorted, fully-qualified module names.

    rules
    - the pattern must start with at least one concrete package segment.
    - a pattern with no wildcard is returned as-is (`[source]`), importable or not.
    - when the concrete prefix cannot be imported the result is empty; any other
      failure while importing it, or a subpackage, is an ImportError naming it.
    - the prefix itself is included when the whole pattern matches it
      (so "pkg.**" yields "pkg" and every module below it).

    examples
    - "pkg.*"        → direct children of pkg
    - "pkg.**"       → pkg and everything below it
    - "pkg.**.tasks" → any `tasks` module under pkg
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    if re.fullmatch(r"(?!\d)\w+(\.(?!\d)\w+)*", source):
        return [source]

    prefixes = []
    for segment in source.split('.'):
        if set(segment) & set('*?[]!\\') or not re.fullmatch(r"(?!\d)\w+", segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []
    except Exception as error:
        raise ImportError(f"unable to import package {prefix!r}", name=prefix) from error

    matches = set()
    if (pattern := _compile_regex(source)).fullmatch(prefix):
        matches.add(prefix)

    if hasattr(package, "__path__"):
        # walk_packages imports subpackages to recurse; failures surface through onerror.
        for metadata in pkgutil.walk_packages(package.__path__, prefix + '.', onerror=_reraise):
            if pattern.fullmatch(name := metadata.name):
                matches.add(name)

    return sorted(matches)


def _reraise(name):
    raise ImportError(f"unable to import package {name!r}", name=name)


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "pluralize",
    "qualname",
    "mglob",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
