"""
Bindery coercion engine: raw string tokens in, typed values out.

What this module provides
- resolve(descriptor, *tokens) -> Outcome
  • Never raises a bindery fault: the result is either a value or a fault.
- coerce(descriptor, *tokens) -> value
  • resolve(...).unwrap(): returns the value or raises the fault.
- construct(annotation, *tokens) -> value
  • coerce() driven by a plain Python annotation (list[int], Color | None, ...).
- bind(target, arguments) -> inspect.BoundArguments
  • Coerce raw tokens for each named parameter of a callable or class.

Dispatch (in order)
1. Container shapes (SEQUENCE, SET, COLLECTION): one leaf per token, then the
   descriptor's container assembles them. A bad token aborts the whole call.
2. SCALAR / OPTIONAL: exactly one token, otherwise UsageError. OPTIONAL yields
   the same value as SCALAR; absence is never expressed through coercion.
3. Leaves:
   • ENUMERATION: exact, case-sensitive canonical member name (aliases excluded);
     BadValueError lists the names.
   • PATH: the path class applied to the token, no filesystem checks.
   • PASSTHROUGH: the token itself.
   • CONSTRUCTIBLE: registered converter, then __fromstring__, then the
     single-argument constructor.

Fault classification
- UsageError: wrong token count (or unknown/missing parameter in bind).
- BadValueError: the token was rejected by the enumeration, converter or constructor.
- ConfigurationError: the declared type cannot be built from strings at all.
"""
import inspect
from collections.abc import Mapping
from inspect import Parameter
from typing import Any, NamedTuple

from . import converters
from .faults import *
from .shapes import LeafKind, Shape, TypeDescriptor, describe, typename, _nullable
from .utils import pluralize


class Outcome(NamedTuple):
    """
    Tagged result of resolve(): exactly one of `value` / `fault` is meaningful.

    Use `ok` to branch, or `unwrap()` to get the value and raise the fault.
    """
    value: Any = None
    fault: BindingException | None = None

    @classmethod
    def success(cls, value, /):
        return cls(value, None)

    @classmethod
    def failure(cls, fault, /):
        if not isinstance(fault, BindingException):
            raise TypeError("outcome fault must be a binding exception")
        return cls(None, fault)

    @property
    def ok(self):
        return self.fault is None

    def unwrap(self, **options):
        """
        Return the value, or surface the fault through trigger(fault, **options).

        Without options the fault itself is raised (its cause preserved). With
        shell=True it is printed instead (and the process exits unless
        deferred=True, in which case None is returned).
        """
        if self.fault is None:
            return self.value
        if not options:
            raise self.fault
        trigger(self.fault, **options)
        return None


# Protocol body inherited by classes that subclass SupportsFromString without overriding it.
_FROMSTRING_STUB = converters.SupportsFromString.__fromstring__.__func__


def _leaf(descriptor, token):
    """Build a single leaf value of descriptor.element from one token."""
    element = descriptor.element
    match descriptor.kind:
        case LeafKind.PASSTHROUGH:
            return token
        case LeafKind.ENUMERATION:
            # Canonical members only; aliases are neither accepted nor listed.
            names = tuple(member.name for member in element)
            if token in names:
                return element[token]
            raise BadValueError(
                "%r is not a valid value for %s; options are: %s" % (token, typename(element), ", ".join(names)),
                code=FaultCode.INVALID_CHOICE,
                title="invalid choice",
                hint="use one of: %s" % ", ".join(names),
                type=element,
                tokens=(token,),
                choices=names,
            )
        case LeafKind.PATH:
            return _invoke(element, element, token)

    if (converter := converters.lookup(element)) is not None:
        return _invoke(element, converter, token)

    if inspect.isabstract(element) or getattr(element, "_is_protocol", False):
        raise ConfigurationError(
            f"abstract class {typename(element)!r} cannot be used for an argument value type",
            type=element,
        )

    if hasattr(element, "__fromstring__"):
        if element.__fromstring__ is None:
            raise ConfigurationError(f"string constructor for {typename(element)!r} must be public", type=element)
        if getattr(element.__fromstring__, "__func__", None) is _FROMSTRING_STUB:
            raise ConfigurationError(
                f"cannot find string constructor for {typename(element)!r}; __fromstring__ is not implemented",
                type=element,
            )
        return _invoke(element, element.__fromstring__, token)

    try:
        signature = inspect.signature(element)
    except (TypeError, ValueError):
        # Some builtins do not expose a signature; calling them is the only check left.
        signature = None
    if signature is not None:
        try:
            signature.bind(token)
        except TypeError:
            raise ConfigurationError(f"cannot find string constructor for {typename(element)!r}", type=element) from None

    return _invoke(element, element, token)


def _invoke(element, factory, token):
    try:
        return factory(token)
    except BindingException:
        raise
    except Exception as error:
        detail = f": {error}" if str(error) else ""
        raise BadValueError(
            f"problem constructing {typename(element)!r} from the string {token!r}{detail}",
            type=element,
            tokens=(token,),
        ) from error


def _build(descriptor, tokens):
    if descriptor.shape.container:
        values = [_leaf(descriptor, token) for token in tokens]
        try:
            return descriptor.container(values)
        except Exception as error:
            raise ConfigurationError(
                f"collection of type {typename(descriptor.container)!r} cannot be constructed from its values",
                type=descriptor.container,
            ) from error

    if len(tokens) != 1:
        raise UsageError(
            "expecting a single value to convert to %s but got %d %s" % (
                typename(descriptor.element), len(tokens), pluralize("value", len(tokens))
            ),
            expected=1,
            actual=len(tokens),
            tokens=tokens,
            type=descriptor.element,
        )
    return _leaf(descriptor, tokens[0])


def _tokens(tokens, caller):
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"{caller}() tokens must be strings")
    return tuple(tokens)


def resolve(descriptor, /, *tokens):
    """
    Coerce `tokens` into a value shaped by `descriptor`, as an Outcome.

    Parameters
    - descriptor: TypeDescriptor
    - *tokens: str, one per raw value (exactly one for SCALAR/OPTIONAL)

    Returns
    - Outcome.success(value) or Outcome.failure(fault). No partial values.

    Raises
    - TypeError for a non-descriptor or non-string tokens (programming errors).
    """
    if not isinstance(descriptor, TypeDescriptor):
        raise TypeError("resolve() first argument must be a type-descriptor")
    tokens = _tokens(tokens, "resolve")
    try:
        return Outcome.success(_build(descriptor, tokens))
    except BindingException as fault:
        return Outcome.failure(fault)


def coerce(descriptor, /, *tokens):
    """
    Coerce `tokens` into a value shaped by `descriptor`, raising faults.

    Examples
    - coerce(TypeDescriptor(Shape.SCALAR, int), "42")              -> 42
    - coerce(TypeDescriptor(Shape.SET, Color), "RED", "RED")       -> {Color.RED}
    - coerce(TypeDescriptor(Shape.OPTIONAL, Path), "out.txt")      -> Path("out.txt")
    """
    return resolve(descriptor, *tokens).unwrap()


def construct(annotation, /, *tokens):
    """
    Coerce `tokens` into a value of the Python type `annotation`.

    Equivalent to coerce(describe(annotation), *tokens); faults raised by
    describe() (unsupported annotations) surface the same way.
    """
    return coerce(describe(annotation), *_tokens(tokens, "construct"))


def bind(target, arguments, /):
    """
    Coerce raw tokens for the parameters of `target` and bind them.

    Parameters
    - target: a callable or a class (its constructor signature is used).
    - arguments: Mapping[str, Sequence[str] | str]
      Tokens per parameter name; a bare string counts as a single token.
      Annotations decide the shape; unannotated parameters keep the raw token.
      A *args parameter takes any number of tokens; a **kwargs parameter takes
      the remaining names, one value each.

    Returns
    - inspect.BoundArguments with defaults applied. Parameters that were not
      supplied keep their defaults; optional parameters without a default are
      bound to None.

    Raises
    - UsageError: unknown parameter names, missing required parameters, or a
      wrong token count.
    - BadValueError / ConfigurationError: as for coerce().
    """
    if not callable(target):
        raise TypeError("bind() first argument must be callable")
    if not isinstance(arguments, Mapping):
        raise TypeError("bind() second argument must be a mapping")

    signature = inspect.signature(target, eval_str=True)
    title = getattr(target, "__qualname__", repr(target))
    parameters = signature.parameters
    variadic = next((parameter for parameter in parameters.values() if parameter.kind is Parameter.VAR_KEYWORD), None)

    def annotation(parameter):
        return object if parameter.annotation is Parameter.empty else parameter.annotation

    def tokens(name):
        return (value,) if isinstance(value := arguments[name], str) else tuple(value)

    unknown = [name for name in arguments if name not in parameters or parameters[name].kind is Parameter.VAR_KEYWORD]
    if unknown and variadic is None:
        raise UsageError(
            "unknown %s for %s: %s" % (pluralize("parameter", len(unknown)), title, ", ".join(unknown)),
            hint="valid parameters are: %s" % ", ".join(parameters),
            unknown=tuple(unknown),
        )

    values, missing = {}, []
    for name, parameter in parameters.items():
        if parameter.kind is Parameter.VAR_KEYWORD:
            values[name] = {extra: construct(annotation(parameter), *tokens(extra)) for extra in unknown}
        elif parameter.kind is Parameter.VAR_POSITIONAL:
            if name in arguments:
                values[name] = coerce(TypeDescriptor(Shape.SEQUENCE, annotation(parameter), tuple), *tokens(name))
        elif name in arguments:
            values[name] = construct(annotation(parameter), *tokens(name))
        elif parameter.default is Parameter.empty:
            if _nullable(parameter.annotation):
                values[name] = None
            else:
                missing.append(name)

    if missing:
        raise UsageError(
            "missing %s for %s: %s" % (pluralize("parameter", len(missing)), title, ", ".join(missing)),
            hint="provide a value for every required parameter",
            missing=tuple(missing),
        )

    bound = inspect.BoundArguments(signature, values)
    bound.apply_defaults()
    return bound


__all__ = (
    "Outcome",
    "resolve",
    "coerce",
    "construct",
    "bind",
)
