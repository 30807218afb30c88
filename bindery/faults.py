"""
Bindery faults (binding errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every fault this package raises.
- BindingException: base type that carries message + options and knows how to
  render itself with rich in a short, lowercased, actionable way.
- UsageError / BadValueError: user-facing faults (wrong token count, token
  that does not convert).
- ConfigurationError / CollisionError: developer-facing faults (unsupported
  declared type, missing descriptor, simple-name collision).
- trigger(): central entry point to surface a fault (raise, or print in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The coercion and discovery layers raise these faults directly; a CLI layer
  decides what to show by looking at `fault.user_facing`, or hands the fault to
  trigger(fault, shell=True) to have it rendered on stderr.
- Host customization lives in __main__: __prog__ (program name in headers),
  __styles__ (style overrides), __codes__ (code relabeling), __docs__ (docs per code).
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - usage (2110x): USAGE
    - values (2111x): BAD_VALUE, INVALID_CHOICE
    - declarations (2112x): CONFIGURATION, MISSING_DESCRIPTOR
    - discovery (2113x): COLLISION
    """
    # --- usage errors ---
    USAGE                       = 21101

    # --- value errors ---
    BAD_VALUE                   = 21111
    INVALID_CHOICE              = 21112

    # --- declaration errors ---
    CONFIGURATION               = 21121
    MISSING_DESCRIPTOR          = 21122

    # --- discovery errors ---
    COLLISION                   = 21131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class BindingException(Exception):
    """
    Base class for every fault raised while binding tokens or discovering programs.

    Options are free-form context; the renderer understands `code`, `title`,
    `hint`, `shell`, `fancy`, `colorful`, `deferred`, `ratio` and `tool`.
    Subclasses declare their defaults in __defaults__.
    """
    __defaults__ = MappingProxyType({})
    user_facing = False

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(type(self).__defaults__ | options)
        super().__init__(message)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

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

        prog = text(getattr(main, "__prog__", self.options.get("tool", "bindery")), styler("prog-name"))
        code = self.options.get("code", FaultCode.CONFIGURATION)
        title = self.options.get("title", "binding error")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize(), styler("code")),
            " | ",
            text(title.title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*parts), title=header, title_align="left", width=width)

        return Group(header, *parts)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UsageError(BindingException):
    """Wrong number of tokens for a single-valued parameter, or an unknown/missing parameter."""
    __defaults__ = MappingProxyType({
        "code": FaultCode.USAGE,
        "title": "usage error",
        "hint": "check how many values the parameter takes",
    })
    user_facing = True


class BadValueError(BindingException):
    """A token could not be converted to the requested leaf type."""
    __defaults__ = MappingProxyType({
        "code": FaultCode.BAD_VALUE,
        "title": "bad value",
        "hint": "check the value's spelling and format",
    })
    user_facing = True


class ConfigurationError(BindingException):
    """The declared type or program is unsupported; a bug in the declaration, not in user input."""
    __defaults__ = MappingProxyType({
        "code": FaultCode.CONFIGURATION,
        "title": "configuration error",
        "hint": "fix the declaration of the parameter or program",
    })


class CollisionError(BindingException):
    """Two or more discovered programs share a simple class name."""
    __defaults__ = MappingProxyType({
        "code": FaultCode.COLLISION,
        "title": "name collision",
        "hint": "rename one of the colliding classes or exclude it",
    })


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see BindingException).
    - options are merged into a copy of the fault before triggering.
    - with shell=True the fault is printed on stderr (and the process exits unless
      deferred=True); otherwise it is raised.
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

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; returns None when no entry exists.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "BindingException",
    "UsageError",
    "BadValueError",
    "ConfigurationError",
    "CollisionError",
    "FaultCode",
    "trigger",
    "getdoc",
)
