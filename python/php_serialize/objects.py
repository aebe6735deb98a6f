"""PHP object support: the generic fallback record and the class registry.

Decoded ``O:`` values are mapped onto Python classes in this order:

1. the ``classmap`` passed to :func:`php_serialize.unserialize`;
2. classes registered here with :func:`register_class` or :func:`php_class`;
3. :class:`PhpObject`, which keeps the original PHP class name.

Compatibility note: PHP class names are looked up *capitalized*
(``"userprofile"`` and ``"UserProfile"`` both become ``"Userprofile"``),
and classes are never discovered by scanning loaded modules. Register any
class you expect to receive.
"""

from __future__ import annotations

import dataclasses
import inspect
import reprlib
import types
from typing import Any, Callable, Iterable, Mapping

from php_serialize.errors import NoSuchField

_MISSING = object()

_registry: dict[str, type] = {}


class PhpObject:
    """A PHP object whose class has no Python counterpart.

    Fields are kept in the order PHP sent them and are exposed as
    attributes::

        >>> obj = PhpObject("Foo", {"bar": 5})
        >>> obj.bar
        5
        >>> obj.php_classname
        'Foo'
    """

    def __init__(self, php_classname: str = "stdClass",
                 fields: Mapping[str, Any] | Iterable[tuple[str, Any]] = (), **kwargs: Any):
        object.__setattr__(self, "_php_classname", php_classname)
        object.__setattr__(self, "_fields", dict(fields))
        self._fields.update(kwargs)

    @property
    def php_classname(self) -> str:
        return self._php_classname

    @php_classname.setter
    def php_classname(self, value: str) -> None:
        object.__setattr__(self, "_php_classname", value)

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["_fields"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "php_classname":
            object.__setattr__(self, name, value)
        else:
            self._fields[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, name: str) -> Any:
        return self._fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def to_assoc(self) -> list[tuple[str, Any]]:
        return list(self._fields.items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PhpObject):
            return NotImplemented
        return self._php_classname == other._php_classname and self._fields == other._fields

    __hash__ = None  # type: ignore[assignment]

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        args = [repr(self._php_classname)] + [f"{k}={v!r}" for k, v in self._fields.items()]
        return f"PhpObject({', '.join(args)})"


def _registry_key(name: str) -> str:
    return name.capitalize()


def register_class(cls: type, name: str | None = None) -> type:
    """Make ``cls`` the target for PHP objects named ``name`` (default: the class name)."""
    _registry[_registry_key(name or cls.__name__)] = cls
    return cls


def unregister_class(name: str) -> None:
    _registry.pop(_registry_key(name), None)


def php_class(name_or_cls: str | type | None = None) -> Any:
    """Class decorator form of :func:`register_class`.

    Usable bare (``@php_class``) or with an explicit PHP name
    (``@php_class("App\\\\Models\\\\User")``).
    """
    if isinstance(name_or_cls, type):
        return register_class(name_or_cls)

    def decorator(cls: type) -> type:
        return register_class(cls, name_or_cls)

    return decorator


def lookup_class(key: str) -> type | None:
    return _registry.get(key)


def instantiate(cls: Callable[[], Any]) -> Any:
    """Build an empty instance ready for field assignment.

    Dataclasses are allocated without running ``__init__``; every field starts
    at its default, or ``None`` when it has none.
    """
    if isinstance(cls, type) and dataclasses.is_dataclass(cls):
        obj = cls.__new__(cls)
        for f in dataclasses.fields(cls):
            if f.default is not dataclasses.MISSING:
                value = f.default
            elif f.default_factory is not dataclasses.MISSING:
                value = f.default_factory()
            else:
                value = None
            object.__setattr__(obj, f.name, value)
        return obj
    return cls()


def _is_settable(obj: Any, name: str) -> bool:
    if name in getattr(obj, "__dict__", {}):
        return True
    attr = inspect.getattr_static(type(obj), name, _MISSING)
    if attr is _MISSING:
        return False
    if isinstance(attr, property):
        return attr.fset is not None
    if isinstance(attr, types.MemberDescriptorType):
        return True
    if isinstance(attr, (staticmethod, classmethod)) or inspect.isroutine(attr):
        return False
    return True


def assign_field(obj: Any, name: str, value: Any) -> None:
    """Set a decoded field, raising NoSuchField if ``obj`` has no such attribute."""
    if isinstance(obj, PhpObject):
        obj._fields[name] = value
    elif dataclasses.is_dataclass(obj):
        if name not in {f.name for f in dataclasses.fields(obj)}:
            raise NoSuchField(type(obj), name)
        # works for frozen dataclasses too
        object.__setattr__(obj, name, value)
    elif _is_settable(obj, name):
        setattr(obj, name, value)
    else:
        raise NoSuchField(type(obj), name)
