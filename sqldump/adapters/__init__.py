"""
Adapter registry, keyed by the dialect tag of the DSN.
"""

import inspect

from ..exceptions import AdapterCapabilityError, UnknownDialectError
from .base import TypeAdapter
from .mysql import TypeAdapterMysql

_ADAPTERS: dict[str, type[TypeAdapter]] = {}


def register_adapter(dialect: str, adapter_class: type) -> None:
    """Register an adapter class for a dialect.

    The class is checked against the TypeAdapter contract right away, so a
    broken registration fails here rather than on first use.
    """
    if not inspect.isclass(adapter_class) or not issubclass(adapter_class, TypeAdapter):
        name = getattr(adapter_class, '__name__', repr(adapter_class))
        raise AdapterCapabilityError(f"Adapter {name} is not instance of {TypeAdapter.__name__}")

    if inspect.isabstract(adapter_class):
        missing = ', '.join(sorted(adapter_class.__abstractmethods__))
        raise AdapterCapabilityError(
            f"Adapter {adapter_class.__name__} does not implement: {missing}"
        )

    _ADAPTERS[dialect.lower()] = adapter_class


def get_adapter_class(dialect: str) -> type[TypeAdapter]:
    adapter_class = _ADAPTERS.get(dialect.lower())
    if adapter_class is None:
        raise UnknownDialectError(f"There is no adapter for type '{dialect}'")
    return adapter_class


def registered_dialects() -> set[str]:
    return set(_ADAPTERS)


register_adapter('mysql', TypeAdapterMysql)

__all__ = [
    "TypeAdapter",
    "TypeAdapterMysql",
    "get_adapter_class",
    "register_adapter",
    "registered_dialects",
]
