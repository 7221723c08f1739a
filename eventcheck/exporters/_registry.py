from typing import Dict, Type

from eventcheck.exporters._base import Exporter

_registry: Dict[str, Type[Exporter]] = {}


def register(cls: Type[Exporter]) -> Type[Exporter]:
    """Register an Exporter under its `format_name`, or its file extension if unset."""
    _registry[getattr(cls, "format_name", None) or cls.extension] = cls
    return cls


def get_exporters() -> Dict[str, Type[Exporter]]:
    return dict(_registry)


def get_exporter(name: str) -> Type[Exporter]:
    try:
        return _registry[name]
    except KeyError:
        raise ValueError(
            f"No exporter named {name!r}; choose from {', '.join(sorted(_registry))}"
        )
