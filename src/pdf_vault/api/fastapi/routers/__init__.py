"""
Router discovery.

Every public module in this package that defines a module-level ``router`` is
mounted on the app. Optional module globals:

- ``ROUTER_PREFIX``: path prefix for the whole module (e.g. ``/api/admin``)
- ``ROUTER_TAG``: OpenAPI tag
- ``INCLUDE_ROUTER_IN_SCHEMA``: set False to hide the module from the docs
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Iterable, Iterator, Optional

from fastapi import APIRouter, FastAPI

logger = logging.getLogger(__name__)


def _is_private(module_name: str) -> bool:
    return module_name.rsplit(".", 1)[-1].startswith("_")


def iter_router_modules(base_package: str, exclude: Iterable[str] = ()) -> Iterator[ModuleType]:
    """Import and yield the modules under ``base_package`` that define a ``router``."""
    package = importlib.import_module(base_package)
    if not hasattr(package, "__path__"):
        raise RuntimeError(f"'{base_package}' is not a package")

    skip = set(exclude)
    for info in pkgutil.walk_packages(package.__path__, prefix=f"{base_package}."):
        if _is_private(info.name) or skip.intersection(info.name.split(".")):
            continue
        # an import error here is a bug in a router module; let it surface
        module = importlib.import_module(info.name)
        if isinstance(getattr(module, "router", None), APIRouter):
            yield module


def register_all_routers(
        app: FastAPI,
        *,
        base_package: Optional[str] = None,
        prefix: str = "",
        exclude: Iterable[str] = (),
) -> list[str]:
    """Mount every discovered router on ``app`` and return the module names mounted."""
    mounted: list[str] = []
    for module in iter_router_modules(base_package or __name__, exclude):
        module_prefix = prefix.rstrip("/") + getattr(module, "ROUTER_PREFIX", "")
        tag = getattr(module, "ROUTER_TAG", None)
        app.include_router(
            module.router,
            prefix=module_prefix,
            tags=[tag] if tag else None,
            include_in_schema=getattr(module, "INCLUDE_ROUTER_IN_SCHEMA", True),
        )
        mounted.append(module.__name__)
        logger.debug("Mounted %s at '%s'", module.__name__, module_prefix or "/")
    return mounted


__all__ = ["iter_router_modules", "register_all_routers"]
