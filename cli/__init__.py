"""Command line client for the SmartGarden service."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer instance stays in ``cli.app`` so that the module path remains
# patchable (tests replace ``cli.app.ApiClient``).

__all__ = []
