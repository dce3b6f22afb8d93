"""Locate the App a ``perch`` command operates on.

``perch routes`` and ``perch run`` both take a ``module[:attribute]``
string. The app is imported, built when the attribute is a factory, and
frozen here, so a bad import string and a bad route registration both
surface as ``ConfigurationError`` before the command does any work.
"""

import importlib

from perch.app import App
from perch.errors import ConfigurationError

DEFAULT_ATTRIBUTE = "app"


def split_import_string(import_string: str) -> tuple[str, str]:
    """Split ``"module:attribute"``; the attribute defaults to ``app``."""
    module_name, sep, attribute = import_string.partition(":")
    if not module_name or (sep and not attribute):
        msg = f"Expected 'module' or 'module:attribute', got {import_string!r}."
        raise ConfigurationError(msg)
    return module_name, attribute or DEFAULT_ATTRIBUTE


def load_app(import_string: str) -> App:
    """Import, build, and freeze the App named by *import_string*.

    A callable that is not an App is treated as a factory and called
    with no arguments. Errors raised while importing the module's own
    dependencies, or from inside a factory, propagate unchanged.
    """
    module_name, attribute = split_import_string(import_string)
    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        if exc.name is None or not (module_name + ".").startswith(exc.name + "."):
            raise
        msg = f"Cannot import {module_name!r}: no such module."
        raise ConfigurationError(msg) from exc

    target = getattr(module, attribute, None)
    if target is None:
        msg = f"Module {module_name!r} has no attribute {attribute!r}."
        raise ConfigurationError(msg)
    if callable(target) and not isinstance(target, App):
        target = target()
    if not isinstance(target, App):
        msg = f"{import_string!r} is a {type(target).__name__}, not a perch App."
        raise ConfigurationError(msg)

    target.freeze()
    return target
