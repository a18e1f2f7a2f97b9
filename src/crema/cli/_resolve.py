"""App import resolution — resolves ``"module:attribute"`` strings to App instances.

Shared by ``crema run`` and ``crema routes``.
"""

import importlib

from crema.app import App


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a crema App instance.

    Accepts ``"module:attribute"``; the attribute defaults to ``"app"``.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a crema ``App``.

    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a crema.App instance"
        raise TypeError(msg)

    return obj
