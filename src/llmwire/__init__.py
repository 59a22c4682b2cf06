"""llmwire — canonical conversation adapters for Chat Completions and Messages APIs."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from llmwire.core.interface.client import ModelClient as ModelClient
    from llmwire.core.interface.config import ModelConfig as ModelConfig

_INTERFACE_EXPORTS = {
    "ModelClient": "llmwire.core.interface.client",
    "ModelConfig": "llmwire.core.interface.config",
}


def __getattr__(name: str) -> object:
    module_path = _INTERFACE_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'llmwire' has no attribute {name!r}")
