"""Modules that ship with the gateway."""

from tool_gateway.modules.builtin.notes import NotesModule, NotesStore
from tool_gateway.modules.builtin.text import TextModule
from tool_gateway.modules.registry import ModuleRegistry


def build_default_registry() -> ModuleRegistry:
    return ModuleRegistry([TextModule(), NotesModule()])


__all__ = ["NotesModule", "NotesStore", "TextModule", "build_default_registry"]
