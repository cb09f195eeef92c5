"""Name-to-module lookup injected into the runner and the API."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from tool_gateway.modules.base import Module


class ModuleRegistry:
    def __init__(self, modules: Iterable[Module] | None = None) -> None:
        self._modules: dict[str, Module] = {}
        for module in modules or ():
            self.register(module)

    def register(self, module: Module) -> None:
        self._modules[module.name] = module

    def get(self, name: str) -> Module | None:
        return self._modules.get(name)

    def names(self) -> list[str]:
        return sorted(self._modules)

    def restricted_to(self, names: Iterable[str] | None) -> ModuleRegistry:
        """Return a registry holding only the given modules.

        ``None`` keeps every module; names that are not registered are ignored.
        """
        if names is None:
            return ModuleRegistry(self._modules.values())
        return ModuleRegistry(
            self._modules[name] for name in names if name in self._modules
        )

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)
