"""
Component registry for the Wikidict linker.

Document loaders and surface-form dictionaries are looked up by the name
given in the pipeline config. The linker itself is a spaCy factory
(see spacy_components/).
"""

from typing import Any, Callable, Dict, List, TypeVar

T = TypeVar("T")


class ComponentRegistry:
    """Name -> factory table for one kind of component."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._factories: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            if name in self._factories:
                raise ValueError(f"{self.kind} '{name}' already registered.")
            self._factories[name] = factory
            return factory

        return decorator

    def get(self, name: str) -> Callable[..., Any]:
        try:
            return self._factories[name]
        except KeyError as exc:
            raise KeyError(
                f"{self.kind} '{name}' not found. Available: {', '.join(self.names())}"
            ) from exc

    def create(self, name: str, **params: Any) -> Any:
        """Instantiate the component registered under ``name``."""
        return self.get(name)(**params)

    def names(self) -> List[str]:
        return sorted(self._factories)


loaders = ComponentRegistry("Loader")
knowledge_bases = ComponentRegistry("Dictionary")
