from typing import Any, Callable, Dict, ItemsView, Iterator, KeysView, Type, TypeVar

T = TypeVar("T")


class Registry:
    """A name-to-class registry. Tools and LLM providers register themselves here at import time."""

    def __init__(self, name: str):
        """
        Initializes the registry.

        Args:
            name: The name of the registry (e.g., "tool", "provider").
        """
        self._name = name
        self._components: Dict[str, Type[Any]] = {}

    def register(self, name: str) -> Callable[[Type[T]], Type[T]]:
        """
        A decorator to register a class with a given name.

        The name is also stored on the class as ``registry_name`` so that
        tools can be exposed to the model under the name they were registered with.

        Raises:
            ValueError: If the name is already registered.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if name in self._components:
                raise ValueError(f"Component '{name}' already registered in '{self._name}' registry.")
            self._components[name] = cls
            setattr(cls, "registry_name", name)
            return cls
        return decorator

    def unregister(self, name: str) -> None:
        self._components.pop(name, None)

    def get(self, name: str) -> Type[Any]:
        """
        Retrieves a class by its name.

        Raises:
            KeyError: If the name is not registered.
        """
        if name not in self._components:
            raise KeyError(f"Component '{name}' not found in '{self._name}' registry.")
        return self._components[name]

    def create(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Instantiates a component by its name, passing the arguments to its constructor."""
        component_class = self.get(name)
        return component_class(*args, **kwargs)

    def __contains__(self, name: str) -> bool:
        return name in self._components

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def keys(self) -> KeysView[str]:
        return self._components.keys()

    def items(self) -> ItemsView[str, Type[Any]]:
        return self._components.items()


tool_registry = Registry("tool")
provider_registry = Registry("provider")
