from typing import Dict, Iterator, List

from .errors import DuplicateModelError, ModelNotRegisteredError


class ModelRegistry:
    """
    Name -> model mapping owned by one facade.

    Supports:
    - register(name, model), refusing duplicates
    - get(name) → model
    - clear() for test isolation
    """

    def __init__(self):
        self._models: Dict[str, object] = {}

    def register(self, name: str, model):
        if name in self._models:
            raise DuplicateModelError(name)

        self._models[name] = model
        return model

    def get(self, name: str):
        try:
            return self._models[name]
        except KeyError:
            raise ModelNotRegisteredError(f"Model not registered: '{name}'") from None

    def names(self) -> List[str]:
        return list(self._models)

    def models(self) -> List:
        return list(self._models.values())

    def clear(self) -> None:
        """Forget every model. Only meant to isolate test runs."""
        self._models = {}

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._models))

    def __len__(self) -> int:
        return len(self._models)
