"""Brand and BrandCatalog - master data for known brand/model combinations."""

from typing import Dict, Iterable, List, Optional

from .guard import not_blank


class Brand:
    """A vehicle brand with its set of model names (case-insensitive)."""

    def __init__(self, name: str, models: Optional[Iterable[str]] = None):
        self.name = not_blank(name, "Brand name")
        # lower-cased key -> name as first entered
        self._models: Dict[str, str] = {}
        for model in models or []:
            self.add_model(model)

    @property
    def models(self) -> List[str]:
        return list(self._models.values())

    def add_model(self, model: str) -> bool:
        """Add a model name. Returns False if it was already present."""
        model = not_blank(model, "Model name")
        key = model.lower()
        if key in self._models:
            return False
        self._models[key] = model
        return True

    def remove_model(self, model: str) -> bool:
        model = not_blank(model, "Model name")
        return self._models.pop(model.lower(), None) is not None

    def has_model(self, model: str) -> bool:
        if model is None:
            return False
        return model.strip().lower() in self._models


class BrandCatalog:
    """Registry of brands keyed case-insensitively by name."""

    def __init__(self):
        self._brands: Dict[str, Brand] = {}

    @property
    def brands(self) -> List[Brand]:
        return list(self._brands.values())

    def get_brand(self, name: str) -> Optional[Brand]:
        if name is None:
            return None
        return self._brands.get(name.strip().lower())

    def add_brand(self, name: str) -> Brand:
        """Register a brand. Adding an existing brand is a no-op."""
        name = not_blank(name, "Brand name")
        key = name.lower()
        if key not in self._brands:
            self._brands[key] = Brand(name)
        return self._brands[key]

    def add_model(self, brand_name: str, model: str) -> bool:
        """
        Register a model under a brand, creating the brand if needed.

        Returns False if the model was already registered.
        """
        model = not_blank(model, "Model name")
        return self.add_brand(brand_name).add_model(model)

    def remove_brand(self, name: str) -> bool:
        name = not_blank(name, "Brand name")
        return self._brands.pop(name.lower(), None) is not None

    def remove_model(self, brand_name: str, model: str) -> bool:
        brand_name = not_blank(brand_name, "Brand name")
        model = not_blank(model, "Model name")
        brand = self.get_brand(brand_name)
        if brand is None:
            return False
        return brand.remove_model(model)

    def is_known_model(self, brand_name: str, model: str) -> bool:
        brand = self.get_brand(brand_name)
        return brand is not None and brand.has_model(model)
