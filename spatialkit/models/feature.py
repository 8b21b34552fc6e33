"""Features and feature collections.

A Feature pairs a geometry with scalar attributes. Appending a measurement
produces a new Feature; nothing is mutated in place, so a collection can be
traced back to the layer it was loaded from.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from spatialkit.errors import CRSMismatchError
from spatialkit.models.crs import CRS, get_crs
from spatialkit.models.geometry import Point, Polygon

AttributeValue = str | int | float | bool | None


class Feature(BaseModel):
    """A geometry with its attribute values.

    Attributes:
        geometry: Point or Polygon
        attributes: Attribute name to scalar value
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    geometry: Point | Polygon = Field(description="Feature geometry")
    attributes: dict[str, Any] = Field(default_factory=dict, description="Attribute values")

    @property
    def crs(self) -> CRS:
        return self.geometry.crs

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def with_attributes(self, **values: AttributeValue) -> "Feature":
        """Return a new Feature with extra or replaced attributes."""
        return Feature(geometry=self.geometry, attributes={**self.attributes, **values})

    def with_geometry(self, geometry: Point | Polygon) -> "Feature":
        """Return a new Feature with the same attributes and another geometry."""
        return Feature(geometry=geometry, attributes=dict(self.attributes))


@dataclass(frozen=True)
class FeatureCollection:
    """An ordered sequence of Features sharing one CRS.

    Raises:
        CRSMismatchError: If any feature's CRS differs from the collection CRS
    """

    features: tuple[Feature, ...]
    crs: CRS

    def __post_init__(self):
        crs = get_crs(self.crs)
        features = tuple(self.features)
        for index, feature in enumerate(features):
            if feature.crs != crs:
                msg = (
                    f"Feature {index} is in {feature.crs}, "
                    f"but the collection is in {crs}"
                )
                raise CRSMismatchError(msg)
        object.__setattr__(self, "features", features)
        object.__setattr__(self, "crs", crs)

    @classmethod
    def from_geometries(
        cls,
        geometries: Sequence[Point | Polygon],
        attributes: Sequence[dict[str, Any]] | None = None,
        crs: CRS | int | str | None = None,
    ) -> "FeatureCollection":
        """Build a collection from geometries and optional per-row attributes."""
        if crs is None:
            if not geometries:
                msg = "crs is required for an empty collection"
                raise ValueError(msg)
            crs = geometries[0].crs
        if attributes is None:
            attributes = [{} for _ in geometries]
        if len(attributes) != len(geometries):
            msg = f"Got {len(geometries)} geometries but {len(attributes)} attribute rows"
            raise ValueError(msg)
        features = tuple(
            Feature(geometry=g, attributes=dict(a)) for g, a in zip(geometries, attributes)
        )
        return cls(features, get_crs(crs))

    @classmethod
    def empty(cls, crs: CRS | int | str) -> "FeatureCollection":
        return cls((), get_crs(crs))

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return FeatureCollection(self.features[index], self.crs)
        return self.features[index]

    @property
    def geometries(self) -> list[Point | Polygon]:
        return [f.geometry for f in self.features]

    @property
    def columns(self) -> list[str]:
        """Attribute names in first-seen order."""
        seen: dict[str, None] = {}
        for feature in self.features:
            for name in feature.attributes:
                seen.setdefault(name, None)
        return list(seen)

    @property
    def bounds(self) -> tuple[float, float, float, float] | None:
        if not self.features:
            return None
        all_bounds = [f.geometry.bounds for f in self.features]
        return (
            min(b[0] for b in all_bounds),
            min(b[1] for b in all_bounds),
            max(b[2] for b in all_bounds),
            max(b[3] for b in all_bounds),
        )

    def column(self, name: str) -> list[Any]:
        """Values of one attribute (None where a feature lacks it)."""
        return [f.attributes.get(name) for f in self.features]

    def with_column(self, name: str, values: Iterable[AttributeValue]) -> "FeatureCollection":
        """Return a new collection with one attribute appended or replaced."""
        values = list(values)
        if len(values) != len(self.features):
            msg = f"Column '{name}' has {len(values)} values for {len(self.features)} features"
            raise ValueError(msg)
        features = tuple(
            f.with_attributes(**{name: v}) for f, v in zip(self.features, values)
        )
        return FeatureCollection(features, self.crs)

    def map_geometries(
        self,
        func: Callable[[Point | Polygon], Point | Polygon],
        crs: CRS | int | str | None = None,
    ) -> "FeatureCollection":
        """Apply ``func`` to every geometry, keeping attributes and order."""
        target = get_crs(crs) if crs is not None else self.crs
        features = tuple(f.with_geometry(func(f.geometry)) for f in self.features)
        return FeatureCollection(features, target)

    def take(self, indices: Iterable[int]) -> "FeatureCollection":
        """Sub-collection of the given positions, in the order given."""
        return FeatureCollection(tuple(self.features[i] for i in indices), self.crs)

    def to_frame(self, include_geometry_type: bool = False) -> pd.DataFrame:
        """Attributes as a DataFrame, one row per feature."""
        df = pd.DataFrame(
            [dict(f.attributes) for f in self.features],
            columns=self.columns,
        )
        if include_geometry_type:
            df["geometry_type"] = [f.geometry.geom_type for f in self.features]
        return df
