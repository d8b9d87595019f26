"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, MutableMapping, Sequence

import numpy as np

from ..core.types import Example

TASK_TYPES = ("regression", "binary")


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Number of input values per example; must match the input layer.
    d_out:
        Number of target values per example; must match the output layer.
    task_type:
        One of ``{"regression", "binary"}``. Binary targets are 0/1 and are
        scored by thresholding the outputs at 0.5.
    extra:
        Free-form metadata that is copied into run manifests.
    """

    d_in: int
    d_out: int
    task_type: str
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """A finite table of examples registered under ``name``."""

    name: str
    examples: Sequence[Example]
    data_spec: DataSpec
    provenance: Dict[str, Any]

    def sample(self, rng: np.random.Generator) -> Example:
        """Draw one example uniformly at random."""

        return self.examples[int(rng.integers(len(self.examples)))]

    def stream(self, rng: np.random.Generator, count: int) -> Iterator[Example]:
        for _ in range(count):
            yield self.sample(rng)

    def __len__(self) -> int:
        return len(self.examples)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str | None = None, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset is None:
        if "name" in options:
            dataset = str(options.pop("name"))
        else:
            raise TypeError("Dataset name must be provided")

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.data_spec.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type: {spec.data_spec.task_type}")
    if not spec.examples:
        raise ValueError(f"Dataset {spec.name!r} has no examples")
    for example in spec.examples:
        if len(example.inputs) != spec.data_spec.d_in:
            raise ValueError(
                f"Dataset {spec.name!r}: example has {len(example.inputs)} inputs, "
                f"expected {spec.data_spec.d_in}"
            )
        if len(example.targets) != spec.data_spec.d_out:
            raise ValueError(
                f"Dataset {spec.name!r}: example has {len(example.targets)} targets, "
                f"expected {spec.data_spec.d_out}"
            )


__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
