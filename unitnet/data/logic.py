"""Truth-table datasets for logic gates over binary input vectors."""

from __future__ import annotations

import itertools
from typing import Callable, Dict, Sequence

from ..core.types import Example
from .registry import DataSpec, DatasetSpec, register_dataset

GateFn = Callable[[Sequence[int]], int]

GATES: Dict[str, GateFn] = {
    # n-bit XOR is odd parity.
    "xor": lambda bits: sum(bits) % 2,
    "and": lambda bits: int(all(bits)),
    "or": lambda bits: int(any(bits)),
    "nand": lambda bits: int(not all(bits)),
}


def truth_table(gate: str, bits: int = 2) -> list[Example]:
    """Every binary input vector of length ``bits`` with its gate output."""

    if bits < 1:
        raise ValueError(f"bits must be positive, got {bits}")
    fn = GATES[gate]
    return [
        Example(inputs=tuple(float(b) for b in combo), targets=(float(fn(combo)),))
        for combo in itertools.product((0, 1), repeat=bits)
    ]


def _make_factory(gate: str):
    def _factory(bits: int = 2, **_: object) -> DatasetSpec:
        bits = int(bits)
        examples = truth_table(gate, bits)
        return DatasetSpec(
            name=gate,
            examples=examples,
            data_spec=DataSpec(d_in=bits, d_out=1, task_type="binary"),
            provenance={"type": "logic", "gate": gate, "bits": bits},
        )

    _factory.__name__ = f"make_{gate}"
    return _factory


for _gate in GATES:
    register_dataset(_gate, _make_factory(_gate))


@register_dataset("table")
def make_table(
    inputs: Sequence[Sequence[float]] = (),
    targets: Sequence[Sequence[float]] = (),
    task_type: str = "regression",
    **_: object,
) -> DatasetSpec:
    """Build a dataset from an inline table, e.g. straight from a JSON config."""

    if len(inputs) != len(targets):
        raise ValueError(f"table has {len(inputs)} input rows but {len(targets)} target rows")
    examples = [
        Example(inputs=tuple(float(v) for v in row), targets=tuple(float(v) for v in target))
        for row, target in zip(inputs, targets)
    ]
    d_in = len(examples[0].inputs) if examples else 0
    d_out = len(examples[0].targets) if examples else 0
    return DatasetSpec(
        name="table",
        examples=examples,
        data_spec=DataSpec(d_in=d_in, d_out=d_out, task_type=task_type),
        provenance={"type": "table", "rows": len(examples)},
    )


__all__ = ["GATES", "make_table", "truth_table"]
