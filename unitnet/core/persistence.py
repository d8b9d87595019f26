"""Flat text persistence for unitnet networks.

One line per layer, top to bottom. Each unit is written as a record
terminated by ``|``::

    <activation>,<bias>|<activation>,<bias>|                  (input layer)
    <activation>,<bias>,<w0>,<w1>,...|<activation>,...|       (other layers)

Weights are listed in predecessor order. Input-layer records carry a bias
that is never trained but is kept so files round-trip. Floats are written
with :func:`repr`, which is the shortest text that reads back to the same
value.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence

from .activations import ActivationKind
from .errors import NotInitializedError, ParseError
from .unit import Unit

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .network import Network

logger = logging.getLogger(__name__)

RECORD_SEP = "|"
FIELD_SEP = ","


def _format_float(value: float) -> str:
    return repr(float(value))


def format_unit(unit: Unit, *, with_weights: bool) -> str:
    fields = [str(int(unit.activation)), _format_float(unit.bias)]
    if with_weights:
        fields.extend(_format_float(w) for w in unit.weights)
    return FIELD_SEP.join(fields)


def format_layers(layers: Sequence[Sequence[Unit]]) -> str:
    lines = []
    for idx, layer in enumerate(layers):
        records = [format_unit(unit, with_weights=idx > 0) for unit in layer]
        lines.append(RECORD_SEP.join(records) + RECORD_SEP)
    return "\n".join(lines) + "\n"


def format_network(network: "Network") -> str:
    """Return the text form of ``network``."""

    if not network.initialized:
        raise NotInitializedError("Cannot serialise a network before it is initialised")
    return format_layers(network.layers)


def _parse_float(text: str, what: str, line: int) -> float:
    try:
        return float(text)
    except ValueError as exc:
        raise ParseError(f"invalid {what} {text.strip()!r}", line=line) from exc


def _parse_activation(text: str, line: int) -> ActivationKind:
    try:
        return ActivationKind(int(text))
    except ValueError as exc:
        raise ParseError(f"invalid activation code {text.strip()!r}", line=line) from exc


def _parse_record(record: str, line: int, n_weights: int | None) -> Unit:
    fields = record.split(FIELD_SEP)
    if len(fields) < 2:
        raise ParseError(f"record {record!r} needs an activation and a bias", line=line)
    kind = _parse_activation(fields[0], line)
    bias = _parse_float(fields[1], "bias", line)
    weight_fields = fields[2:]
    if n_weights is None:
        if weight_fields:
            raise ParseError("input-layer records must not carry weights", line=line)
        return Unit(kind, bias=bias)
    if len(weight_fields) != n_weights:
        raise ParseError(
            f"expected {n_weights} weights (one per predecessor unit), got {len(weight_fields)}",
            line=line,
        )
    weights = [_parse_float(field, "weight", line) for field in weight_fields]
    return Unit(kind, weights=weights, bias=bias)


def parse_layers(text: str) -> List[List[Unit]]:
    """Parse ``text`` into fresh, unwired layers of units.

    Nothing outside the returned lists is touched, so a failed parse never
    leaves a network half-loaded.
    """

    layers: List[List[Unit]] = []
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        records = line.split(RECORD_SEP)
        if records[-1] == "":
            records.pop()
        if not records or any(not record.strip() for record in records):
            raise ParseError("empty unit record", line=line_no)
        n_weights = len(layers[-1]) if layers else None
        layers.append([_parse_record(record.strip(), line_no, n_weights) for record in records])

    if len(layers) < 2:
        raise ParseError(f"a network needs at least 2 layers, found {len(layers)}")
    return layers


def save(network: "Network", path: str | Path) -> str:
    """Write ``network`` to ``path`` and return the path as a string."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_network(network), encoding="utf-8")
    logger.debug("Saved network %s to %s", network.layer_sizes, path)
    return str(path)


def read_layers(path: str | Path) -> List[List[Unit]]:
    path = Path(path)
    layers = parse_layers(path.read_text(encoding="utf-8"))
    logger.debug("Loaded network %s from %s", [len(layer) for layer in layers], path)
    return layers


__all__ = [
    "format_layers",
    "format_network",
    "format_unit",
    "parse_layers",
    "read_layers",
    "save",
]
