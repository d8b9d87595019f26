"""Train a 2-4-1 network on XOR from random binary pairs and print progress."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Iterable


def main(argv: Iterable[str] | None = None) -> int:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    import numpy as np

    from unitnet import ActivationKind, Network

    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--learning-rate", type=float, default=0.1)
    ap.add_argument("--momentum", type=float, default=0.5)
    ap.add_argument(
        "--hidden-activation",
        default="linear",
        choices=[kind.name.lower() for kind in ActivationKind],
    )
    ap.add_argument("--session-length", type=int, default=50)
    ap.add_argument("--target-loss", type=float, default=0.05)
    ap.add_argument("--max-sessions", type=int, default=5000)
    ap.add_argument("--save", type=Path, help="Write the trained network to this file")
    args = ap.parse_args(argv)

    rng = np.random.default_rng(args.seed)
    nn = Network(
        (2, 4, 1),
        learning_rate=args.learning_rate,
        momentum=args.momentum,
        rng=rng,
        hidden_activation=ActivationKind.coerce(args.hidden_activation),
        output_activation=ActivationKind.SIGMOID,
    )
    nn.initialize()

    loss = float("inf")
    examples = 0
    sessions = 0
    start = time.perf_counter_ns()
    while loss > args.target_loss and sessions < args.max_sessions:
        loss = 0.0
        avg_ns = 0.0
        for _ in range(args.session_length):
            tick = time.perf_counter_ns()
            inputs = [float(v) for v in rng.integers(0, 2, size=2)]
            expected = [float(int(inputs[0]) ^ int(inputs[1]))]
            output = nn.train_step(inputs, expected)[0]
            loss += (output - expected[0]) ** 2 / args.session_length
            avg_ns += (time.perf_counter_ns() - tick) / args.session_length
        examples += args.session_length
        sessions += 1
        print(
            f"Examples: {examples:5d} | MSE: {loss:6.4f} | "
            f"Average Time per Example: {avg_ns:6.0f}ns or {avg_ns / 1e6:.4f}ms"
        )

    for _ in range(10):
        a, b = (int(v) for v in rng.integers(0, 2, size=2))
        output = nn.predict([a, b])[0]
        print(f"XOR Operation: {a} XOR {b} == {output:3.2f}")

    elapsed = time.perf_counter_ns() - start
    print(f"\nTime to complete training and examples: {elapsed:.0f}ns or {elapsed / 1e6:.2f}ms")

    if args.save:
        print(f"Saved network to {nn.save(args.save)}")
    return 0 if loss <= args.target_loss else 1


if __name__ == "__main__":
    raise SystemExit(main())
