"""Benchmark: snapshot lookup and search latency (p50/p95/mean)."""
from __future__ import annotations

import json
import sys
import time
from collections.abc import Callable
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atpexplorer.registry.snapshot import RegistrySnapshot
from atpexplorer.schema.identity import Identity

_REGISTRY_SIZE: int = 5_000
_WARMUP: int = 100
_ITERATIONS: int = 3_000


def _synthetic_snapshot(size: int = _REGISTRY_SIZE) -> RegistrySnapshot:
    identities = [
        Identity(
            name=f"agent-{i}",
            description=f"synthetic agent number {i}",
            gpg_fingerprint=f"{i:040X}",
            platforms={"twitter": f"agent_{i}", "github": f"agent-{i}"},
            wallets={"btc": f"1Addr{i:030d}"},
        )
        for i in range(size)
    ]
    return RegistrySnapshot.from_identities(identities)


def _measure(operation: str, call: Callable[[int], object]) -> dict[str, object]:
    for i in range(_WARMUP):
        call(i)

    latencies_ms: list[float] = []
    for i in range(_ITERATIONS):
        t0 = time.perf_counter()
        call(i)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000
    result: dict[str, object] = {
        "operation": operation,
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1) if total else 0.0,
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_ms": round(sorted_lats[int(n * 0.50)], 4),
        "p95_ms": round(sorted_lats[min(int(n * 0.95), n - 1)], 4),
    }
    print(
        f"[bench_latency] {operation}: "
        f"p50={result['p50_ms']:.4f}ms  p95={result['p95_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def bench_fingerprint_lookup_latency(size: int = _REGISTRY_SIZE) -> dict[str, object]:
    """Benchmark short-form fingerprint lookups against a synthetic snapshot."""
    snapshot = _synthetic_snapshot(size)
    return _measure(
        "fingerprint_lookup_latency",
        lambda i: snapshot.get_by_fingerprint(f"{i % size:040X}"[-8:]),
    )


def bench_search_latency(size: int = _REGISTRY_SIZE) -> dict[str, object]:
    """Benchmark substring search (full scan) against a synthetic snapshot."""
    snapshot = _synthetic_snapshot(size)
    return _measure("search_latency", lambda i: snapshot.search(f"agent_{i % size}"))


if __name__ == "__main__":
    results = [bench_fingerprint_lookup_latency(), bench_search_latency()]
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(results, fh, indent=2)
    print(f"Results saved to {output_path}")
