# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "orbitjax"]
#
# [tool.uv.sources]
# orbitjax = { path = ".." }
# ///
"""Propagate a catalog of TLEs with SGP4/SDP4 in one vectorized call.

Reads a TLE file (two-line or three-line format), initializes every element
set, stacks the parameter arrays and propagates all satellites over a time
grid with ``vmap`` over satellites and times. Near-earth and deep-space
satellites share one batch through ``sgp4_propagate_unified``.

Usage:
    uv run examples/propagate.py CATALOG.tle [OPTIONS]

Examples:
    # One day at 60 s steps
    uv run examples/propagate.py active.tle --timestep 60 --duration 1.0

    # AFSPC-compatible operation mode with WGS-84 constants
    uv run examples/propagate.py active.tle --opsmode a --gravity wgs84
"""

import collections
import sys
import time
from pathlib import Path
from typing import Annotated

import jax
import jax.numpy as jnp
import typer

from orbitjax import set_dtype
from orbitjax.sgp4 import (
    Regime,
    SGP4ErrorCode,
    parse_tle,
    sgp4_init,
    sgp4_propagate_unified,
)

set_dtype(jnp.float64)  # Must be before any JIT compilation


def _read_tle_pairs(path: Path) -> list[tuple[str, str]]:
    """Collect consecutive ``1 ...`` / ``2 ...`` line pairs, skipping name lines."""
    lines = [line.rstrip() for line in path.read_text().splitlines() if line.strip()]
    pairs = []
    for first, second in zip(lines, lines[1:]):
        if first.startswith("1 ") and second.startswith("2 "):
            pairs.append((first, second))
    return pairs


def main(
    catalog: Annotated[Path, typer.Argument(help="TLE file", exists=True, dir_okay=False)],
    timestep: Annotated[float, typer.Option(help="Propagation timestep in seconds")] = 60.0,
    duration: Annotated[float, typer.Option(help="Propagation duration in days")] = 1.0,
    gravity: Annotated[str, typer.Option(help="Gravity model (wgs72, wgs72old, wgs84)")] = "wgs72",
    opsmode: Annotated[str, typer.Option(help="Operation mode (i or a)")] = "i",
) -> None:
    """Propagate every satellite in a TLE file with SGP4/SDP4."""
    devices = jax.devices()
    print(f"JAX devices: {len(devices)} x {devices[0].platform.upper()}")

    # ── Stage 1: Parse and initialize ────────────────────────────────────
    print(f"\n── Stage 1: Initializing element sets from {catalog} ──")
    t0 = time.perf_counter()

    params_list: list[jax.Array] = []
    satnums: list[str] = []
    n_malformed = 0
    n_deep_space = 0
    for line1, line2 in _read_tle_pairs(catalog):
        try:
            elements = parse_tle(line1, line2)
        except ValueError as exc:
            print(f"  Skipping malformed TLE: {exc}")
            n_malformed += 1
            continue
        init = sgp4_init(elements, gravity, opsmode)
        params_list.append(init.params)
        satnums.append(elements.satnum_str)
        n_deep_space += init.regime == Regime.DEEP_SPACE

    n_sats = len(params_list)
    if n_sats == 0:
        print("ERROR: No element sets initialized. Exiting.")
        sys.exit(1)

    params_all = jnp.stack(params_list)
    print(
        f"  Initialized {n_sats} satellites ({n_sats - n_deep_space} near-earth, "
        f"{n_deep_space} deep-space) in {time.perf_counter() - t0:.1f}s"
    )
    if n_malformed:
        print(f"  Malformed: {n_malformed}")

    # ── Stage 2: Vectorized propagation ──────────────────────────────────
    print("\n── Stage 2: Propagating (JIT + vmap) ──")
    duration_minutes = duration * 24.0 * 60.0
    tsince = jnp.arange(0.0, duration_minutes, timestep / 60.0)
    n_steps = tsince.shape[0]
    print(f"  Timesteps: {n_steps}")

    def _single(params, t):
        result, _ = sgp4_propagate_unified(params, t)
        return result

    propagate_batch = jax.jit(
        jax.vmap(jax.vmap(_single, in_axes=(None, 0)), in_axes=(0, None))
    )

    t0 = time.perf_counter()
    result = propagate_batch(params_all, tsince)
    result.r.block_until_ready()
    elapsed = time.perf_counter() - t0

    total = n_sats * n_steps
    print(f"  {total:,} evaluations in {elapsed:.2f}s (including compilation)")
    if elapsed > 0:
        print(f"  Throughput: {total / elapsed:,.0f} propagations/s")

    # ── Stage 3: Error summary ───────────────────────────────────────────
    print("\n── Stage 3: Error summary ──")
    failed_at = jnp.argmax(result.error != 0, axis=1)
    first_error = result.error[jnp.arange(n_sats), failed_at]
    counts = collections.Counter(int(code) for code in first_error if int(code) != 0)
    if not counts:
        print("  All satellites propagated without error.")
    for code, count in sorted(counts.items()):
        print(f"  code {code} ({SGP4ErrorCode(code).message}): {count} satellites")
    for idx in range(n_sats):
        code = int(first_error[idx])
        if code:
            print(f"    {satnums[idx]}: code {code} at t={float(tsince[failed_at[idx]]):.1f} min")

    print("\nDone.")


if __name__ == "__main__":
    typer.run(main)
