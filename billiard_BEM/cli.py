from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Sequence

import numpy as np

from billiard_BEM.geometry import square_billiard_nodes
from billiard_BEM.matrix_assembly import (DEFAULT_WORKERS, OperatorAssembler,
                                          print_matrix)
from billiard_BEM.spectrum import compute_spectrum

LOG = logging.getLogger(__name__)

DEFAULT_N = 24
DEFAULT_SIDE = 1.0
DEFAULT_K = 2.5
DEFAULT_NORMAL_SCALE = 0.1
DEFAULT_THRESHOLD = 1e-2


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="billiard-bem",
        description=(
            "Assemble the 2D Helmholtz double-layer BEM operator for the "
            "square billiard and print it, or scan a wavenumber range for "
            "resonances."
        ),
    )
    p.add_argument("--n", type=int, default=DEFAULT_N,
                   help="Number of boundary nodes (multiple of 4).")
    p.add_argument("--side", type=float, default=DEFAULT_SIDE,
                   help="Side length of the square.")
    p.add_argument("--k", type=float, default=DEFAULT_K,
                   help="Wavenumber of the single assembly.")
    p.add_argument("--workers", type=int, default=DEFAULT_WORKERS,
                   help="Thread pool size for the row-parallel assembly.")
    p.add_argument("--plot", type=Path, default=None,
                   help="Save a plot of the nodes and normals to this file.")
    p.add_argument("--normal-scale", type=float, default=DEFAULT_NORMAL_SCALE,
                   help="Length of the normal arrows in --plot.")
    p.add_argument("--scan", type=float, nargs=3, default=None,
                   metavar=("KMIN", "KMAX", "NPTS"),
                   help="Scan sigma_min over NPTS wavenumbers in [KMIN, KMAX] "
                        "instead of printing the matrix.")
    p.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD,
                   help="Largest sigma_min accepted as a resonance.")
    p.add_argument("--log-level", default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv: Sequence[str] | None = None) -> int:
    p = build_argparser()
    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(message)s",
    )

    try:
        nodes = square_billiard_nodes(args.side, args.n)
        assembler = OperatorAssembler(workers=args.workers)
    except ValueError as exc:
        p.error(str(exc))

    if args.plot is not None:
        import matplotlib.pyplot as plt
        from billiard_BEM.plotting import plot_nodes
        fig = plot_nodes(str(args.plot), nodes, args.normal_scale)
        plt.close(fig)
        LOG.info("Saved node plot to %s", args.plot)

    start = time.perf_counter()
    if args.scan is None:
        A = assembler.assemble(args.k, nodes)
        print_matrix(A)
        LOG.info("Assembled %dx%d operator in %.3f s",
                 nodes.num_nodes, nodes.num_nodes,
                 time.perf_counter() - start)
        return 0

    kmin, kmax, npts = args.scan
    if int(npts) != npts or npts < 1:
        p.error(f"NPTS must be a positive integer, got {npts}")
    try:
        scan, resonances = compute_spectrum(
            nodes, np.linspace(kmin, kmax, int(npts)), args.threshold,
            assembler=assembler)
    except ValueError as exc:
        p.error(str(exc))

    for k, s in scan.pairs():
        print(f"{k:.8f}  {s:.6e}")
    for r in resonances:
        LOG.info("Resonance candidate k=%.8f sigma_min=%.3e",
                 r.k, r.sigma_min)
    LOG.info("Scanned %d wavenumbers in %.3f s", len(scan),
             time.perf_counter() - start)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
