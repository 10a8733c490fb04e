import logging
import os
import time

import numpy as np

from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from tqdm import tqdm

from billiard_BEM.geometry import Nodes
from billiard_BEM.kernels import JUMP_VALUE, Kernel, as_kernel

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = os.cpu_count() or 1


class OperatorAssembler:
    """
    Dense collocation assembler for the 2D Helmholtz double-layer operator.

    Entry (i, j) of the assembled matrix is

        A_ij = c δ_ij + K(x_i, n_i, x_j; k) w_j

    where c is the diagonal jump term, K the kernel and w_j the quadrature
    weight of the source node. Rows are independent; they are split into
    contiguous blocks which are filled concurrently, each block writing only
    into its own view of the output matrix.
    """

    def __init__(self,
                 kernel: Kernel | Callable | None = None,
                 workers: int | None = None,
                 diagonal_jump: float = JUMP_VALUE):
        """
        Initialize the assembler.

        Args:
            kernel (Kernel | Callable | None, optional): Kernel to integrate.
                A plain function f(x, n, y, k) is accepted as well. Defaults
                to the double-layer kernel.
            workers (int | None, optional): Size of the thread pool. Defaults
                to the number of CPUs.
            diagonal_jump (float, optional): Value added to every diagonal
                entry. Defaults to -0.5.
        """
        self.kernel = as_kernel(kernel)
        self.workers = DEFAULT_WORKERS if workers is None else int(workers)
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.diagonal_jump = float(diagonal_jump)

    def assemble(self,
                 k: float,
                 nodes: Nodes,
                 verbose: bool = False) -> np.ndarray:
        """
        Assemble the operator matrix at wavenumber k.

        Args:
            k (float): Wavenumber.
            nodes (Nodes): Boundary discretization. Only read.
            verbose (bool, optional): Show a progress bar.

        Returns:
            np.ndarray: Dense complex matrix of shape (N, N), row-major.
        """
        nodes.check_shape()
        N = nodes.num_nodes

        A = np.zeros((N, N), dtype=np.complex128)
        blocks = self._row_blocks(N)

        t0 = time.perf_counter()
        with tqdm(total=N, desc="Assembling operator rows",
                  disable=not verbose) as pbar:
            if self.workers == 1 or len(blocks) == 1:
                for start, stop in blocks:
                    self._fill_rows(A[start:stop], start, k, nodes)
                    pbar.update(stop - start)
            else:
                with ThreadPoolExecutor(max_workers=self.workers) as pool:
                    futures = [
                        pool.submit(self._fill_rows, A[start:stop], start,
                                    k, nodes)
                        for start, stop in blocks
                    ]
                    for (start, stop), fut in zip(blocks, futures):
                        fut.result()
                        pbar.update(stop - start)

        logger.debug("Assembled %dx%d operator at k=%g with %d worker(s) "
                     "in %.3f s", N, N, k, self.workers,
                     time.perf_counter() - t0)
        return A

    def _row_blocks(self, N: int) -> list[tuple[int, int]]:
        """
        Split rows [0, N) into contiguous, non-overlapping blocks.

        Args:
            N (int): Number of rows.

        Returns:
            list[tuple[int, int]]: (start, stop) pairs covering [0, N).
        """
        n_blocks = min(N, 4 * self.workers)
        edges = np.linspace(0, N, n_blocks + 1).astype(int)
        return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:])
                if b > a]

    def _fill_rows(self,
                   out: np.ndarray,
                   start: int,
                   k: float,
                   nodes: Nodes) -> None:
        """
        Fill a block of consecutive rows.

        Args:
            out (np.ndarray): View of the output rows [start, start + len).
            start (int): Global index of the first row in the block.
            k (float): Wavenumber.
            nodes (Nodes): Boundary discretization.

        Returns:
            None: out is written in place.
        """
        points = nodes.points
        normals = nodes.normals
        w = nodes.w
        evaluate_row = getattr(self.kernel, "evaluate_row", None)

        for local in range(out.shape[0]):
            i = start + local
            x = points[i]
            n_x = normals[i]
            if evaluate_row is not None:
                out[local] = evaluate_row(x, n_x, points, k) * w
            else:
                for j in range(points.shape[0]):
                    out[local, j] = self.kernel.evaluate(x, n_x,
                                                         points[j], k) * w[j]
            out[local, i] += self.diagonal_jump


def construct_matrix(k: float,
                     nodes: Nodes,
                     kernel: Kernel | Callable | None = None,
                     workers: int | None = None,
                     verbose: bool = False) -> np.ndarray:
    """
    Assemble the operator matrix with a one-off OperatorAssembler.

    Args:
        k (float): Wavenumber.
        nodes (Nodes): Boundary discretization.
        kernel (Kernel | Callable | None, optional): Kernel to integrate.
        workers (int | None, optional): Size of the thread pool.
        verbose (bool, optional): Show a progress bar.

    Returns:
        np.ndarray: Dense complex matrix of shape (N, N).
    """
    assembler = OperatorAssembler(kernel=kernel, workers=workers)
    return assembler.assemble(k, nodes, verbose=verbose)


def format_matrix(A: np.ndarray) -> str:
    """
    Render a square complex matrix row by row.

    Each entry is written as "{re:>12.4e}{im:+12.4e}i", entries are
    separated by two spaces.

    Args:
        A (np.ndarray): Square matrix of shape (N, N).

    Returns:
        str: One line per row.
    """
    A = np.asarray(A)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {A.shape}")

    lines = []
    for row in A:
        lines.append("  ".join(f"{v.real:>12.4e}{v.imag:+12.4e}i"
                               for v in row.astype(np.complex128)))
    return "\n".join(lines)


def print_matrix(A: np.ndarray) -> None:
    """Print a square complex matrix, see format_matrix."""
    print(format_matrix(A))
