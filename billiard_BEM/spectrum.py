"""
Resonance search over a range of wavenumbers.

A resonance of the billiard is a wavenumber k at which the assembled
operator A(k) becomes (nearly) singular. The scan evaluates the smallest
singular value sigma_min(A(k)) on a grid and reports local minima below a
threshold, optionally refined with a bounded scalar minimisation between
the neighbouring grid points.
"""

import logging
import warnings

import numpy as np
import scipy.linalg as la

from dataclasses import dataclass
from scipy.optimize import minimize_scalar
from tqdm import tqdm

from billiard_BEM.geometry import Nodes
from billiard_BEM.matrix_assembly import OperatorAssembler

logger = logging.getLogger(__name__)


def min_singular_value(A: np.ndarray) -> float:
    """
    Smallest singular value of a dense matrix.

    Args:
        A (np.ndarray): Matrix of shape (M, N).

    Returns:
        float: sigma_min(A) >= 0.
    """
    return float(la.svdvals(A)[-1])


def weyl_N(k, area: float, perimeter: float):
    """Two-term Weyl estimate of the number of resonances below k."""
    return (area * k**2 - perimeter * k) / (4 * np.pi)


def weyl_k(n, area: float, perimeter: float):
    """Weyl estimate of the nth resonance wavenumber (inverse of weyl_N)."""
    return (perimeter + np.sqrt(perimeter**2 + 16 * np.pi * area * n)) / (2 * area)


def weyl_mean_spacing(k, area: float, perimeter: float):
    """Mean resonance spacing 1 / (dN/dk) predicted by weyl_N."""
    return 2 * np.pi / (area * k - perimeter / 2)


def find_local_minima(values: np.ndarray) -> np.ndarray:
    """
    Indices of interior local minima, v[i-1] > v[i] <= v[i+1].

    Args:
        values (np.ndarray): 1-D array.

    Returns:
        np.ndarray: Sorted integer indices; endpoints are never returned.
    """
    v = np.asarray(values, dtype=float)
    if v.ndim != 1 or v.shape[0] < 3:
        return np.array([], dtype=int)
    mask = (v[1:-1] < v[:-2]) & (v[1:-1] <= v[2:])
    return np.nonzero(mask)[0] + 1


@dataclass(frozen=True, eq=False)
class SpectrumScan:
    """sigma_min sampled on a wavenumber grid."""
    k: np.ndarray
    sigma_min: np.ndarray

    def __post_init__(self):
        if self.k.shape != self.sigma_min.shape:
            raise ValueError(f"k shape {self.k.shape} != sigma_min shape "
                             f"{self.sigma_min.shape}")

    def __len__(self) -> int:
        return self.k.shape[0]

    def pairs(self) -> list[tuple[float, float]]:
        return [(float(a), float(b)) for a, b in zip(self.k, self.sigma_min)]


@dataclass(frozen=True)
class Resonance:
    k: float
    sigma_min: float


class ResonanceScanner:
    """
    Sweeps the operator assembly over wavenumbers for a fixed node set.

    Attributes:
        nodes (Nodes): Boundary discretization shared by every assembly.
        assembler (OperatorAssembler): Assembler used for each k.
    """

    def __init__(self,
                 nodes: Nodes,
                 assembler: OperatorAssembler | None = None):
        nodes.validate()
        self.nodes = nodes
        self.assembler = assembler if assembler is not None \
            else OperatorAssembler()

    def sigma_min(self, k: float) -> float:
        """Assemble A(k) and return its smallest singular value."""
        return min_singular_value(self.assembler.assemble(k, self.nodes))

    def scan(self,
             k_values: np.ndarray,
             verbose: bool = False) -> SpectrumScan:
        """
        Evaluate sigma_min on a wavenumber grid.

        Args:
            k_values (np.ndarray): Strictly increasing, non-negative 1-D grid.
            verbose (bool): Show a progress bar.

        Returns:
            SpectrumScan: The grid and one sigma_min per grid point.
        """
        k_values = np.array(k_values, dtype=float)
        if k_values.ndim != 1 or k_values.shape[0] == 0:
            raise ValueError("k_values must be a non-empty 1-D array.")
        if not np.all(np.isfinite(k_values)) or np.any(k_values < 0):
            raise ValueError("k_values must be finite and non-negative.")
        if np.any(np.diff(k_values) <= 0):
            raise ValueError("k_values must be strictly increasing.")

        self._check_resolution(k_values)

        sigma = np.empty_like(k_values)
        for idx, k in enumerate(tqdm(k_values,
                                     desc="Scanning wavenumbers",
                                     disable=not verbose)):
            sigma[idx] = self.sigma_min(k)

        logger.info("Scanned %d wavenumbers in [%g, %g]",
                    len(k_values), k_values[0], k_values[-1])
        k_values.flags.writeable = False
        sigma.flags.writeable = False
        return SpectrumScan(k=k_values, sigma_min=sigma)

    def find_resonances(self,
                        scan: SpectrumScan,
                        threshold: float,
                        refine: bool = True,
                        xtol: float = 1e-8) -> list[Resonance]:
        """
        Candidate resonances from a scan.

        Args:
            scan (SpectrumScan): Output of scan().
            threshold (float): Minima with sigma_min above this are dropped.
            refine (bool): Refine each minimum between its grid neighbours.
            xtol (float): Absolute tolerance of the refinement in k.

        Returns:
            list[Resonance]: Resonances sorted by k.
        """
        out = []
        for idx in find_local_minima(scan.sigma_min):
            k0, s0 = float(scan.k[idx]), float(scan.sigma_min[idx])
            if refine:
                res = minimize_scalar(self.sigma_min,
                                      bounds=(scan.k[idx - 1],
                                              scan.k[idx + 1]),
                                      method="bounded",
                                      options={"xatol": xtol})
                if res.fun < s0:
                    k0, s0 = float(res.x), float(res.fun)
            if s0 <= threshold:
                out.append(Resonance(k=k0, sigma_min=s0))
            else:
                logger.debug("k=%.6f rejected, sigma_min=%.3e > %.3e",
                             k0, s0, threshold)
        return out

    def _check_resolution(self, k_values: np.ndarray) -> None:
        if self.nodes.area is None or len(k_values) < 2:
            return
        dk = float(np.max(np.diff(k_values)))
        spacing = weyl_mean_spacing(k_values[-1], self.nodes.area,
                                    self.nodes.l_total)
        if spacing > 0 and dk > spacing:
            warnings.warn(f"Wavenumber step {dk:.3e} exceeds the Weyl mean "
                          f"resonance spacing {spacing:.3e} at k="
                          f"{k_values[-1]:.3f}; resonances may be missed.",
                          RuntimeWarning,
                          stacklevel=3)


def compute_spectrum(nodes: Nodes,
                     k_values: np.ndarray,
                     threshold: float,
                     assembler: OperatorAssembler | None = None,
                     refine: bool = True,
                     xtol: float = 1e-8,
                     verbose: bool = False
                     ) -> tuple[SpectrumScan, list[Resonance]]:
    """
    Scan k_values and return the scan together with the resonances found.

    Args:
        nodes (Nodes): Boundary discretization.
        k_values (np.ndarray): Wavenumber grid.
        threshold (float): Upper bound on sigma_min for a resonance.
        assembler (OperatorAssembler | None): Assembler to use.
        refine (bool): Refine minima with a bounded minimisation.
        xtol (float): Refinement tolerance.
        verbose (bool): Show progress bars.

    Returns:
        tuple[SpectrumScan, list[Resonance]]
    """
    scanner = ResonanceScanner(nodes, assembler)
    scan = scanner.scan(k_values, verbose=verbose)
    return scan, scanner.find_resonances(scan, threshold, refine=refine,
                                         xtol=xtol)
