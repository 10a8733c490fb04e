"""
Boundary Element Method for 2D quantum billiard resonances
"""

__version__ = "0.1.0"
from .geometry import (Nodes, square_billiard_nodes, polygon_billiard_nodes,
                       circle_billiard_nodes)
from .kernels import (KernelConfig, DoubleLayerKernel, CallableKernel,
                      Kernel, as_kernel, kernel, hankel1_order1, r_vec)
from .matrix_assembly import (OperatorAssembler, construct_matrix,
                              format_matrix, print_matrix)
from .spectrum import (ResonanceScanner, SpectrumScan, Resonance,
                       min_singular_value, compute_spectrum,
                       find_local_minima, weyl_N, weyl_k, weyl_mean_spacing)

__all__ = ["Nodes", "square_billiard_nodes", "polygon_billiard_nodes",
           "circle_billiard_nodes",
           "KernelConfig", "DoubleLayerKernel", "CallableKernel", "Kernel",
           "as_kernel", "kernel", "hankel1_order1", "r_vec",
           "OperatorAssembler", "construct_matrix",
           "format_matrix", "print_matrix",
           "ResonanceScanner", "SpectrumScan", "Resonance",
           "min_singular_value", "compute_spectrum", "find_local_minima",
           "weyl_N", "weyl_k", "weyl_mean_spacing"]
