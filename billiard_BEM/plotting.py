import numpy as np
import matplotlib.pyplot as plt

from typing import Iterable

from billiard_BEM.geometry import Nodes
from billiard_BEM.spectrum import Resonance, SpectrumScan


def plot_nodes(path: str | None,
               nodes: Nodes,
               normal_scale: float,
               ax: plt.Axes | None = None) -> plt.Figure:
    """
    Plot boundary nodes and their outward normals.

    Draws the closed boundary polyline through the nodes, the nodes as dots
    and each normal as an arrow of length normal_scale.

    Args:
        path (str | None): File to save the figure to. Nothing is saved if
            None.
        nodes (Nodes): Boundary discretization.
        normal_scale (float): Length of the drawn normal arrows.
        ax (plt.Axes | None): Axes to draw into. A new figure is created if
            None.

    Returns:
        plt.Figure: Figure containing the plot.
    """
    if nodes.num_nodes < 2:
        raise ValueError("Need at least two nodes to plot a boundary.")

    if ax is None:
        fig, ax = plt.subplots(figsize=(9, 9))
    else:
        fig = ax.figure

    x_ = np.append(nodes.x, nodes.x[0])
    y_ = np.append(nodes.y, nodes.y[0])
    ax.plot(x_, y_, color="k", alpha=0.4, lw=1.0)
    ax.plot(nodes.x, nodes.y, "o", color="tab:blue", ms=3)
    ax.quiver(nodes.x, nodes.y,
              normal_scale * nodes.nx, normal_scale * nodes.ny,
              angles="xy", scale_units="xy", scale=1.0,
              color="tab:red", alpha=0.9, width=0.003)

    ax.set_title("Boundary Nodes & Normals")
    ax.set_aspect("equal")
    ax.margins(0.05 + normal_scale / max(np.ptp(nodes.x), np.ptp(nodes.y),
                                         1e-12))

    if path is not None:
        fig.savefig(path)
    return fig


def plot_spectrum(scan: SpectrumScan,
                  resonances: Iterable[Resonance] = (),
                  path: str | None = None,
                  ax: plt.Axes | None = None) -> plt.Figure:
    """
    Plot sigma_min against k with resonance markers.

    Args:
        scan (SpectrumScan): Scan to plot.
        resonances (Iterable[Resonance]): Resonances to mark.
        path (str | None): File to save the figure to.
        ax (plt.Axes | None): Axes to draw into.

    Returns:
        plt.Figure: Figure containing the plot.
    """
    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    ax.semilogy(scan.k, scan.sigma_min, color="tab:blue")
    resonances = list(resonances)
    if resonances:
        ax.semilogy([r.k for r in resonances],
                    [r.sigma_min for r in resonances],
                    "x", color="tab:red")
    ax.set_xlabel("k")
    ax.set_ylabel(r"$\sigma_{min}$")

    if path is not None:
        fig.savefig(path)
    return fig
