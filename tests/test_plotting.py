import matplotlib.pyplot as plt
import numpy as np
import pytest

from billiard_BEM.geometry import circle_billiard_nodes
from billiard_BEM.plotting import plot_nodes, plot_spectrum
from billiard_BEM.spectrum import Resonance, SpectrumScan


def test_plot_nodes_writes_file(tmp_path, square24):
    path = tmp_path / "nodes.svg"
    fig = plot_nodes(str(path), square24, normal_scale=0.1)
    assert path.exists() and path.stat().st_size > 0

    ax = fig.axes[0]
    boundary = ax.lines[0]
    # closed polyline: first node repeated at the end
    assert len(boundary.get_xdata()) == square24.num_nodes + 1
    assert len(ax.collections) == 1  # normal arrows
    plt.close(fig)


def test_plot_nodes_into_existing_axes():
    nodes = circle_billiard_nodes(1.0, 16)
    fig, ax = plt.subplots()
    assert plot_nodes(None, nodes, 0.2, ax=ax) is fig
    plt.close(fig)


def test_plot_nodes_needs_two_nodes():
    nodes = circle_billiard_nodes(1.0, 1)
    with pytest.raises(ValueError):
        plot_nodes(None, nodes, 0.1)


def test_plot_spectrum(tmp_path):
    scan = SpectrumScan(k=np.linspace(1.0, 2.0, 11),
                        sigma_min=np.linspace(0.1, 1.0, 11))
    path = tmp_path / "spectrum.png"
    fig = plot_spectrum(scan, [Resonance(k=1.0, sigma_min=0.1)], path=path)
    assert path.exists()
    assert len(fig.axes[0].lines) == 2
    plt.close(fig)
