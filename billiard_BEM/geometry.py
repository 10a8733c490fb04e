import numpy as np

from dataclasses import dataclass, field

NORMAL_TOL = 1e-8


@dataclass(frozen=True, eq=False)
class Nodes:
    """
    Discretized billiard boundary.

    Attributes:
        x (np.ndarray): x-coordinates of the boundary nodes, shape (N,).
        y (np.ndarray): y-coordinates of the boundary nodes, shape (N,).
        nx (np.ndarray): x-components of the outward unit normals, shape (N,).
        ny (np.ndarray): y-components of the outward unit normals, shape (N,).
        w (np.ndarray): Quadrature weights (panel lengths), shape (N,).
        s (np.ndarray): Arclength parameters in [0, l_total), shape (N,).
        l_total (float): Total perimeter of the boundary.
        area (float | None): Enclosed area, if known.
    """
    x: np.ndarray
    y: np.ndarray
    nx: np.ndarray
    ny: np.ndarray
    w: np.ndarray
    s: np.ndarray
    l_total: float
    area: float | None = None
    points: np.ndarray = field(init=False, repr=False, compare=False)
    normals: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ("x", "y", "nx", "ny", "w", "s"):
            arr = np.array(getattr(self, name), dtype=float)
            arr.flags.writeable = False
            object.__setattr__(self, name, arr)
        object.__setattr__(self, "l_total", float(self.l_total))

        if self.x.shape == self.y.shape and self.x.ndim == 1:
            points = np.column_stack([self.x, self.y])
            points.flags.writeable = False
        else:
            points = None
        if self.nx.shape == self.ny.shape and self.nx.ndim == 1:
            normals = np.column_stack([self.nx, self.ny])
            normals.flags.writeable = False
        else:
            normals = None
        object.__setattr__(self, "points", points)
        object.__setattr__(self, "normals", normals)

    @property
    def num_nodes(self) -> int:
        """Number of boundary nodes."""
        return self.x.shape[0]

    def __len__(self) -> int:
        return self.num_nodes

    def check_shape(self) -> None:
        """
        Check that all per-node arrays are 1-D with a common length N >= 1.

        This is the only precondition of the operator assembly; values
        (including non-finite ones) are not inspected.

        Raises:
            ValueError: If the arrays are inconsistent or empty.
        """
        N = self.x.shape[0] if self.x.ndim == 1 else -1
        for name in ("x", "y", "nx", "ny", "w", "s"):
            arr = getattr(self, name)
            if arr.ndim != 1:
                raise ValueError(f"{name} must be 1-D, got shape {arr.shape}")
            if arr.shape[0] != N:
                raise ValueError(f"{name} has length {arr.shape[0]}, "
                                 f"expected {N}")
        if N < 1:
            raise ValueError("Node set must contain at least one node.")

    def validate(self) -> None:
        """Check node set integrity. Raises ValueError on failure."""
        self.check_shape()

        if not (np.all(np.isfinite(self.x)) and np.all(np.isfinite(self.y))):
            raise ValueError("Non-finite node coordinates")
        if not (np.all(np.isfinite(self.nx)) and np.all(np.isfinite(self.ny))):
            raise ValueError("Non-finite normal components")
        norms = np.hypot(self.nx, self.ny)
        if not np.allclose(norms, 1.0, rtol=0.0, atol=NORMAL_TOL):
            raise ValueError(f"Normal vectors not unit: max deviation "
                             f"{np.max(np.abs(norms - 1.0)):.2e}")
        if np.any(self.w <= 0):
            raise ValueError("Non-positive quadrature weights detected")
        if not self.l_total > 0:
            raise ValueError(f"l_total must be positive, got {self.l_total}")


def polygon_area(vertices: np.ndarray) -> float:
    """
    Signed area of a polygon (positive for counter-clockwise ordering).

    Args:
        vertices (np.ndarray): Array of shape (V, 2).

    Returns:
        float: Signed area.
    """
    v = np.asarray(vertices, dtype=float)
    x, y = v[:, 0], v[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def polygon_perimeter(vertices: np.ndarray) -> float:
    """Perimeter of a closed polygon with vertices of shape (V, 2)."""
    v = np.asarray(vertices, dtype=float)
    edges = np.roll(v, -1, axis=0) - v
    return float(np.sum(np.hypot(edges[:, 0], edges[:, 1])))


def polygon_billiard_nodes(vertices: np.ndarray,
                           n: int) -> Nodes:
    """
    Evenly spaced midpoint nodes on a closed polygon.

    The boundary is traversed counter-clockwise starting at the first vertex
    (clockwise input is reversed). Node i sits at arclength
    s_i = (i + 1/2) h with h = L/n and carries the outward normal of its
    edge and the weight h.

    Args:
        vertices (np.ndarray): Polygon vertices of shape (V, 2), V >= 3.
        n (int): Number of nodes, n >= 1.

    Returns:
        Nodes: Boundary data for the polygon.
    """
    v = np.asarray(vertices, dtype=float)
    if v.ndim != 2 or v.shape[1] != 2 or v.shape[0] < 3:
        raise ValueError(f"vertices must have shape (V, 2) with V >= 3, "
                         f"got {v.shape}")
    if not np.all(np.isfinite(v)):
        raise ValueError("Non-finite polygon vertices")
    if int(n) != n or n < 1:
        raise ValueError(f"n must be a positive integer, got {n}")
    n = int(n)

    area = polygon_area(v)
    if area == 0.0:
        raise ValueError("Degenerate polygon (zero area).")
    if area < 0.0:
        v = np.concatenate([v[:1], v[:0:-1]])
        area = -area

    edges = np.roll(v, -1, axis=0) - v
    lengths = np.hypot(edges[:, 0], edges[:, 1])
    if np.any(lengths == 0.0):
        raise ValueError("Polygon has repeated consecutive vertices.")
    tangents = edges / lengths[:, None]
    edge_normals = np.column_stack([tangents[:, 1], -tangents[:, 0]])

    starts = np.concatenate([[0.0], np.cumsum(lengths)[:-1]])
    l_total = float(np.sum(lengths))
    h = l_total / n

    # midpoint nodes: s_i = (i + 0.5) * h, wrapped into [0, l_total)
    s = np.arange(n) * h + 0.5 * h
    s = np.where(s >= l_total, s - l_total * np.floor(s / l_total), s)

    side = np.searchsorted(starts, s, side="right") - 1
    side = np.clip(side, 0, len(lengths) - 1)
    t = s - starts[side]

    x = v[side, 0] + t * tangents[side, 0]
    y = v[side, 1] + t * tangents[side, 1]

    return Nodes(x=x,
                 y=y,
                 nx=edge_normals[side, 0],
                 ny=edge_normals[side, 1],
                 w=np.full(n, h),
                 s=s,
                 l_total=l_total,
                 area=area)


def square_billiard_nodes(a: float,
                          n: int) -> Nodes:
    """
    Reference discretization of the square billiard [0, a] x [0, a].

    Sides are traversed counter-clockwise from the origin:
        side 0: bottom (0,0) -> (a,0),   n = (0,-1)
        side 1: right  (a,0) -> (a,a),   n = (1, 0)
        side 2: top    (a,a) -> (0,a),   n = (0, 1)
        side 3: left   (0,a) -> (0,0),   n = (-1,0)
    Nodes are panel midpoints, so no node falls on a corner.

    Args:
        a (float): Side length, a > 0.
        n (int): Number of nodes, a positive multiple of 4.

    Returns:
        Nodes: Boundary data for the square, every weight equal to 4a/n.
    """
    if not a > 0:
        raise ValueError(f"Side length must be > 0, got {a}")
    if int(n) != n or n < 4 or n % 4 != 0:
        raise ValueError(f"N must be a multiple of 4 (got {n})")

    vertices = np.array([[0.0, 0.0], [a, 0.0], [a, a], [0.0, a]])
    return polygon_billiard_nodes(vertices, int(n))


def circle_billiard_nodes(radius: float,
                          n: int,
                          center: tuple[float, float] = (0.0, 0.0)) -> Nodes:
    """
    Discretization of the circular billiard.

    Node i sits at angle theta_i = 2π (i + 1/2) / n with radial outward
    normal and weight 2πR/n.

    Args:
        radius (float): Radius R > 0.
        n (int): Number of nodes, n >= 1.
        center (tuple[float, float]): Circle center.

    Returns:
        Nodes: Boundary data for the circle.
    """
    if not radius > 0:
        raise ValueError(f"Radius must be > 0, got {radius}")
    if int(n) != n or n < 1:
        raise ValueError(f"n must be a positive integer, got {n}")
    n = int(n)

    theta = 2.0 * np.pi * (np.arange(n) + 0.5) / n
    cos, sin = np.cos(theta), np.sin(theta)
    l_total = 2.0 * np.pi * radius

    return Nodes(x=center[0] + radius * cos,
                 y=center[1] + radius * sin,
                 nx=cos,
                 ny=sin,
                 w=np.full(n, l_total / n),
                 s=radius * theta,
                 l_total=l_total,
                 area=np.pi * radius ** 2)
