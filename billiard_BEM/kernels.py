import numpy as np
from scipy import special as sp
from dataclasses import dataclass
from typing import Callable, Literal, Protocol, runtime_checkable

SINGULAR_THRESHOLD = 1e-16  # (1e-8)^2
JUMP_VALUE = -0.5


@dataclass(frozen=True)
class KernelConfig:
    """
    Numerical constants of the double-layer kernel.

    Attributes:
        singular_threshold (float): Squared separation below which the two
            points are treated as coincident.
        jump_value (float): Real value returned at coincident points.
        hankel (str): Strategy used for H_1^(1). ``"hankel"`` calls
            ``scipy.special.hankel1``, ``"bessel"`` combines ``j1`` and
            ``y1``.
    """
    singular_threshold: float = SINGULAR_THRESHOLD
    jump_value: float = JUMP_VALUE
    hankel: Literal["hankel", "bessel"] = "hankel"

    def __post_init__(self):
        if self.hankel not in ("hankel", "bessel"):
            raise ValueError(f"Unknown Hankel strategy {self.hankel!r}. Must "
                             "be 'hankel' or 'bessel'.")
        if not self.singular_threshold >= 0.0:
            raise ValueError("singular_threshold must be non-negative.")


def r_vec(x: np.ndarray,
          y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Compute the vector from points y to points x and its squared norm.

    r_vec = x - y
    r2 = ||r_vec||^2

    Args:
        x (np.ndarray): Array of shape (..., 2) representing points x.
        y (np.ndarray): Array of shape (..., 2) representing points y.

    Returns:
        r_vec (np.ndarray): Array of shape (..., 2) representing the vector
            from y to x.
        r2 (np.ndarray): Array of shape (...) representing the squared norm
            of r_vec.
    """
    r_vec_ = np.asarray(x, dtype=float) - np.asarray(y, dtype=float)
    r2 = r_vec_[..., 0] * r_vec_[..., 0] + r_vec_[..., 1] * r_vec_[..., 1]
    return r_vec_, r2


def hankel1_order1(z: np.ndarray | float,
                   method: Literal["hankel", "bessel"] = "hankel"
                   ) -> np.ndarray | complex:
    """
    Hankel function of the first kind and order one, H_1^(1)(z).

    For real z > 0 the two strategies are equivalent:
        H_1^(1)(z) = J_1(z) + i Y_1(z)

    Negative arguments lie outside the domain of Y_1 and give nan with
    either strategy.

    Args:
        z (np.ndarray | float): Real argument(s).
        method (str): ``"hankel"`` or ``"bessel"``.

    Returns:
        H (np.ndarray | complex): Complex values, same shape as z.
    """
    if method == "hankel":
        h = sp.hankel1(1, z)
        return np.where(np.asarray(z) < 0, complex(np.nan, np.nan), h)[()]
    if method == "bessel":
        return sp.j1(z) + 1j * sp.y1(z)
    raise ValueError(f"Unknown Hankel strategy {method!r}.")


@runtime_checkable
class Kernel(Protocol):
    """Anything the assembler can evaluate entry by entry."""

    def evaluate(self,
                 x: np.ndarray,
                 n: np.ndarray,
                 y: np.ndarray,
                 k: float) -> complex:
        ...


class DoubleLayerKernel:
    """
    Double-layer kernel of the 2D Helmholtz equation.

    For separated points x != y:

        K(x, y) = -(ik/4) H_1^(1)(k r) (x - y)·n / r,   r = |x - y|

    At coincident points (r^2 below ``config.singular_threshold``) the jump
    value ``config.jump_value`` is returned exactly. For k = 0 the static
    (Laplace) limit -(x - y)·n / (2π r^2) is used.
    """

    def __init__(self, config: KernelConfig | None = None):
        self.config = config if config is not None else KernelConfig()

    def __repr__(self) -> str:
        return f"DoubleLayerKernel({self.config!r})"

    def evaluate(self,
                 x: np.ndarray,
                 n: np.ndarray,
                 y: np.ndarray,
                 k: float) -> complex:
        """
        Evaluate the kernel for one pair of points.

        Args:
            x (np.ndarray): Observation point, shape (2,).
            n (np.ndarray): Outward unit normal at x, shape (2,).
            y (np.ndarray): Source point, shape (2,).
            k (float): Wavenumber.

        Returns:
            complex: Kernel value.
        """
        dx0 = float(x[0]) - float(y[0])
        dx1 = float(x[1]) - float(y[1])
        r2 = dx0 * dx0 + dx1 * dx1

        if r2 < self.config.singular_threshold:
            return complex(self.config.jump_value, 0.0)

        r = np.sqrt(r2)
        dot = dx0 * float(n[0]) + dx1 * float(n[1])
        scale = dot / r

        if k == 0:
            return complex(-scale / (2.0 * np.pi * r), 0.0)

        h1 = hankel1_order1(k * r, self.config.hankel)
        c = 0.25 * k * scale
        return complex(c * h1.imag, -c * h1.real)

    def evaluate_row(self,
                     x: np.ndarray,
                     n: np.ndarray,
                     ys: np.ndarray,
                     k: float) -> np.ndarray:
        """
        Evaluate the kernel for one observation point against many sources.

        Args:
            x (np.ndarray): Observation point, shape (2,).
            n (np.ndarray): Outward unit normal at x, shape (2,).
            ys (np.ndarray): Source points, shape (M, 2).
            k (float): Wavenumber.

        Returns:
            np.ndarray: Complex kernel values, shape (M,).
        """
        dx, r2 = r_vec(np.asarray(x, dtype=float)[None, :], ys)
        singular = r2 < self.config.singular_threshold

        out = np.empty(r2.shape, dtype=np.complex128)
        out[singular] = complex(self.config.jump_value, 0.0)

        reg = ~singular
        if not np.any(reg):
            return out

        r = np.sqrt(r2[reg])
        dot = dx[reg, 0] * float(n[0]) + dx[reg, 1] * float(n[1])
        scale = dot / r

        if k == 0:
            out[reg] = -scale / (2.0 * np.pi * r)
            return out

        h1 = hankel1_order1(k * r, self.config.hankel)
        c = 0.25 * k * scale
        out.real[reg] = c * h1.imag
        out.imag[reg] = -c * h1.real
        return out

    __call__ = evaluate


class CallableKernel:
    """Adapter turning a plain function f(x, n, y, k) into a Kernel."""

    def __init__(self, func: Callable[[np.ndarray, np.ndarray,
                                       np.ndarray, float], complex]):
        self.func = func

    def evaluate(self, x, n, y, k) -> complex:
        return complex(self.func(x, n, y, k))


def as_kernel(obj: Kernel | Callable | None) -> Kernel:
    """
    Normalise a kernel argument.

    Args:
        obj: A Kernel, a callable f(x, n, y, k), or None for the default
            DoubleLayerKernel.

    Returns:
        Kernel: Object exposing ``evaluate``.
    """
    if obj is None:
        return DoubleLayerKernel()
    if isinstance(obj, Kernel):
        return obj
    if callable(obj):
        return CallableKernel(obj)
    raise TypeError(f"Expected a Kernel or callable, got {type(obj).__name__}")


_DEFAULT_KERNEL = DoubleLayerKernel()


def kernel(x: np.ndarray,
           n: np.ndarray,
           y: np.ndarray,
           k: float,
           config: KernelConfig | None = None) -> complex:
    """
    Evaluate the default double-layer kernel.

    Args:
        x (np.ndarray): Observation point, shape (2,).
        n (np.ndarray): Outward unit normal at x, shape (2,).
        y (np.ndarray): Source point, shape (2,).
        k (float): Wavenumber.
        config (KernelConfig | None): Optional numerical constants.

    Returns:
        complex: Kernel value.
    """
    if config is None:
        return _DEFAULT_KERNEL.evaluate(x, n, y, k)
    return DoubleLayerKernel(config).evaluate(x, n, y, k)
