# kernels.py
"""
Composite square-exponential + periodic covariance functions.

All hyperparameters live in log space: a length scale ``l`` is stored as
``log l`` and a signal variance ``sd**2`` as ``log sd``. The period (the only
extra parameter) is stored as ``log period`` too and is not learned.

``evaluate`` returns the covariance matrix together with a ``KernelTerms``
bundle of the elementwise intermediates. ``gradient`` and ``hessian`` are pure
functions of that bundle, so derivatives always belong to the evaluation that
produced them and a kernel instance can be shared between callers as long as
its parameters are not changed concurrently.

Hyperparameter order::

    periodic_se   [log ls_se, log sd_se, log ls_p, log sd_p]
    periodic_se2  [log ls_se, log sd_se, log ls_p, log sd_p, log ls_se2, log sd_se2]
"""
from __future__ import annotations

import abc
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Type

import numpy as np

from .config import KernelConfig
from .helpers import square_distance

# Sentinel for an unset period: exp() of it overflows to inf, which turns the
# periodic argument into 0 everywhere.
UNSET_PERIOD = sys.float_info.max


class ParameterCountError(ValueError):
    """Raised when a parameter vector does not match the kernel's parameter count."""


# ------------------ Intermediate terms -------------------
@dataclass(frozen=True)
class SquareExponentialTerms:
    E: np.ndarray   # squared distance over squared length scale
    K: np.ndarray


@dataclass(frozen=True)
class PeriodicTerms:
    P: np.ndarray   # pi * |x - y| / period
    S: np.ndarray   # sin(P) / length scale
    Q: np.ndarray   # S**2
    K: np.ndarray


@dataclass(frozen=True)
class KernelTerms:
    """Everything the derivatives need from one ``evaluate`` call."""
    square_exponential: Tuple[SquareExponentialTerms, ...]
    periodic: PeriodicTerms

    @property
    def shape(self) -> Tuple[int, int]:
        return self.periodic.K.shape


# ------------------ Block helpers -------------------
def _square_exponential(sq_dist: np.ndarray, log_ls: float, log_sd: float) -> SquareExponentialTerms:
    length_scale = np.exp(log_ls)
    signal_var = np.exp(2 * log_sd)
    E = sq_dist / length_scale**2
    return SquareExponentialTerms(E=E, K=signal_var * np.exp(-0.5 * E))


def _periodic(dist: np.ndarray, log_ls: float, log_sd: float, log_period: float) -> PeriodicTerms:
    length_scale = np.exp(log_ls)
    signal_var = np.exp(2 * log_sd)
    with np.errstate(over="ignore"):
        period = np.exp(log_period)
    P = np.pi * dist / period
    S = np.sin(P) / length_scale
    Q = S * S
    return PeriodicTerms(P=P, S=S, Q=Q, K=signal_var * np.exp(-2 * Q))


def _se_gradient(t: SquareExponentialTerms) -> List[np.ndarray]:
    return [t.K * t.E, 2 * t.K]


def _periodic_gradient(t: PeriodicTerms) -> List[np.ndarray]:
    return [4 * t.K * t.Q, 2 * t.K]


def _se_hessian(t: SquareExponentialTerms) -> List[List[np.ndarray]]:
    cross = 2 * t.K * t.E
    return [
        [t.K * (t.E * t.E - 2 * t.E), cross],
        [cross, 4 * t.K],
    ]


def _periodic_hessian(t: PeriodicTerms) -> List[List[np.ndarray]]:
    cross = 8 * t.K * t.Q
    return [
        [t.K * (16 * t.Q * t.Q - 8 * t.Q), cross],
        [cross, 4 * t.K],
    ]


# ---------------------- Base class ----------------------
class CovarianceFunction(abc.ABC):
    """Common parameter handling for the composite kernels."""

    name: str = ""
    parameter_count: int = 0
    extra_parameter_count: int = 1

    def __init__(self, hyper_parameters: Optional[Sequence[float]] = None):
        self._hyper = np.zeros(self.parameter_count)
        self._extra = np.full(self.extra_parameter_count, UNSET_PERIOD)
        if hyper_parameters is not None:
            self.set_parameters(hyper_parameters)

    # ----------------- Parameters -----------------
    @staticmethod
    def _checked(params: Sequence[float], expected: int, what: str) -> np.ndarray:
        arr = np.array(params, dtype=float)
        if arr.ndim != 1 or arr.size != expected:
            raise ParameterCountError(f"expected a vector of {expected} {what}, got shape {arr.shape}")
        return arr

    @property
    def parameters(self) -> np.ndarray:
        return self._hyper.copy()

    def set_parameters(self, params: Sequence[float]) -> None:
        self._hyper = self._checked(params, self.parameter_count, "hyperparameters")

    @property
    def extra_parameters(self) -> np.ndarray:
        return self._extra.copy()

    def set_extra_parameters(self, params: Sequence[float]) -> None:
        self._extra = self._checked(params, self.extra_parameter_count, "extra parameters")

    def set_period(self, period_s: float) -> None:
        """Convenience for ``set_extra_parameters([log(period_s)])``."""
        if period_s <= 0:
            raise ValueError(f"period must be positive, got {period_s}")
        self.set_extra_parameters([np.log(period_s)])

    # ----------------- Evaluation -----------------
    def evaluate(self, x: Sequence[float], y: Sequence[float]) -> Tuple[np.ndarray, KernelTerms]:
        """Covariance matrix of shape ``(len(x), len(y))`` and its intermediates."""
        sq_dist = square_distance(x, y)
        dist = np.sqrt(sq_dist)
        h = self._hyper
        periodic = _periodic(dist, h[2], h[3], self._extra[0])
        se_blocks = tuple(
            _square_exponential(sq_dist, h[i], h[i + 1]) for i in self._se_offsets()
        )
        terms = KernelTerms(square_exponential=se_blocks, periodic=periodic)
        K = periodic.K.copy()
        for block in se_blocks:
            K += block.K
        return K, terms

    def __call__(self, x: Sequence[float], y: Sequence[float]) -> np.ndarray:
        return self.evaluate(x, y)[0]

    def gradient(self, terms: KernelTerms) -> List[np.ndarray]:
        """Derivatives of ``K`` with respect to each (log-space) hyperparameter."""
        self._check_terms(terms)
        grad: List[Optional[np.ndarray]] = [None] * self.parameter_count
        grad[2:4] = _periodic_gradient(terms.periodic)
        for offset, block in zip(self._se_offsets(), terms.square_exponential):
            grad[offset:offset + 2] = _se_gradient(block)
        return grad  # type: ignore[return-value]

    def hessian(self, terms: KernelTerms) -> List[List[np.ndarray]]:
        """
        Second derivatives indexed ``[i][j]``. The components are additive
        and use disjoint parameters, so only the 2x2 diagonal blocks are
        non-zero.
        """
        self._check_terms(terms)
        n = self.parameter_count
        hess = [[np.zeros(terms.shape) for _ in range(n)] for _ in range(n)]
        blocks = [(2, _periodic_hessian(terms.periodic))]
        blocks += [
            (offset, _se_hessian(block))
            for offset, block in zip(self._se_offsets(), terms.square_exponential)
        ]
        for offset, sub in blocks:
            for i in range(2):
                for j in range(2):
                    hess[offset + i][offset + j] = sub[i][j]
        return hess

    # ----------------- Internals -----------------
    @abc.abstractmethod
    def _se_offsets(self) -> Tuple[int, ...]:
        """Index of the length-scale parameter of each square-exponential block."""

    def _check_terms(self, terms: KernelTerms) -> None:
        expected = len(self._se_offsets())
        if len(terms.square_exponential) != expected:
            raise ValueError(
                f"{self.name}: terms hold {len(terms.square_exponential)} square-exponential "
                f"blocks, expected {expected}"
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} params={self._hyper.tolist()} extra={self._extra.tolist()}>"


# ----------------------- Variants -----------------------
class PeriodicSquareExponential(CovarianceFunction):
    """One square-exponential term plus one periodic term."""

    name = "periodic_se"
    parameter_count = 4

    def _se_offsets(self) -> Tuple[int, ...]:
        return (0,)


class PeriodicSquareExponential2(CovarianceFunction):
    """Two square-exponential terms (short and long range) plus one periodic term."""

    name = "periodic_se2"
    parameter_count = 6

    def _se_offsets(self) -> Tuple[int, ...]:
        return (0, 4)


KERNELS: Dict[str, Type[CovarianceFunction]] = {
    cls.name: cls for cls in (PeriodicSquareExponential, PeriodicSquareExponential2)
}


def create_kernel(
    name: str, hyper_parameters: Optional[Sequence[float]] = None
) -> CovarianceFunction:
    try:
        cls = KERNELS[name]
    except KeyError:
        raise KeyError(f"unknown kernel {name!r}, choose from {sorted(KERNELS)}") from None
    return cls(hyper_parameters)


def kernel_from_config(cfg: KernelConfig) -> CovarianceFunction:
    kernel = create_kernel(cfg.name, cfg.hyper_parameters)
    if cfg.period_s is not None:
        kernel.set_period(cfg.period_s)
    return kernel
