"""
QR decomposition of gradient matrices.

Used by the nonlinear least-squares backend for the rank check, the
relative-offset convergence criterion and the parameter covariance.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.
    
    Attributes:
        Q: Orthogonal matrix (n x n, complete mode)
        R: Upper triangular matrix (n x p)
        rank: Numerical rank determined from R diagonal
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int

    def qty(self, y: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        """Q'y, the rotated vector (R's qr.qty)."""
        return self.Q.T @ y

    def unscaled_covariance(self) -> NDArray[np.floating[Any]]:
        """(X'X)^-1 from the triangular factor (R's chol2inv)."""
        p = self.R.shape[1]
        R = self.R[:p, :p]
        R_inv = solve_triangular(R, np.eye(p), lower=False)
        return R_inv @ R_inv.T


def qr_cpu(X: NDArray[np.floating[Any]], tol: float | None = None) -> QRResult:
    """
    Complete QR decomposition using LAPACK (via NumPy).
    
    Args:
        X: Matrix to decompose (n x p)
        tol: Relative tolerance on the R diagonal for the rank. Default is
            machine precision scaled by the matrix size; gradients obtained
            by finite differences need a looser value (R's qr() uses 1e-7).
        
    Returns:
        QRResult with Q, R, and numerical rank
    """
    Q, R = np.linalg.qr(X, mode='complete')
    
    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and diag_R.max() > 0:
        if tol is None:
            tol = max(X.shape) * np.finfo(X.dtype).eps
        rank = int(np.sum(diag_R > tol * diag_R.max()))
    else:
        rank = 0
    
    return QRResult(Q=Q, R=R, rank=rank)
