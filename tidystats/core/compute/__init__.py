"""
Shared compute infrastructure for tidystats.

Submodules:
    timing: Execution timing utilities
    qr: QR decomposition of gradient matrices
    tolerances: Tolerance tiers for numerical comparison
"""

from tidystats.core.compute.timing import Timer
from tidystats.core.compute.qr import QRResult, qr_cpu
from tidystats.core.compute.tolerances import (
    ToleranceTier,
    NLS_FIT,
    NLS_PROFILE,
)

__all__ = [
    "Timer",
    "QRResult",
    "qr_cpu",
    "ToleranceTier",
    "NLS_FIT",
    "NLS_PROFILE",
]
