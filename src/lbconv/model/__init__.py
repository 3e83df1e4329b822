"""Model package - Vendor-neutral configuration graph for lbconv."""

from lbconv.model.config import (
    Certificate,
    Configuration,
    Dialect,
    HealthMonitor,
    Pool,
    PoolMember,
    RealServer,
    VirtualServer,
)
from lbconv.model.diagnostic import Diagnostic, Severity

__all__ = [
    "Certificate",
    "Configuration",
    "Diagnostic",
    "Dialect",
    "HealthMonitor",
    "Pool",
    "PoolMember",
    "RealServer",
    "Severity",
    "VirtualServer",
]
