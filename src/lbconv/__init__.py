"""lbconv: load-balancer configuration dumps to a vendor-neutral graph."""

__version__ = "0.3.0"
