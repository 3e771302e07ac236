"""lockctl - reconcile open SMB file handles against an administrator policy."""

__version__ = "0.1.0"
