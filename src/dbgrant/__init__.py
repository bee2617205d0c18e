"""dbgrant - time-bounded access grants for MariaDB principals."""

__version__ = "0.1.0"
