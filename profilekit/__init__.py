"""profilekit: install and remove a PowerShell profile bundle."""

__version__ = "0.1.0"
