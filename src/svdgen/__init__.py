"""Generate Python register-access modules from CMSIS-SVD descriptions."""

__version__ = "0.1.0"
