"""
This package provides the configuration helpers used throughout :mod:`rotcurve`.
"""

from rotcurve.utilities.options import UserOptions
from rotcurve.utilities.mixin_classes import UserOptionConfigured

__all__ = ["UserOptions", "UserOptionConfigured"]
