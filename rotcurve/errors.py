"""
This module defines the exceptions raised by :mod:`rotcurve`.

All of them derive from :class:`RotationCurveError` so that a caller can catch anything raised by the library in one
place.  They also derive from the builtin exception that would otherwise have been raised (``ValueError`` or
``IndexError``) so existing handlers keep working.

Numerical edge cases (equal quaternions, antipodal quaternions, zero length segments) are not errors and are handled by
explicit branches in the interpolation routines.
"""


class RotationCurveError(Exception):
    """
    Base class for all errors raised by :mod:`rotcurve`.
    """


class InvalidArgumentError(RotationCurveError, ValueError):
    """
    Raised when a curve is constructed from malformed data.

    Examples are keyframe times and quaternions of different lengths, empty keyframe arrays, keyframe times that are not
    ascending and non-negative, or a cycle time that is less than the final keyframe time.
    """


class PreconditionError(RotationCurveError, ValueError):
    """
    Raised when an input violates a precondition of an interpolation routine.

    This covers quaternions that are not of unit length within the configured tolerance (when validation is strict), query
    times outside of the allowed range, and use of a spline cache that has not been populated.
    """


class IndexOutOfRangeError(RotationCurveError, IndexError):
    """
    Raised when a :class:`.RotationCurve` cache accessor is called with an index outside of ``[0, last_index]``.

    This always indicates a programming error in the caller.
    """
