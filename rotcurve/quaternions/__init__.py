"""
This package holds the quaternion math that the interpolation techniques are built on.

Quaternions are stored as numpy arrays of the form :math:`[q_x, q_y, q_z, q_s]` where :math:`q_s` is the scalar part,
so that :math:`\\mathbf{q}=[\\text{sin}(\\theta/2)\\hat{\\mathbf{x}}, \\text{cos}(\\theta/2)]` rotates by
:math:`\\theta` about the unit axis :math:`\\hat{\\mathbf{x}}`.  The quaternions :math:`\\mathbf{q}` and
:math:`-\\mathbf{q}` represent the same rotation.

The manifold helpers (:func:`quaternion_conjugate`, :func:`quaternion_log`, :func:`quaternion_exp`,
:func:`quaternion_power`) are kept apart from the interpolation logic because both :func:`slerp` and the Squad spline
(:func:`squad_a`, :func:`squad`) reuse them.
"""

from rotcurve.quaternions.quaternion_math import (quaternion_normalize, quaternion_unit, quaternion_conjugate,
                                                  quaternion_inverse, quaternion_multiplication, quaternion_dot,
                                                  quaternion_log, quaternion_exp, quaternion_power,
                                                  nlerp, quick_slerp, slerp, squad_a, squad, validate_unit,
                                                  UNIT_TOLERANCE)

from rotcurve.quaternions.conversions import (quaternion_to_rotvec, quaternion_to_rotmat, rotvec_to_quaternion,
                                              axis_angle_to_quaternion)

from rotcurve.quaternions.elementals import skew

__all__ = ['quaternion_normalize', 'quaternion_unit', 'quaternion_conjugate', 'quaternion_inverse',
           'quaternion_multiplication', 'quaternion_dot', 'quaternion_log', 'quaternion_exp', 'quaternion_power',
           'nlerp', 'quick_slerp', 'slerp', 'squad_a', 'squad', 'validate_unit', 'UNIT_TOLERANCE',
           'quaternion_to_rotvec', 'quaternion_to_rotmat', 'rotvec_to_quaternion', 'axis_angle_to_quaternion', 'skew']
