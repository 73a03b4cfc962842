"""
This module provides the quaternion algebra used by the interpolation techniques.

All of the routines here operate on rotation quaternions of the form :math:`[q_x, q_y, q_z, q_s]` (vector first,
scalar last) stored as numpy arrays.  The algebraic routines (multiplication, conjugation, the exponential and
logarithm maps) are vectorized so that multiple quaternions can be processed at once by specifying them as the columns
of a :math:`4\\times n` array.  The interpolation routines (:func:`nlerp`, :func:`quick_slerp`, :func:`slerp`,
:func:`squad`) work on a single pair of quaternions.
"""

import logging

import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY, F_SCALAR_OR_ARRAY
from rotcurve.errors import PreconditionError
from rotcurve.quaternions._helpers import _check_quaternion_array_and_shape

__all__ = ["quaternion_normalize", "quaternion_unit", "quaternion_conjugate", "quaternion_inverse",
           "quaternion_multiplication", "quaternion_dot", "quaternion_log", "quaternion_exp", "quaternion_power",
           "nlerp", "quick_slerp", "slerp", "squad_a", "squad", "validate_unit"]


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
This is the logging interface for reporting status, results, issues, and other information.
"""


UNIT_TOLERANCE: float = 1e-4
"""
The default tolerance on the norm of a quaternion for it to be considered a unit quaternion.
"""

NEARLY_PARALLEL: float = 0.9995
"""
Cosine of the angle above which :func:`quick_slerp` falls back to :func:`nlerp`.
"""

SMALL_ANGLE: float = 1e-12
"""
Vector part norm below which :func:`quaternion_log` uses the small angle limit.
"""


def _fraction(time: float, time0: float, time1: float) -> float:
    # compute the fractional percent we are interpolating at
    try:
        return float((time - time0) / (time1 - time0))
    except TypeError:
        raise TypeError('time, time0, and time1 must support subtraction resulting in a type that supports true '
                        'division.  Typically this means they should all be floats')


def quaternion_normalize(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    """
    Normalizes the quaternion(s) such that the scalar term is positive and the length is 1

    :param quaternion: the quaternion(s) to normalize

    :returns: The normalized quaternions
    """

    work_quaternion = _check_quaternion_array_and_shape(quaternion, return_copy=True)

    signs = np.sign(work_quaternion[-1])

    if np.shape(signs):
        signs[signs == 0] = 1
    else:
        signs = signs if signs != 0 else 1

    work_quaternion *= signs/np.linalg.norm(work_quaternion, axis=0, keepdims=True)

    return work_quaternion


def quaternion_unit(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    """
    Scales the quaternion(s) to unit length without changing the sign.

    Unlike :func:`quaternion_normalize` this keeps :math:`\\mathbf{q}` and :math:`-\\mathbf{q}` distinct, which matters
    for interpolation endpoints.

    :param quaternion: the quaternion(s) to scale
    :returns: The unit quaternion(s)
    """

    work_quaternion = _check_quaternion_array_and_shape(quaternion, return_copy=True)

    work_quaternion /= np.linalg.norm(work_quaternion, axis=0, keepdims=True)

    return work_quaternion


def quaternion_conjugate(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    This function returns the conjugate of the quaternion(s), formed by negating the vector portion:

    .. math::
        \mathbf{q}^*=\left[\begin{array}{c}-\mathbf{q}_v\\ q_s\end{array}\right]

    For a unit quaternion the conjugate is also the inverse.

    :param quaternion: The quaternion(s) to conjugate
    :return: the conjugate quaternion(s)
    """

    # ensure the value is an array and break mutability
    quaternion = _check_quaternion_array_and_shape(quaternion, return_copy=True)

    # negate the vector portion
    quaternion[:3] *= -1

    return quaternion


def quaternion_inverse(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    This function provides the multiplicative inverse of the quaternion(s).

    The inverse is defined such that :math:`\mathbf{q}\otimes\mathbf{q}^{-1}=\mathbf{q}_I` where
    :math:`\mathbf{q}_I=[0, 0, 0, 1]` is the identity quaternion.  It is computed as
    :math:`\mathbf{q}^*/\left\|\mathbf{q}\right\|^2` so that it is valid for quaternions that are not of unit length.

    :param quaternion: The quaternion(s) to be inverted
    :return: the inverse quaternion(s)
    """

    quaternion = _check_quaternion_array_and_shape(quaternion)

    return quaternion_conjugate(quaternion) / (quaternion * quaternion).sum(axis=0)


def quaternion_multiplication(quaternion_1_in: ARRAY_LIKE,
                              quaternion_2_in: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    This function performs the hamiltonian quaternion multiplication operation.

    Mathematically this is given by:

    .. math::
        \mathbf{q}_1\otimes\mathbf{q}_2=\left[\begin{array}{c}q_{s1}\mathbf{q}_{v2} + q_{s2}\mathbf{q}_{v1} +
        \mathbf{q}_{v1}\times\mathbf{q}_{v2}\\
        q_{s1}q_{s2}-\mathbf{q}_{v1}^T\mathbf{q}_{v2}\end{array}\right]

    so that ``quaternion_multiplication(q_b, q_a)`` applies the rotation ``q_a`` first and ``q_b`` second.

    This function is vectorized, therefore you can input multiple quaternions as a 4xn array where each column is an
    independent quaternion.

    :param quaternion_1_in: The first quaternion to multiply
    :param quaternion_2_in: The second quaternion to multiply
    :return: The hamiltonian product of quaternion_1 and quaternion_2
    """

    quaternion_1 = _check_quaternion_array_and_shape(quaternion_1_in)
    quaternion_2 = _check_quaternion_array_and_shape(quaternion_2_in)

    qs1 = quaternion_1[-1]
    qv1 = quaternion_1[0:3]

    qs2 = quaternion_2[-1]
    qv2 = quaternion_2[0:3]

    qout = np.concatenate([qs1 * qv2 + qs2 * qv1 + np.cross(qv1, qv2, axis=0),
                           [qs1 * qs2 - (qv1 * qv2).sum(axis=0)]], axis=0)

    return qout


def quaternion_dot(quaternion_1_in: ARRAY_LIKE, quaternion_2_in: ARRAY_LIKE) -> F_SCALAR_OR_ARRAY:
    """
    Returns the 4 dimensional inner product of the quaternion(s).

    For unit quaternions this is the cosine of half the angle between the rotations.  A negative value means the two
    quaternions lie in opposite hemispheres of the double cover.

    :param quaternion_1_in: The first quaternion(s)
    :param quaternion_2_in: The second quaternion(s)
    :return: The inner product (one value per column)
    """

    quaternion_1 = _check_quaternion_array_and_shape(quaternion_1_in)
    quaternion_2 = _check_quaternion_array_and_shape(quaternion_2_in)

    return (quaternion_1 * quaternion_2).sum(axis=0)


def quaternion_log(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    This function computes the natural logarithm of the quaternion(s).

    .. math::
        \text{log}(\mathbf{q})=\left[\begin{array}{c}\frac{\mathbf{q}_v}{\left\|\mathbf{q}_v\right\|}
        \text{atan2}(\left\|\mathbf{q}_v\right\|, q_s)\\
        \text{ln}\left\|\mathbf{q}\right\|\end{array}\right]

    For a unit quaternion the scalar part is 0 and the vector part is half of the rotation vector.  When the vector
    part is shorter than :data:`SMALL_ANGLE` the factor :math:`\text{atan2}(v, q_s)/v` is replaced by its limit
    :math:`1/\left\|\mathbf{q}\right\|`.  The rotation axis of a quaternion close to :math:`-\mathbf{q}_I` is undefined;
    in that case the (tiny) vector part is passed through.

    This function is vectorized over columns.

    :param quaternion: The quaternion(s) to take the logarithm of
    :return: The logarithm quaternion(s)
    """

    quaternion = _check_quaternion_array_and_shape(quaternion)

    qv = quaternion[:3]
    qs = quaternion[-1]

    vector_norm = np.linalg.norm(qv, axis=0)
    norm = np.linalg.norm(quaternion, axis=0)

    small = vector_norm < SMALL_ANGLE

    coefficient = np.where(small, 1 / norm, np.arctan2(vector_norm, qs) / np.where(small, 1, vector_norm))

    return np.concatenate([qv * coefficient, [np.log(norm)]], axis=0)


def quaternion_exp(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    This function computes the exponential of the quaternion(s).

    .. math::
        \text{exp}(\mathbf{q})=e^{q_s}\left[\begin{array}{c}\frac{\text{sin}\left\|\mathbf{q}_v\right\|}
        {\left\|\mathbf{q}_v\right\|}\mathbf{q}_v\\
        \text{cos}\left\|\mathbf{q}_v\right\|\end{array}\right]

    The factor :math:`\text{sin}(v)/v` is evaluated with :func:`numpy.sinc` so it is exact as :math:`v\rightarrow 0`.

    This function is vectorized over columns.

    :param quaternion: The quaternion(s) to exponentiate
    :return: The exponential quaternion(s)
    """

    quaternion = _check_quaternion_array_and_shape(quaternion)

    qv = quaternion[:3]
    qs = quaternion[-1]

    angle = np.linalg.norm(qv, axis=0)
    scale = np.exp(qs)

    return np.concatenate([scale * np.sinc(angle / np.pi) * qv, [scale * np.cos(angle)]], axis=0)


def quaternion_power(quaternion: ARRAY_LIKE, exponent: float) -> DOUBLE_ARRAY:
    r"""
    Raises the quaternion(s) to a real power using :math:`\mathbf{q}^t=\text{exp}(t\,\text{log}(\mathbf{q}))`.

    For a unit quaternion this scales the rotation angle by ``exponent`` while keeping the axis.

    :param quaternion: The quaternion(s) to raise to a power
    :param exponent: The power
    :return: The resulting quaternion(s)
    """

    return quaternion_exp(exponent * quaternion_log(quaternion))


def nlerp(quaternion0: ARRAY_LIKE, quaternion1: ARRAY_LIKE,
          time: float, time0: float = 0, time1: float = 1) -> DOUBLE_ARRAY:
    r"""
    This function performs normalized linear interpolation of rotation quaternions.

    NLERP of quaternions involves first performing a linear interpolation between the two vectors, and then normalizing
    the interpolated result to have unit length.  That is:

    .. math::
        \mathbf{q}=\frac{\mathbf{q}_0(1-p)+\mathbf{q}_1p}
        {\left\|\mathbf{q}_0(1-p)+\mathbf{q}_1p\right\|}

    where :math:`p` is the fractional percent of the way between :math:`\mathbf{q}_0` and :math:`\mathbf{q}_1`.  If the
    inner product of the quaternions is negative, :math:`\mathbf{q}_1` is negated first so that the blend stays in one
    hemisphere (otherwise :math:`\mathbf{q}` and :math:`-\mathbf{q}` would cancel out half way).

    You can either specify `time` as the fractional percent, or specify `time0` and `time1` to be the times
    corresponding to the first and second quaternion respectively.

    .. warning::
        NLERP does not perform a constant angular velocity interpolation, therefore it is not well suited to
        interpolating over large angles.  Use :func:`slerp` for that.

    :param quaternion0: The starting quaternion(s)
    :param quaternion1: The ending quaternion(s)
    :param time: The time to interpolate the quaternions at, as a fractional percent or as the actual time between
                `time0` and `time1`
    :param time0: the time corresponding to the first quaternion(s)
    :param time1: the time corresponding to the second quaternion(s)
    :return: The interpolated quaternion(s)
    """

    dt = _fraction(time, time0, time1)

    q0 = _check_quaternion_array_and_shape(quaternion0)
    q1 = _check_quaternion_array_and_shape(quaternion1)

    # keep the blend in the hemisphere of q0
    signs = np.where(quaternion_dot(q0, q1) < 0, -1.0, 1.0)

    q = q0 * (1 - dt) + signs * q1 * dt

    q /= np.linalg.norm(q, axis=0, keepdims=True)

    return q


def quick_slerp(quaternion0: ARRAY_LIKE, quaternion1: ARRAY_LIKE,
                time: float, time0: float = 0, time1: float = 1) -> DOUBLE_ARRAY:
    r"""
    This function performs spherical linear interpolation using the closed form great circle formula.

    .. math::
        \omega = \text{cos}^{-1}(\mathbf{q}_0^T\mathbf{q}_1)\\
        \mathbf{q}=\mathbf{q}_0\text{cos}(p\omega)+
        \text{sin}(p\omega)\frac{\mathbf{q}_1-\mathbf{q}_0\text{cos}(\omega)}
        {\left\|\mathbf{q}_1-\mathbf{q}_0\text{cos}(\omega)\right\|}

    The shorter arc is always taken (:math:`\mathbf{q}_1` is negated when the inner product is negative) and when the
    quaternions are nearly parallel (:data:`NEARLY_PARALLEL`) the function reverts to :func:`nlerp`.  This avoids the
    logarithm and exponential maps used by :func:`slerp` at the cost of a small error.

    Unlike :func:`nlerp` this only works on a single pair of quaternions.

    :param quaternion0: The starting quaternion
    :param quaternion1: The ending quaternion
    :param time: The time to interpolate the quaternions at, as a fractional percent or as the actual time between
                `time0` and `time1`
    :param time0: the time corresponding to the first quaternion
    :param time1: the time corresponding to the second quaternion
    :return: The interpolated quaternion
    """

    dt = _fraction(time, time0, time1)

    q0 = quaternion_unit(quaternion0)
    q1 = quaternion_unit(quaternion1)

    # get the cosine of the angle between the quaternions
    cos_angle = np.inner(q0, q1)

    if cos_angle < 0:
        # if the dot product is negative negate the second quaternion to ensure the shorter path is taken
        q1 *= -1
        cos_angle *= -1

    if cos_angle > NEARLY_PARALLEL:
        # if the quaternions are really close revert to nlerp
        return nlerp(q0, q1, dt)

    angle = np.arccos(cos_angle) * dt

    # form an orthonormal basis
    qb = q1 - q0 * cos_angle
    qb /= np.linalg.norm(qb)

    q = q0 * np.cos(angle) + qb * np.sin(angle)
    q /= np.linalg.norm(q)

    return q


def slerp(quaternion0: ARRAY_LIKE, quaternion1: ARRAY_LIKE,
          time: float, time0: float = 0, time1: float = 1, shortest_path: bool = True) -> DOUBLE_ARRAY:
    r"""
    This function performs exact spherical linear interpolation on the quaternion manifold.

    .. math::
        \mathbf{q}=\mathbf{q}_0\otimes\left(\mathbf{q}_0^*\otimes\mathbf{q}_1\right)^p

    where the power is evaluated with :func:`quaternion_power`.  This gives a constant angular velocity along the great
    circle through the two quaternions.  When `shortest_path` is ``True`` and the inner product of the quaternions is
    negative, :math:`\mathbf{q}_1` is negated first so that the interpolation does not go the long way around.  The
    Squad construction (:func:`squad`) disables this since its control quaternions are already sign consistent.

    :param quaternion0: The starting quaternion
    :param quaternion1: The ending quaternion
    :param time: The time to interpolate the quaternions at, as a fractional percent or as the actual time between
                `time0` and `time1`
    :param time0: the time corresponding to the first quaternion
    :param time1: the time corresponding to the second quaternion
    :param shortest_path: Whether to correct the sign of the second quaternion
    :return: The interpolated quaternion
    """

    dt = _fraction(time, time0, time1)

    q0 = _check_quaternion_array_and_shape(quaternion0)
    q1 = _check_quaternion_array_and_shape(quaternion1)

    if shortest_path and np.inner(q0, q1) < 0:
        q1 = -q1

    ratio = quaternion_multiplication(quaternion_conjugate(q0), q1)

    return quaternion_multiplication(q0, quaternion_power(ratio, dt))


def squad_a(quaternion_previous: ARRAY_LIKE, quaternion_current: ARRAY_LIKE,
            quaternion_next: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    Computes the Squad control quaternion at `quaternion_current`.

    .. math::
        \mathbf{a}_i=\mathbf{q}_i\otimes\text{exp}\left(-\frac{\text{log}(\mathbf{q}_i^*\otimes\mathbf{q}_{i-1})+
        \text{log}(\mathbf{q}_i^*\otimes\mathbf{q}_{i+1})}{4}\right)

    This choice makes the first derivative of the Squad curve continuous at :math:`\mathbf{q}_i`.  The three inputs
    should already be sign corrected so that consecutive inner products are non-negative.

    :param quaternion_previous: The keyframe quaternion before the current one
    :param quaternion_current: The keyframe quaternion to compute the control point for
    :param quaternion_next: The keyframe quaternion after the current one
    :return: The control quaternion
    """

    conjugate = quaternion_conjugate(quaternion_current)

    tangent = (quaternion_log(quaternion_multiplication(conjugate, quaternion_previous)) +
               quaternion_log(quaternion_multiplication(conjugate, quaternion_next)))

    return quaternion_multiplication(quaternion_current, quaternion_exp(-0.25 * tangent))


def squad(quaternion1: ARRAY_LIKE, control1: ARRAY_LIKE, control2: ARRAY_LIKE, quaternion2: ARRAY_LIKE,
          time: float) -> DOUBLE_ARRAY:
    r"""
    Performs spherical quadrangle (Squad) interpolation between `quaternion1` and `quaternion2`.

    .. math::
        \text{squad}(p)=\text{slerp}\left(2p(1-p), \text{slerp}(p, \mathbf{q}_1, \mathbf{q}_2),
        \text{slerp}(p, \mathbf{a}_1, \mathbf{a}_2)\right)

    where the control quaternions :math:`\mathbf{a}_1` and :math:`\mathbf{a}_2` come from :func:`squad_a`.  The inner
    slerps do not correct signs.

    :param quaternion1: The quaternion at the start of the interval (``time == 0``)
    :param control1: The control quaternion for the start of the interval
    :param control2: The control quaternion for the end of the interval
    :param quaternion2: The quaternion at the end of the interval (``time == 1``)
    :param time: The fractional percent through the interval
    :return: The interpolated quaternion
    """

    along_keys = slerp(quaternion1, quaternion2, time, shortest_path=False)
    along_controls = slerp(control1, control2, time, shortest_path=False)

    return slerp(along_keys, along_controls, 2 * time * (1 - time), shortest_path=False)


def validate_unit(quaternion: ARRAY_LIKE, name: str = 'quaternion', tolerance: float = UNIT_TOLERANCE,
                  strict: bool = True) -> DOUBLE_ARRAY:
    """
    Checks that a quaternion has unit length within `tolerance`.

    If it does not and `strict` is ``True`` a :class:`.PreconditionError` is raised.  Otherwise the quaternion is
    rescaled to unit length and a warning is logged.

    :param quaternion: The quaternion to check
    :param name: The name of the quaternion used in the messages
    :param tolerance: The allowed deviation of the norm from 1
    :param strict: Whether to raise instead of renormalizing
    :return: The (possibly rescaled) quaternion
    :raises PreconditionError: If the quaternion is not of unit length and `strict` is ``True``, or it is zero
    """

    quaternion = _check_quaternion_array_and_shape(quaternion)

    norm = float(np.linalg.norm(quaternion))

    if abs(norm - 1) <= tolerance:
        return quaternion

    if strict or norm == 0:
        raise PreconditionError(f'{name} must be a unit quaternion but its norm is {norm} '
                                f'(tolerance {tolerance})')

    _LOGGER.warning(f'{name} has norm {norm}, renormalizing')

    return quaternion / norm
