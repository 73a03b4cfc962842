"""
Conversions between rotation quaternions and the other rotation representations a bone posing layer works with.

The rotation vector :math:`\\mathbf{v}=\\theta\\hat{\\mathbf{x}}` is twice the logarithm of the corresponding unit
quaternion, so the conversions here are written in terms of :func:`.quaternion_log` and :func:`.quaternion_exp`.
"""

import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY

from rotcurve.quaternions._helpers import _check_quaternion_array_and_shape, _check_vector_array_and_shape
from rotcurve.quaternions.elementals import skew
from rotcurve.quaternions.quaternion_math import quaternion_exp, quaternion_log


__all__ = ['quaternion_to_rotvec', 'quaternion_to_rotmat', 'rotvec_to_quaternion', 'axis_angle_to_quaternion']


def rotvec_to_quaternion(rot_vec: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    This function converts a rotation vector into a rotation quaternion.

    .. math::
        \mathbf{q} = \text{exp}\left(\left[\begin{array}{c}\mathbf{v}/2\\0\end{array}\right]\right) =
        \left[\begin{array}{c} \text{sin}(\frac{\theta}{2})\hat{\mathbf{x}} \\
        \text{cos}(\frac{\theta}{2})\end{array}\right]

    This function is vectorized over columns (the first axis must have a length of 3).  A zero rotation vector gives the
    identity quaternion.

    :param rot_vec: The rotation vector(s) to convert
    :return: the rotation quaternion(s) corresponding to the input rotation vector(s)
    """

    rot_vec = _check_vector_array_and_shape(rot_vec)

    return quaternion_exp(np.concatenate([rot_vec / 2, np.zeros((1,) + rot_vec.shape[1:])], axis=0))


def quaternion_to_rotvec(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    """
    This function converts a unit rotation quaternion into a rotation vector (twice the vector part of its logarithm).

    This function is vectorized over columns.  Note that :math:`\\mathbf{q}` and :math:`-\\mathbf{q}` give the short
    and the long rotation vector for the same rotation respectively.

    :param quaternion: the rotation quaternion(s) to be converted
    :return: The rotation vector(s) corresponding to the input rotation quaternion(s)
    """

    return 2 * quaternion_log(quaternion)[:3]


def axis_angle_to_quaternion(axis: ARRAY_LIKE, angle: float) -> DOUBLE_ARRAY:
    """
    Returns the unit quaternion rotating by `angle` radians about `axis`.

    :param axis: The rotation axis (does not need to be of unit length)
    :param angle: The rotation angle in radians
    :return: The rotation quaternion
    """

    axis = _check_vector_array_and_shape(axis)

    norm = np.linalg.norm(axis)

    if norm == 0:
        raise ValueError('The rotation axis must not be zero')

    return rotvec_to_quaternion(axis / norm * angle)


def quaternion_to_rotmat(quaternion: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    This function converts a rotation quaternion into its equivalent rotation matrix.

    .. math::
        \mathbf{T} = (q_s^2-\mathbf{q}_v^T\mathbf{q}_v)\mathbf{I}_{3\times 3}+2\mathbf{q}_v\mathbf{q}_v^T+2q_s
        \left[\mathbf{q}_v\times\right]

    so that ``quaternion_to_rotmat(q) @ v`` rotates the vector ``v`` by ``q``.  This function is vectorized over columns;
    the matrices are stacked along the first axis of the result.

    :param quaternion: The rotation quaternion(s) to be converted
    :return: the rotation matrix(ces) corresponding to the input quaternion(s)
    """

    quaternion = _check_quaternion_array_and_shape(quaternion)

    qs = quaternion[-1].reshape(-1, 1, 1)
    qv = quaternion[:3].reshape(3, -1)

    outer = np.einsum('in,jn->nij', qv, qv)

    return ((qs ** 2 - (qv * qv).sum(axis=0).reshape(-1, 1, 1)) * np.eye(3) + 2 * outer +
            2 * qs * skew(qv).reshape(-1, 3, 3)).squeeze()
