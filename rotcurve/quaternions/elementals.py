import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY
from rotcurve.quaternions._helpers import _check_vector_array_and_shape


def skew(vector: ARRAY_LIKE) -> DOUBLE_ARRAY:
    r"""
    Returns the cross product matrix of a vector, :math:`\left[\mathbf{a}\times\right]\mathbf{b}=\mathbf{a}\times
    \mathbf{b}`.

    .. math::
        \left[\mathbf{a}\times\right] = \left[\begin{array}{ccc} 0 & -a_3 & a_2 \\
        a_3 & 0 & -a_1 \\
        -a_2 & a_1 & 0 \end{array}\right]

    Multiple vectors can be given as the columns of a 3xn array, in which case the result is nx3x3 with one matrix per
    vector.

    :param vector: The vector(s)
    :return: The skew symmetric matrix(ces)
    """

    vector = _check_vector_array_and_shape(vector)

    columns = vector.reshape(3, -1)

    matrices = np.zeros((columns.shape[1], 3, 3))

    matrices[:, 0, 1], matrices[:, 0, 2] = -columns[2], columns[1]
    matrices[:, 1, 0], matrices[:, 1, 2] = columns[2], -columns[0]
    matrices[:, 2, 0], matrices[:, 2, 1] = -columns[1], columns[0]

    return matrices.squeeze(axis=0) if vector.ndim == 1 else matrices
