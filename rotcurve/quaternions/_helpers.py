import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY


def _check_array_and_shape(input: ARRAY_LIKE,
                           return_copy: bool = False,
                           first_axis_length: int | None = None,
                           last_axis_length: int | None = None) -> DOUBLE_ARRAY:
    in_shape = np.shape(input)

    if not in_shape:
        raise ValueError('The input must be shaped')

    if first_axis_length is not None and in_shape[0] != first_axis_length:
        raise ValueError(f'The length of the first axis must be {first_axis_length}')

    if last_axis_length is not None and in_shape[-1] != last_axis_length:
        raise ValueError(f'The length of the last axis must be {last_axis_length}')

    if return_copy:
        return np.array(input, dtype=np.float64)

    # ensure the value is an array
    return np.asanyarray(input, dtype=np.float64)


def _check_quaternion_array_and_shape(quaternion: ARRAY_LIKE, return_copy: bool = False) -> DOUBLE_ARRAY:
    return _check_array_and_shape(quaternion, return_copy, first_axis_length=4)


def _check_vector_array_and_shape(vector: ARRAY_LIKE, return_copy: bool = False) -> DOUBLE_ARRAY:
    return _check_array_and_shape(vector, return_copy, first_axis_length=3)


def _check_keyframe_quaternions(quaternions: ARRAY_LIKE, return_copy: bool = True) -> DOUBLE_ARRAY:
    """
    Returns a sequence of keyframe quaternions as a float array, one quaternion per row (shape ``(n, 4)``).
    """

    quaternions = _check_array_and_shape(quaternions, return_copy, last_axis_length=4)

    if quaternions.ndim != 2:
        raise ValueError('The keyframe quaternions must be a 2D array with one quaternion per row')

    return quaternions
