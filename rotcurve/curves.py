# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module provides the :class:`RotationCurve` class which stores a keyframe sequence of rotation quaternions along
with the per-segment spline parameters computed by :meth:`.Technique.precompute`.

Description
-----------

A rotation curve holds the keyframe times, the cycle time used by the looping techniques, the keyframe quaternions
and, for the spline techniques, a cache holding for every segment the (sign corrected) end quaternion, the two Squad
control quaternions, and the duration of the segment.  Evaluating a curve from the cache only requires a segment
lookup and a single Squad evaluation, which is what makes repeated sampling (once per frame during playback) cheap.

Use
---

A :class:`RotationCurve` is read only once it is created.  All of its arrays are copies of the inputs that are marked
as not writeable.  The spline cache is filled in through a :class:`RotationCurveBuilder`, whose :meth:`~.build` method
refuses to create a curve with a partially populated cache.  Generally you will not use the builder directly and will
instead call :meth:`.Technique.precompute`, which returns a fully built curve.
"""

import logging

import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY
from rotcurve.errors import InvalidArgumentError, IndexOutOfRangeError, PreconditionError
from rotcurve.quaternions._helpers import _check_keyframe_quaternions, _check_quaternion_array_and_shape


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
This is the logging interface for reporting status, results, issues, and other information.
"""


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def _check_keyframes(times: ARRAY_LIKE, cycle_time: float, quaternions: ARRAY_LIKE,
                     return_copy: bool = True) -> tuple[DOUBLE_ARRAY, float, DOUBLE_ARRAY]:
    """
    Converts and checks keyframe data, returning float arrays (copies unless `return_copy` is False).

    :raises InvalidArgumentError: if the data cannot form a curve
    """

    times = np.array(times, dtype=np.float64) if return_copy else np.asarray(times, dtype=np.float64)

    if times.ndim != 1:
        raise InvalidArgumentError('The keyframe times must be a 1D array')

    if times.size == 0:
        raise InvalidArgumentError('At least one keyframe is required')

    try:
        quaternions = _check_keyframe_quaternions(quaternions, return_copy)
    except ValueError as err:
        raise InvalidArgumentError(str(err)) from err

    if quaternions.shape[0] != times.size:
        raise InvalidArgumentError(f'The number of keyframe times ({times.size}) must match the number of '
                                   f'quaternions ({quaternions.shape[0]})')

    cycle_time = float(cycle_time)

    if cycle_time < times[-1]:
        raise InvalidArgumentError(f'The cycle time ({cycle_time}) must not be less than the final keyframe time '
                                   f'({times[-1]})')

    return times, cycle_time, quaternions


def check_times(times: DOUBLE_ARRAY) -> None:
    """
    Verifies that keyframe times are non-negative and strictly ascending.

    :param times: The keyframe times
    :raises InvalidArgumentError: If the times are negative or out of order
    """

    if times[0] < 0:
        raise InvalidArgumentError(f'The keyframe times must be non-negative (times[0] = {times[0]})')

    if (np.diff(times) <= 0).any():
        raise InvalidArgumentError('The keyframe times must be in strictly ascending order')


class RotationCurve:
    """
    An immutable keyframe sequence of rotation quaternions with an optional precomputed spline cache.

    The curve stores the keyframe :attr:`times`, the :attr:`cycle_time` used by the looping techniques and the keyframe
    :attr:`quaternions` (one per row, scalar last).  The :attr:`last_index` is the index of the final keyframe actually
    used by the technique that built the curve; the looping techniques drop a final keyframe that sits exactly on the
    loop seam.  :attr:`is_cyclic` records whether the curve was laid out for looping evaluation, in which case the final
    segment closes the loop back onto the first keyframe.

    The cache accessors (:meth:`get_end_value`, :meth:`get_control_point1`, :meth:`get_control_point2`,
    :meth:`get_interval_duration`) are only available when the curve was built with spline parameters (see
    :attr:`is_precomputed`).  All accessors are O(1) and raise :class:`.IndexOutOfRangeError` if the requested segment
    is outside ``[0, last_index]``.

    Unit length of the quaternions is not checked here; that is left to the interpolation techniques which check it at
    a configurable tolerance.
    """

    def __init__(self, times: ARRAY_LIKE, cycle_time: float, quaternions: ARRAY_LIKE,
                 last_index: int | None = None, cyclic: bool = False):
        """
        :param times: The keyframe times (length n, ascending, non-negative)
        :param cycle_time: The end time of the loop (not less than the final keyframe time)
        :param quaternions: The keyframe quaternions as an n x 4 array
        :param last_index: The index of the last keyframe to use.  Defaults to ``n - 1``
        :param cyclic: Whether the segments are laid out for looping evaluation
        :raises InvalidArgumentError: If the lengths differ, there are no keyframes, or the cycle time is too small
        """

        times, cycle_time, quaternions = _check_keyframes(times, cycle_time, quaternions)

        if last_index is None:
            last_index = times.size - 1

        if not 0 <= last_index < times.size:
            raise InvalidArgumentError(f'The last index must be in [0, {times.size - 1}], not {last_index}')

        self._times: DOUBLE_ARRAY = _read_only(times)
        self._cycle_time: float = cycle_time
        self._quaternions: DOUBLE_ARRAY = _read_only(quaternions)
        self._last_index: int = int(last_index)
        self._cyclic: bool = bool(cyclic)

        self._end_values: DOUBLE_ARRAY | None = None
        self._control_points1: DOUBLE_ARRAY | None = None
        self._control_points2: DOUBLE_ARRAY | None = None
        self._interval_durations: DOUBLE_ARRAY | None = None

    @classmethod
    def _from_cache(cls, times: DOUBLE_ARRAY, cycle_time: float, quaternions: DOUBLE_ARRAY, last_index: int,
                    cyclic: bool, end_values: DOUBLE_ARRAY, control_points1: DOUBLE_ARRAY,
                    control_points2: DOUBLE_ARRAY, interval_durations: DOUBLE_ARRAY) -> 'RotationCurve':

        curve = cls(times, cycle_time, quaternions, last_index=last_index, cyclic=cyclic)

        curve._end_values = _read_only(end_values)
        curve._control_points1 = _read_only(control_points1)
        curve._control_points2 = _read_only(control_points2)
        curve._interval_durations = _read_only(interval_durations)

        return curve

    @property
    def times(self) -> DOUBLE_ARRAY:
        """
        The keyframe times as a read only array.
        """

        return self._times

    @property
    def cycle_time(self) -> float:
        """
        The end time of the loop for the cyclic techniques.
        """

        return self._cycle_time

    @property
    def quaternions(self) -> DOUBLE_ARRAY:
        """
        The keyframe quaternions as a read only n x 4 array.
        """

        return self._quaternions

    @property
    def last_index(self) -> int:
        """
        The index of the last keyframe used by the technique that built this curve.
        """

        return self._last_index

    @property
    def is_cyclic(self) -> bool:
        """
        Whether the segments of this curve loop back onto the first keyframe.
        """

        return self._cyclic

    @property
    def is_precomputed(self) -> bool:
        """
        Whether this curve carries precomputed spline parameters.
        """

        return self._control_points1 is not None

    def _check_index(self, index: int) -> int:

        if not 0 <= index <= self._last_index:
            raise IndexOutOfRangeError(f'Segment index {index} is outside of [0, {self._last_index}]')

        return index

    def _cached(self, cache: DOUBLE_ARRAY | None, index: int) -> DOUBLE_ARRAY:

        self._check_index(index)

        if cache is None:
            raise PreconditionError('This curve has no precomputed spline parameters')

        return cache[index]

    def get_start_value(self, index: int) -> DOUBLE_ARRAY:
        """
        Returns the keyframe quaternion at the start of segment `index`.
        """

        return self._quaternions[self._check_index(index)]

    def get_end_value(self, index: int) -> DOUBLE_ARRAY:
        """
        Returns the (sign corrected) quaternion at the end of segment `index`.
        """

        return self._cached(self._end_values, index)

    def get_control_point1(self, index: int) -> DOUBLE_ARRAY:
        """
        Returns the Squad control quaternion for the start of segment `index`.
        """

        return self._cached(self._control_points1, index)

    def get_control_point2(self, index: int) -> DOUBLE_ARRAY:
        """
        Returns the Squad control quaternion for the end of segment `index`.
        """

        return self._cached(self._control_points2, index)

    def get_interval_duration(self, index: int) -> float:
        """
        Returns the duration of segment `index`.
        """

        return float(self._cached(self._interval_durations, index))

    def __repr__(self) -> str:
        return (f'RotationCurve(keyframes={self._times.size}, cycle_time={self._cycle_time!r}, '
                f'last_index={self._last_index}, cyclic={self._cyclic}, precomputed={self.is_precomputed})')


class RotationCurveBuilder:
    """
    Collects the per-segment spline parameters for a :class:`RotationCurve`.

    Call :meth:`set_last_index` first, then :meth:`set_parameters` and :meth:`set_control_points` for every segment in
    ``[0, last_index]``, then :meth:`build`.  The builder is the only way to populate a curve's cache, so a curve can
    never be read while it is still being filled in.
    """

    def __init__(self, times: ARRAY_LIKE, cycle_time: float, quaternions: ARRAY_LIKE):
        """
        :param times: The keyframe times (length n, ascending, non-negative)
        :param cycle_time: The end time of the loop (not less than the final keyframe time)
        :param quaternions: The keyframe quaternions as an n x 4 array
        :raises InvalidArgumentError: If the keyframe data cannot form a curve
        """

        self.times, self.cycle_time, self.quaternions = _check_keyframes(times, cycle_time, quaternions)

        self.last_index: int | None = None
        self.cyclic: bool = False

        self._end_values: DOUBLE_ARRAY = np.empty((0, 4))
        self._control_points1: DOUBLE_ARRAY = np.empty((0, 4))
        self._control_points2: DOUBLE_ARRAY = np.empty((0, 4))
        self._interval_durations: DOUBLE_ARRAY = np.empty(0)
        self._have_parameters: np.ndarray = np.empty(0, dtype=bool)
        self._have_controls: np.ndarray = np.empty(0, dtype=bool)

    def set_last_index(self, last_index: int, cyclic: bool = False) -> None:
        """
        Sets the index of the last keyframe to use and allocates the cache (discarding anything set so far).

        :param last_index: The index of the last keyframe to use
        :param cyclic: Whether the final segment closes the loop back onto the first keyframe
        :raises InvalidArgumentError: If `last_index` is not a valid keyframe index
        """

        if not 0 <= last_index < self.times.size:
            raise InvalidArgumentError(f'The last index must be in [0, {self.times.size - 1}], not {last_index}')

        self.last_index = int(last_index)
        self.cyclic = bool(cyclic)

        size = self.last_index + 1

        self._end_values = np.full((size, 4), np.nan)
        self._control_points1 = np.full((size, 4), np.nan)
        self._control_points2 = np.full((size, 4), np.nan)
        self._interval_durations = np.full(size, np.nan)
        self._have_parameters = np.zeros(size, dtype=bool)
        self._have_controls = np.zeros(size, dtype=bool)

    def _check_index(self, index: int) -> None:

        if self.last_index is None:
            raise PreconditionError('set_last_index must be called before setting segment parameters')

        if not 0 <= index <= self.last_index:
            raise IndexOutOfRangeError(f'Segment index {index} is outside of [0, {self.last_index}]')

    def set_parameters(self, index: int, end_value: ARRAY_LIKE, interval_duration: float) -> None:
        """
        Sets the end quaternion and the duration of segment `index`.

        :param index: The segment index
        :param end_value: The quaternion at the end of the segment
        :param interval_duration: The duration of the segment (must be positive)
        """

        self._check_index(index)

        if not interval_duration > 0:
            raise InvalidArgumentError(f'The interval duration must be positive, not {interval_duration}')

        self._end_values[index] = _check_quaternion_array_and_shape(end_value)
        self._interval_durations[index] = interval_duration
        self._have_parameters[index] = True

    def set_control_points(self, index: int, control_point1: ARRAY_LIKE, control_point2: ARRAY_LIKE) -> None:
        """
        Sets the two Squad control quaternions of segment `index`.

        :param index: The segment index
        :param control_point1: The control quaternion for the start of the segment
        :param control_point2: The control quaternion for the end of the segment
        """

        self._check_index(index)

        self._control_points1[index] = _check_quaternion_array_and_shape(control_point1)
        self._control_points2[index] = _check_quaternion_array_and_shape(control_point2)
        self._have_controls[index] = True

    def build(self) -> RotationCurve:
        """
        Creates the read only :class:`RotationCurve`.

        :return: The curve with its spline cache populated
        :raises PreconditionError: If any segment is missing its parameters or control points
        """

        if self.last_index is None:
            raise PreconditionError('set_last_index must be called before building the curve')

        missing = np.flatnonzero(~(self._have_parameters & self._have_controls))

        if missing.size:
            raise PreconditionError(f'The spline parameters are missing for segments {missing.tolist()}')

        _LOGGER.debug(f'Built a rotation curve with {self.last_index + 1} precomputed segments')

        return RotationCurve._from_cache(self.times, self.cycle_time, self.quaternions, self.last_index, self.cyclic,
                                         self._end_values.copy(), self._control_points1.copy(),
                                         self._control_points2.copy(), self._interval_durations.copy())
