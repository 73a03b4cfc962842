# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module provides techniques for smoothing the rotations of a keyframe sequence.

Smoothing replaces every sample with the normalized, triangular weighted sum of the samples within half a window
width of it in time.  A sample at time distance ``dt`` from the sample being smoothed gets weight
``1 - dt / (width / 2)``; samples at or beyond half the width get no weight.  Neighbors are sign aligned with the
sample being smoothed before they are summed so that the double cover of the rotations by the unit quaternions does
not cancel contributions.

The cyclic variant measures time distance around the loop so that samples near the end of the cycle also smooth the
samples near its start.
"""

import logging

from enum import Enum

import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY, NONEARRAY
from rotcurve.curves import check_times, _check_keyframes
from rotcurve.errors import InvalidArgumentError, PreconditionError


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
This is the logging interface for reporting status, results, issues, and other information.
"""


class SmoothingTechnique(Enum):
    """
    This enumeration lists the smoothing techniques for time sequences of quaternions.
    """

    LOOP_NLERP = 'LoopNlerp'
    """
    Cyclic normalized linear (Nlerp) smoothing.
    """

    NLERP = 'Nlerp'
    """
    Acyclic normalized linear (Nlerp) smoothing.
    """

    @property
    def is_cyclic(self) -> bool:
        """
        Whether this technique measures time distance around the loop.
        """

        return self is SmoothingTechnique.LOOP_NLERP

    def smooth(self, times: ARRAY_LIKE, cycle_time: float, samples: ARRAY_LIKE, width: float,
               out: NONEARRAY = None) -> DOUBLE_ARRAY:
        """
        Smooths the quaternions in a time sequence using this technique.

        For the cyclic technique a final sample sitting exactly on the cycle time duplicates the first sample.  It is
        ignored and replaced with the smoothed first sample, unless that would leave fewer than 2 samples in which case
        the sequence is smoothed acyclically.

        :param times: The sample times (length n > 0, strictly ascending, non-negative)
        :param cycle_time: The end time of the loop (not less than ``times[-1]``)
        :param samples: The quaternions to smooth as an n x 4 array
        :param width: The width of the time window (in ``[0, cycle_time]``).  A width of 0 returns the samples unchanged
        :param out: An optional n x 4 array to store the result in.  It must not be `samples`
        :return: The smoothed quaternions as an n x 4 array (`out` if it was supplied)
        :raises InvalidArgumentError: If the sample data is malformed or `width` is out of range
        """

        times, cycle_time, samples = _check_keyframes(times, cycle_time, samples)
        check_times(times)

        if not 0 <= width <= cycle_time:
            raise InvalidArgumentError(f'The width must be in [0, {cycle_time}], not {width}')

        last = times.size - 1

        if width == 0:
            result = samples

        elif not self.is_cyclic:
            result = lerp(times, samples, width)

        elif times[last] == cycle_time:
            if last > 1:
                result = samples.copy()
                result[:last] = loop_lerp(last - 1, times, cycle_time, samples, width)
                result[last] = result[0]
            else:
                _LOGGER.debug('There are too few samples to smooth cyclically, using acyclic smoothing')
                result = lerp(times, samples, width)

        else:
            result = loop_lerp(last, times, cycle_time, samples, width)

        if out is None:
            return result

        out[...] = result

        return out


def _weighted_sum(time_distances: DOUBLE_ARRAY, samples: DOUBLE_ARRAY, width: float) -> DOUBLE_ARRAY:
    """
    Forms the normalized, triangular weighted sums of the samples.

    :param time_distances: The n x n absolute time distances between the samples
    :param samples: The samples as an n x 4 array
    :param width: The width of the time window (positive)
    :return: The smoothed samples as an n x 4 array
    """

    half_width = width / 2

    weights = np.where(time_distances < half_width, 1 - time_distances / half_width, 0.0)

    # align each neighbor with the sample it contributes to
    signs = np.where(samples @ samples.T < 0, -1.0, 1.0)

    sums = (weights * signs) @ samples

    norms = np.linalg.norm(sums, axis=-1, keepdims=True)

    if (norms == 0).any():
        raise PreconditionError('The weighted sum of the samples vanished, the samples must be non-zero')

    return sums / norms


def lerp(times: DOUBLE_ARRAY, samples: DOUBLE_ARRAY, width: float) -> DOUBLE_ARRAY:
    """
    Smooths the quaternions in an acyclic time sequence using normalized linear (Nlerp) smoothing.

    :param times: The sample times in strictly ascending order
    :param samples: The samples as an n x 4 array
    :param width: The width of the time window (positive)
    :return: The smoothed samples as a new n x 4 array
    """

    time_distances = np.abs(times.reshape(-1, 1) - times.reshape(1, -1))

    return _weighted_sum(time_distances, samples, width)


def loop_lerp(last: int, times: DOUBLE_ARRAY, cycle_time: float, samples: DOUBLE_ARRAY,
              width: float) -> DOUBLE_ARRAY:
    """
    Smooths the quaternions in a cyclic time sequence using normalized linear (Nlerp) smoothing.

    Only the samples ``[0, last]`` are used and returned.

    :param last: The index of the last sample to use (at least 1)
    :param times: The sample times in strictly ascending order
    :param cycle_time: The end time of the loop (after ``times[last]``)
    :param samples: The samples as an n x 4 array
    :param width: The width of the time window (positive, not more than `cycle_time`)
    :return: The smoothed samples as a new (last + 1) x 4 array
    """

    if last < 1:
        raise InvalidArgumentError(f'Cyclic smoothing needs at least 2 samples, the last index is {last}')

    if not cycle_time > times[last]:
        raise InvalidArgumentError(f'The cycle time ({cycle_time}) must be after the last sample used '
                                   f'({times[last]})')

    times = times[:last + 1]

    time_distances = np.mod(times.reshape(-1, 1) - times.reshape(1, -1), cycle_time)
    time_distances = np.where(time_distances > cycle_time / 2, cycle_time - time_distances, time_distances)

    return _weighted_sum(time_distances, samples[:last + 1], width)
