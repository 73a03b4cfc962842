# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module implements the interpolation techniques for time sequences of rotation quaternions.

Description
-----------

A keyframe sequence is a list of strictly ascending, non-negative times and the unit quaternions sampled at those
times.  Each :class:`Technique` evaluates the sequence at an arbitrary query time.  The techniques vary along two
axes:

* the :class:`Method` used to blend the samples around the query time: normalized linear (``NLERP``), closed form
  spherical (``QUICK_SLERP``), exact spherical on the quaternion manifold (``SLERP``), or the C1 continuous Squad
  spline through all keyframes (``SPLINE``).
* whether the sequence is acyclic (evaluated once) or cyclic (the ``LOOP_`` techniques, which wrap from the last
  keyframe back to the first after the cycle time).

Every technique first locates the segment containing the query time (the keyframe with the greatest time not after
the query).  Before the first keyframe the first sample is returned and, for the acyclic techniques, at or after the
last keyframe the last sample is returned; there is no extrapolation.

For the cyclic techniques the cycle time closes the loop.  If it is greater than the final keyframe time, an extra
segment runs from the final keyframe back to the first.  If it equals the final keyframe time, the final keyframe is
the loop seam itself and is ignored in favor of the first.  A cycle that would be left with a single segment that way
(two keyframes) cannot loop meaningfully and is evaluated with the acyclic technique of the same method instead.

Use
---

For one off evaluation call :meth:`Technique.interpolate` with the raw keyframe arrays.  When the same track is
sampled repeatedly (every frame during playback) call :meth:`Technique.precompute` once and then
:meth:`Technique.interpolate_curve` with the resulting :class:`.RotationCurve`; for the spline techniques this moves
all of the logarithm/exponential work for the control points out of the per-sample path.  Both paths give the same
results.

Validation is configured through :class:`InterpolationOptions`.  By default quaternions that are not of unit length
within ``1e-4`` raise a :class:`.PreconditionError`; with ``strict=False`` they are renormalized and a warning is
logged instead.
"""

import logging

from dataclasses import dataclass

from enum import Enum

import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY, NONEARRAY
from rotcurve.curves import RotationCurve, RotationCurveBuilder, check_times, _check_keyframes
from rotcurve.errors import InvalidArgumentError, PreconditionError
from rotcurve.quaternions import nlerp, quick_slerp, slerp, squad, squad_a, validate_unit, UNIT_TOLERANCE
from rotcurve.utilities.options import UserOptions


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
This is the logging interface for reporting status, results, issues, and other information.
"""


@dataclass
class InterpolationOptions(UserOptions):
    """
    Options controlling how strictly the interpolation techniques validate their inputs.
    """

    unit_tolerance: float = UNIT_TOLERANCE
    """
    The allowed deviation of a keyframe quaternion's norm from 1.
    """

    strict: bool = True
    """
    Whether a quaternion outside of :attr:`unit_tolerance` raises a :class:`.PreconditionError`.

    When ``False`` the quaternion is renormalized and a warning is logged instead.
    """

    check_times: bool = True
    """
    Whether to verify that the keyframe times are non-negative and strictly ascending.
    """


DEFAULT_OPTIONS = InterpolationOptions()
"""
The options used when none are supplied.
"""


class Method(Enum):
    """
    The blending method of a :class:`Technique`.
    """

    NLERP = 'Nlerp'
    """
    Normalized linear blend of the two samples around the query time.
    """

    QUICK_SLERP = 'QuickSlerp'
    """
    Closed form great circle blend of the two samples around the query time.
    """

    SLERP = 'Slerp'
    """
    Exact great circle blend computed on the quaternion manifold.
    """

    SPLINE = 'Spline'
    """
    Squad cubic spline through all keyframes.
    """


class Technique(Enum):
    """
    This enumeration lists the interpolation techniques for time sequences of unit quaternions.

    The values are the technique names so that a technique can be selected from configuration with
    ``Technique('LoopSpline')``.  Techniques carry no state; the technique is chosen once per track.
    """

    LOOP_NLERP = 'LoopNlerp'
    """
    Cyclic normalized linear (Nlerp) interpolation.
    """

    LOOP_QUICK_SLERP = 'LoopQuickSlerp'
    """
    Cyclic spherical linear (Slerp) interpolation using the closed form shortcut.
    """

    LOOP_SLERP = 'LoopSlerp'
    """
    Cyclic spherical linear (Slerp) or "great arc" interpolation.
    """

    LOOP_SPLINE = 'LoopSpline'
    """
    Cyclic cubic spline interpolation based on the Squad function.
    """

    NLERP = 'Nlerp'
    """
    Acyclic normalized linear (Nlerp) interpolation.
    """

    QUICK_SLERP = 'QuickSlerp'
    """
    Acyclic spherical linear (Slerp) interpolation using the closed form shortcut.
    """

    SLERP = 'Slerp'
    """
    Acyclic spherical linear (Slerp) or "great arc" interpolation.
    """

    SPLINE = 'Spline'
    """
    Acyclic cubic spline interpolation based on the Squad function.
    """

    @property
    def is_cyclic(self) -> bool:
        """
        Whether this technique loops back to the first keyframe after the cycle time.
        """

        return self.value.startswith('Loop')

    @property
    def method(self) -> Method:
        """
        The blending method used by this technique.
        """

        return Method(self.value.removeprefix('Loop'))

    def segment_plan(self, times: DOUBLE_ARRAY, cycle_time: float) -> tuple[bool, int]:
        """
        Decides whether this technique loops for the given keyframes and which keyframe is the last one used.

        :param times: The keyframe times
        :param cycle_time: The end time of the loop
        :return: a tuple of whether the evaluation is cyclic and the index of the last keyframe used
        """

        last_index = times.size - 1

        if not self.is_cyclic:
            return False, last_index

        if times[last_index] == cycle_time:
            if last_index > 1:
                # the final keyframe is the loop seam, which duplicates the first keyframe
                return True, last_index - 1

            _LOGGER.debug(f'{self.value} has a single segment to loop over, using the acyclic technique')
            return False, last_index

        return True, last_index

    def interpolate(self, time: float, times: ARRAY_LIKE, cycle_time: float, quaternions: ARRAY_LIKE,
                    out: NONEARRAY = None, options: InterpolationOptions | None = None) -> DOUBLE_ARRAY:
        """
        Interpolates among unit quaternions in a time sequence using this technique.

        :param time: The query time
        :param times: The keyframe times (length n > 0, strictly ascending, non-negative)
        :param cycle_time: The end time of the loop (not less than ``times[-1]``)
        :param quaternions: The keyframe quaternions as an n x 4 array of unit quaternions
        :param out: An optional length 4 array to store the result in
        :param options: The validation options.  Defaults to :data:`DEFAULT_OPTIONS`
        :return: The interpolated unit quaternion (`out` if it was supplied)
        :raises InvalidArgumentError: If the keyframe data is malformed
        :raises PreconditionError: If a quaternion used is not of unit length (strict validation), or if a cyclic
                                   query time is after the cycle time
        """

        if options is None:
            options = DEFAULT_OPTIONS

        times, cycle_time, quaternions = _check_keyframes(times, cycle_time, quaternions, return_copy=False)

        if options.check_times:
            check_times(times)

        if times.size == 1 or time < times[0]:
            return _store(quaternions[0], out)

        cyclic, last_index = self.segment_plan(times, cycle_time)

        if self.method is Method.SPLINE:
            if cyclic:
                result = loop_spline(time, last_index, times, cycle_time, quaternions, options)
            else:
                result = spline(time, times, quaternions, options)

        elif cyclic:
            result = loop_lerp(time, last_index, times, cycle_time, quaternions, self.method, options)

        else:
            result = lerp(time, times, quaternions, self.method, options)

        return _store(result, out)

    def precompute(self, times: ARRAY_LIKE, cycle_time: float, quaternions: ARRAY_LIKE,
                   options: InterpolationOptions | None = None) -> RotationCurve:
        """
        Generates a :class:`.RotationCurve` for repeated evaluation with :meth:`interpolate_curve`.

        For the spline techniques the Squad control quaternions and the interval duration of every segment are computed
        and cached in the curve.  For the other techniques the curve just holds the keyframes.  The keyframe
        quaternions are validated once here.

        :param times: The keyframe times (length n > 0, strictly ascending, non-negative)
        :param cycle_time: The end time of the loop (not less than ``times[-1]``)
        :param quaternions: The keyframe quaternions as an n x 4 array of unit quaternions
        :param options: The validation options.  Defaults to :data:`DEFAULT_OPTIONS`
        :return: a new curve
        :raises InvalidArgumentError: If the keyframe data is malformed
        :raises PreconditionError: If a quaternion is not of unit length (strict validation)
        """

        if options is None:
            options = DEFAULT_OPTIONS

        times, cycle_time, quaternions = _check_keyframes(times, cycle_time, quaternions)

        if options.check_times:
            check_times(times)

        for index, quaternion in enumerate(quaternions):
            quaternions[index] = validate_unit(quaternion, f'quaternions[{index}]', options.unit_tolerance,
                                               options.strict)

        cyclic, last_index = self.segment_plan(times, cycle_time)

        if self.method is not Method.SPLINE:
            return RotationCurve(times, cycle_time, quaternions, last_index=last_index, cyclic=cyclic)

        builder = RotationCurveBuilder(times, cycle_time, quaternions)

        if cyclic:
            _precompute_loop_spline(builder, last_index)
        else:
            _precompute_spline(builder)

        _LOGGER.debug(f'Precomputed {last_index + 1} segments for {self.value}')

        return builder.build()

    def interpolate_curve(self, time: float, curve: RotationCurve, out: NONEARRAY = None,
                          options: InterpolationOptions | None = None) -> DOUBLE_ARRAY:
        """
        Interpolates a :class:`.RotationCurve` built by :meth:`precompute` using this technique.

        :param time: The query time
        :param curve: The curve to evaluate
        :param out: An optional length 4 array to store the result in
        :param options: The validation options.  Defaults to :data:`DEFAULT_OPTIONS`
        :return: The interpolated unit quaternion (`out` if it was supplied)
        :raises PreconditionError: If this is a spline technique and the curve's spline cache was not precomputed for
                                   it (no cache, a different last index, or a different looping layout), or if a
                                   cyclic query time is after the cycle time
        """

        times = curve.times

        cyclic, last_index = self.segment_plan(times, curve.cycle_time)

        if self.method is not Method.SPLINE:
            # the curve holds already converted keyframes, only unit length is checked per blend
            if last_index == 0 or time < times[0]:
                return _store(curve.quaternions[0], out)

            if cyclic:
                result = loop_lerp(time, last_index, times, curve.cycle_time, curve.quaternions, self.method, options)
            else:
                result = lerp(time, times, curve.quaternions, self.method, options)

            return _store(result, out)

        if not curve.is_precomputed or curve.last_index != last_index or curve.is_cyclic != cyclic:
            raise PreconditionError(f'The curve was not precomputed for the {self.value} technique')

        if last_index == 0 or time < times[0]:
            return _store(curve.get_start_value(0), out)

        if cyclic:
            time = _loop_time(time, curve.cycle_time)
            index1 = find_previous_index(time, times[:last_index + 1])
        else:
            index1 = find_previous_index(time, times)

            if index1 >= last_index:
                return _store(curve.get_start_value(last_index), out)

        t = (time - times[index1]) / curve.get_interval_duration(index1)

        result = squad(curve.get_start_value(index1), curve.get_control_point1(index1),
                       curve.get_control_point2(index1), curve.get_end_value(index1), t)

        return _store(result, out)


def _store(result: ARRAY_LIKE, out: NONEARRAY) -> DOUBLE_ARRAY:

    if out is None:
        return np.array(result, dtype=np.float64)

    out[...] = result

    return out


def find_previous_index(time: float, times: ARRAY_LIKE) -> int:
    """
    Returns the greatest index whose time is not after `time` (binary search).

    :param time: The query time
    :param times: The keyframe times in ascending order
    :return: The index, or -1 if `time` precedes ``times[0]``
    """

    return int(np.searchsorted(times, time, side='right')) - 1


def _loop_time(time: float, cycle_time: float) -> float:
    """
    Checks a cyclic query time and maps the loop seam (`cycle_time`) onto time 0.
    """

    if not 0 <= time <= cycle_time:
        raise PreconditionError(f'A cyclic query time must be in [0, {cycle_time}], not {time}')

    if time == cycle_time:
        return 0.0

    return time


def _loop_segment(time: float, last_index: int, times: DOUBLE_ARRAY, cycle_time: float) -> tuple[int, int, float]:
    """
    Locates the segment of a cyclic sequence containing `time`.

    :return: the start index, the end index and the fraction of the way through the segment
    """

    if last_index < 1:
        raise InvalidArgumentError(f'A cyclic sequence needs at least 2 keyframes, the last index is {last_index}')

    if not cycle_time > times[last_index]:
        raise InvalidArgumentError(f'The cycle time ({cycle_time}) must be after the last keyframe used '
                                   f'({times[last_index]})')

    time = _loop_time(time, cycle_time)

    index1 = max(find_previous_index(time, times[:last_index + 1]), 0)

    if index1 < last_index:
        index2 = index1 + 1
        interval = times[index2] - times[index1]
    else:
        # the segment closing the loop
        index2 = 0
        interval = cycle_time - times[last_index]

    return index1, index2, float((time - times[index1]) / interval)


def blend(t: float, quaternion0: ARRAY_LIKE, quaternion1: ARRAY_LIKE, method: Method,
          options: InterpolationOptions | None = None) -> DOUBLE_ARRAY:
    """
    Interpolates between 2 unit quaternions using a linear method (Nlerp, QuickSlerp or Slerp).

    If the quaternions are exactly equal the first one is returned without interpolating.

    :param t: The fraction of the way from `quaternion0` to `quaternion1` (in [0, 1])
    :param quaternion0: The quaternion at ``t == 0``
    :param quaternion1: The quaternion at ``t == 1``
    :param method: The blending method
    :param options: The validation options.  Defaults to :data:`DEFAULT_OPTIONS`
    :return: The interpolated unit quaternion
    """

    if options is None:
        options = DEFAULT_OPTIONS

    if not 0 <= t <= 1:
        raise PreconditionError(f'The interpolation fraction must be in [0, 1], not {t}')

    q0 = validate_unit(quaternion0, 'q0', options.unit_tolerance, options.strict)
    q1 = validate_unit(quaternion1, 'q1', options.unit_tolerance, options.strict)

    if np.array_equal(q0, q1):
        return q0.copy()

    if method is Method.NLERP:
        return nlerp(q0, q1, t)

    elif method is Method.QUICK_SLERP:
        return quick_slerp(q0, q1, t)

    elif method is Method.SLERP:
        return slerp(q0, q1, t)

    raise ValueError(f'{method} is not a linear blending method')


def lerp(time: float, times: DOUBLE_ARRAY, quaternions: DOUBLE_ARRAY, method: Method,
         options: InterpolationOptions | None = None) -> DOUBLE_ARRAY:
    """
    Interpolates among unit quaternions in an acyclic time sequence using a linear method.

    :param time: The query time
    :param times: The keyframe times in strictly ascending order
    :param quaternions: The keyframe quaternions as an n x 4 array
    :param method: The blending method
    :param options: The validation options
    :return: The interpolated unit quaternion
    """

    index1 = max(find_previous_index(time, times), 0)

    if index1 >= times.size - 1:
        # no extrapolation past the last keyframe
        return quaternions[index1].copy()

    index2 = index1 + 1

    t = float((time - times[index1]) / (times[index2] - times[index1]))

    return blend(t, quaternions[index1], quaternions[index2], method, options)


def loop_lerp(time: float, last_index: int, times: DOUBLE_ARRAY, cycle_time: float, quaternions: DOUBLE_ARRAY,
              method: Method, options: InterpolationOptions | None = None) -> DOUBLE_ARRAY:
    """
    Interpolates among unit quaternions in a cyclic time sequence using a linear method.

    :param time: The query time (in [0, `cycle_time`])
    :param last_index: The index of the last keyframe to use (at least 1)
    :param times: The keyframe times in strictly ascending order, starting at 0
    :param cycle_time: The end time of the loop (after ``times[last_index]``)
    :param quaternions: The keyframe quaternions as an n x 4 array
    :param method: The blending method
    :param options: The validation options
    :return: The interpolated unit quaternion
    """

    index1, index2, t = _loop_segment(time, last_index, times, cycle_time)

    return blend(t, quaternions[index1], quaternions[index2], method, options)


def _sign_corrected(quaternion0: DOUBLE_ARRAY, quaternion1: DOUBLE_ARRAY, quaternion2: DOUBLE_ARRAY,
                    quaternion3: DOUBLE_ARRAY) -> tuple[DOUBLE_ARRAY, DOUBLE_ARRAY, DOUBLE_ARRAY, DOUBLE_ARRAY]:
    """
    Flips signs so that the inner products of successive quaternions are non-negative.
    """

    if np.inner(quaternion0, quaternion1) < 0:
        quaternion0 = -quaternion0

    if np.inner(quaternion1, quaternion2) < 0:
        quaternion2 = -quaternion2

    if np.inner(quaternion2, quaternion3) < 0:
        quaternion3 = -quaternion3

    return quaternion0, quaternion1, quaternion2, quaternion3


def _flip_spline(t: float, quaternion0: DOUBLE_ARRAY, quaternion1: DOUBLE_ARRAY, quaternion2: DOUBLE_ARRAY,
                 quaternion3: DOUBLE_ARRAY, options: InterpolationOptions) -> DOUBLE_ARRAY:
    """
    Interpolates between the 2 middle quaternions of a sequence of 4 using the Squad function.
    """

    q0, q1, q2, q3 = _sign_corrected(*(validate_unit(q, name, options.unit_tolerance, options.strict)
                                       for q, name in zip((quaternion0, quaternion1, quaternion2, quaternion3),
                                                          ('q0', 'q1', 'q2', 'q3'))))

    return squad(q1, squad_a(q0, q1, q2), squad_a(q1, q2, q3), q2, t)


def spline(time: float, times: DOUBLE_ARRAY, quaternions: DOUBLE_ARRAY,
           options: InterpolationOptions | None = None) -> DOUBLE_ARRAY:
    """
    Interpolates among unit quaternions in an acyclic time sequence using the Squad spline.

    At the first and last segments the missing outer neighbor is replaced by the end keyframe itself.

    :param time: The query time
    :param times: The keyframe times in strictly ascending order
    :param quaternions: The keyframe quaternions as an n x 4 array
    :param options: The validation options.  Defaults to :data:`DEFAULT_OPTIONS`
    :return: The interpolated unit quaternion
    """

    if options is None:
        options = DEFAULT_OPTIONS

    last_index = times.size - 1

    index1 = max(find_previous_index(time, times), 0)

    if index1 == last_index:
        return quaternions[index1].copy()

    index0 = max(index1 - 1, 0)
    index2 = index1 + 1
    index3 = min(index2 + 1, last_index)

    t = float((time - times[index1]) / (times[index2] - times[index1]))

    return _flip_spline(t, quaternions[index0], quaternions[index1], quaternions[index2], quaternions[index3],
                        options)


def loop_spline(time: float, last_index: int, times: DOUBLE_ARRAY, cycle_time: float, quaternions: DOUBLE_ARRAY,
                options: InterpolationOptions | None = None) -> DOUBLE_ARRAY:
    """
    Interpolates among unit quaternions in a cyclic time sequence using the Squad spline.

    The neighbors of each segment wrap around the keyframes used, which makes the curve C1 continuous across the loop
    seam.

    :param time: The query time (in [0, `cycle_time`])
    :param last_index: The index of the last keyframe to use (at least 1)
    :param times: The keyframe times in strictly ascending order, starting at 0
    :param cycle_time: The end time of the loop (after ``times[last_index]``)
    :param quaternions: The keyframe quaternions as an n x 4 array
    :param options: The validation options.  Defaults to :data:`DEFAULT_OPTIONS`
    :return: The interpolated unit quaternion
    """

    if options is None:
        options = DEFAULT_OPTIONS

    index1, index2, t = _loop_segment(time, last_index, times, cycle_time)

    index0 = last_index if index1 == 0 else index1 - 1
    index3 = 0 if index2 == last_index else index2 + 1

    return _flip_spline(t, quaternions[index0], quaternions[index1], quaternions[index2], quaternions[index3],
                        options)


def _precompute_segment(builder: RotationCurveBuilder, index1: int, interval: float, quaternion0: DOUBLE_ARRAY,
                        quaternion1: DOUBLE_ARRAY, quaternion2: DOUBLE_ARRAY, quaternion3: DOUBLE_ARRAY) -> None:

    q0, q1, q2, q3 = _sign_corrected(quaternion0, quaternion1, quaternion2, quaternion3)

    builder.set_parameters(index1, q2, interval)
    builder.set_control_points(index1, squad_a(q0, q1, q2), squad_a(q1, q2, q3))


def _precompute_spline(builder: RotationCurveBuilder) -> None:
    """
    Computes the spline parameters of every segment of an acyclic sequence.

    The final keyframe gets a placeholder segment (ending on itself, with unit duration) so that the cache covers
    ``[0, last_index]``; it is never evaluated.
    """

    times = builder.times
    quaternions = builder.quaternions

    last_index = times.size - 1
    builder.set_last_index(last_index)

    for index1 in range(last_index + 1):
        index0 = max(index1 - 1, 0)

        if index1 == last_index:
            index2 = last_index
            interval = 1.0
        else:
            index2 = index1 + 1
            interval = float(times[index2] - times[index1])

        index3 = min(index2 + 1, last_index)

        _precompute_segment(builder, index1, interval, quaternions[index0], quaternions[index1],
                            quaternions[index2], quaternions[index3])


def _precompute_loop_spline(builder: RotationCurveBuilder, last_index: int) -> None:
    """
    Computes the spline parameters of every segment of a cyclic sequence, including the one closing the loop.
    """

    times = builder.times
    cycle_time = builder.cycle_time
    quaternions = builder.quaternions

    builder.set_last_index(last_index, cyclic=True)

    for index1 in range(last_index + 1):
        index0 = last_index if index1 == 0 else index1 - 1

        if index1 < last_index:
            index2 = index1 + 1
            interval = float(times[index2] - times[index1])
        else:
            index2 = 0
            interval = cycle_time - float(times[last_index])

        index3 = 0 if index2 == last_index else index2 + 1

        _precompute_segment(builder, index1, interval, quaternions[index0], quaternions[index1],
                            quaternions[index2], quaternions[index3])
