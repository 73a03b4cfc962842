"""
This module provides the :class:`RotationTrack` class, the rotation channel of a bone animation.

A track owns a keyframe sequence, the :class:`.Technique` used to evaluate it and (when precomputation is enabled) the
:class:`.RotationCurve` built once from the keyframes.  An animation player asks the track for the rotation at the
elapsed playback time with :meth:`~RotationTrack.sample` (or for the rotation matrix used to pose the bone with
:meth:`~RotationTrack.sample_matrix`).

Example:

    >>> from rotcurve import RotationTrack, RotationTrackOptions, Technique
    >>> from rotcurve.quaternions import axis_angle_to_quaternion
    >>> import numpy as np
    >>> keys = np.vstack([axis_angle_to_quaternion([0, 0, 1], a) for a in [0, np.pi / 2, np.pi, 0]])
    >>> track = RotationTrack([0, 1, 2, 3], 3, keys, RotationTrackOptions(technique=Technique.LOOP_SPLINE))
    >>> track.sample([0.5, 3.5]).shape
    (2, 4)
"""

import logging

from dataclasses import dataclass

import numpy as np

from rotcurve._typing import ARRAY_LIKE, DOUBLE_ARRAY, SCALAR_OR_ARRAY
from rotcurve.curves import RotationCurve
from rotcurve.interpolation import InterpolationOptions, Technique
from rotcurve.quaternions import quaternion_to_rotmat
from rotcurve.utilities.mixin_classes import UserOptionConfigured


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
This is the logging interface for reporting status, results, issues, and other information.
"""


@dataclass
class RotationTrackOptions(InterpolationOptions):
    """
    :param technique: The interpolation technique used to sample the track
    :param precompute: Whether to precompute the spline parameters when the track is created
    """

    technique: Technique | str = Technique.SLERP
    """
    The interpolation technique used to sample the track.

    This can be given as a :class:`.Technique` member or as its name (``'LoopSpline'``).
    """

    precompute: bool = True
    """
    Whether to build the :class:`.RotationCurve` cache once when the track is created.

    For the spline techniques this moves the control point computation out of every call to :meth:`.sample`.
    """


class RotationTrack(UserOptionConfigured[RotationTrackOptions], RotationTrackOptions):
    """
    A keyframed rotation channel that can be sampled at any time.

    For cyclic techniques the sample time is wrapped modulo the cycle time, so the elapsed playback time can be passed
    directly.  A cyclic technique that falls back to its acyclic form (see :meth:`.Technique.segment_plan`) is not
    wrapped and holds like the acyclic techniques.  For the acyclic techniques the rotation is held at the first
    keyframe before the first keyframe time and at the last keyframe after the last keyframe time.

    If the options are changed after creation, call :meth:`rebuild` so that the curve reflects them.
    :meth:`reset_settings` rebuilds automatically.
    """

    def __init__(self, times: ARRAY_LIKE, cycle_time: float, quaternions: ARRAY_LIKE,
                 options: RotationTrackOptions | None = None):
        """
        :param times: The keyframe times (length n > 0, strictly ascending, non-negative)
        :param cycle_time: The end time of the loop (not less than ``times[-1]``)
        :param quaternions: The keyframe quaternions as an n x 4 array of unit quaternions
        :param options: A dataclass specifying the options to set for this instance.
        :raises InvalidArgumentError: If the keyframe data is malformed
        :raises PreconditionError: If a keyframe quaternion is not of unit length (strict validation)
        """

        super().__init__(RotationTrackOptions, options=options)

        self._keyframes = RotationCurve(times, cycle_time, quaternions)
        """
        The keyframes the track was created with.
        """

        self._curve: RotationCurve = self._keyframes

        self.rebuild()

    def rebuild(self) -> None:
        """
        Rebuilds the curve from the keyframes using the current options.
        """

        self.technique = Technique(self.technique)

        if self.precompute:
            self._curve = self.technique.precompute(self._keyframes.times, self._keyframes.cycle_time,
                                                    self._keyframes.quaternions, options=self)
        else:
            self._curve = self._keyframes

        _LOGGER.debug(f'Rebuilt the rotation track using {self.technique.value} with precompute={self.precompute}')

    def reset_settings(self) -> None:
        """
        Resets the track to the options it was originally created with and rebuilds the curve.
        """

        super().reset_settings()

        self.rebuild()

    @property
    def curve(self) -> RotationCurve:
        """
        The curve sampled by this track.
        """

        return self._curve

    @property
    def cycle_time(self) -> float:
        """
        The end time of the loop.
        """

        return self._curve.cycle_time

    def _sample_one(self, time: float) -> DOUBLE_ARRAY:

        technique: Technique = self.technique

        # a loop that fell back to its acyclic form holds at the last keyframe instead of wrapping
        if technique.is_cyclic and self._curve.cycle_time > 0 and \
                technique.segment_plan(self._curve.times, self._curve.cycle_time)[0]:
            time = float(np.mod(time, self._curve.cycle_time))

        if self.precompute:
            return technique.interpolate_curve(time, self._curve, options=self)

        return technique.interpolate(time, self._curve.times, self._curve.cycle_time, self._curve.quaternions,
                                     options=self)

    def sample(self, time: SCALAR_OR_ARRAY) -> DOUBLE_ARRAY:
        """
        Samples the rotation of the track.

        :param time: The time(s) to sample at as a scalar or a 1D array
        :return: The unit quaternion as a length 4 array for a scalar time, otherwise an m x 4 array with one quaternion
                 per time
        """

        times = np.asarray(time, dtype=np.float64)

        if times.ndim == 0:
            return self._sample_one(float(times))

        if times.size == 0:
            return np.empty(times.shape + (4,))

        return np.vstack([self._sample_one(t) for t in times.ravel()]).reshape(times.shape + (4,))

    def sample_matrix(self, time: SCALAR_OR_ARRAY) -> DOUBLE_ARRAY:
        """
        Samples the rotation of the track as a rotation matrix.

        :param time: The time(s) to sample at as a scalar or a 1D array
        :return: A 3 x 3 rotation matrix for a scalar time, otherwise an m x 3 x 3 array
        """

        quaternions = self.sample(time)

        if quaternions.ndim == 1:
            return quaternion_to_rotmat(quaternions)

        return quaternion_to_rotmat(quaternions.T).reshape(-1, 3, 3)
