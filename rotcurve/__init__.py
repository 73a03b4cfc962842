# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
Interpolation of time sequences of rotation quaternions for skeletal animation.

The package is organized as

* :mod:`.quaternions`: the quaternion algebra and manifold helpers (log, exp, power, nlerp, slerp, squad)
* :mod:`.curves`: the :class:`.RotationCurve` keyframe container and its precomputed spline cache
* :mod:`.interpolation`: the :class:`.Technique` enumeration implementing the interpolation techniques
* :mod:`.smoothing`: the :class:`.SmoothingTechnique` enumeration for smoothing keyframed rotations
* :mod:`.track`: the :class:`.RotationTrack` class sampled by an animation player
* :mod:`.errors`: the exceptions raised throughout the package
"""

from rotcurve.errors import RotationCurveError, InvalidArgumentError, PreconditionError, IndexOutOfRangeError
from rotcurve.curves import RotationCurve, RotationCurveBuilder
from rotcurve.interpolation import InterpolationOptions, Method, Technique, find_previous_index
from rotcurve.smoothing import SmoothingTechnique
from rotcurve.track import RotationTrack, RotationTrackOptions


__version__ = '1.0.0'

__all__ = ['RotationCurveError', 'InvalidArgumentError', 'PreconditionError', 'IndexOutOfRangeError',
           'RotationCurve', 'RotationCurveBuilder', 'InterpolationOptions', 'Method', 'Technique',
           'find_previous_index', 'SmoothingTechnique', 'RotationTrack', 'RotationTrackOptions']
