"""
This module provides the :class:`UserOptionConfigured` mixin, which configures a class from its
:class:`.UserOptions` dataclass and remembers that configuration so it can be restored.

:class:`.RotationTrack` is configured this way::

    @dataclass
    class RotationTrackOptions(InterpolationOptions):
        technique: Technique | str = Technique.SLERP
        precompute: bool = True

    class RotationTrack(UserOptionConfigured[RotationTrackOptions], RotationTrackOptions):
        def __init__(self, times, cycle_time, quaternions, options=None):
            super().__init__(RotationTrackOptions, options=options)

    track = RotationTrack(times, cycle_time, quaternions)
    track.technique = Technique.NLERP
    track.reset_settings()  # back to Technique.SLERP

.. Note::
    :class:`UserOptionConfigured` must come first among the base classes so that its ``__init__`` runs before the
    options dataclass initializer.
"""

import copy

from typing import Generic, TypeVar

from rotcurve.utilities.options import UserOptions


OptionsT = TypeVar("OptionsT", bound=UserOptions)
"""
Type variable bound to UserOptions for type safety
"""


class UserOptionConfigured(Generic[OptionsT]):
    """
    Mixin class providing UserOptions-based configuration with reset capability.

    On initialization the options (or a default instance of ``options_type`` if none are given) are applied as
    attributes of the instance and a deep copy is stored so that :meth:`reset_settings` can restore them later.
    """

    def __init__(self, options_type: type[OptionsT], *args, options: OptionsT | None = None, **kwargs) -> None:
        """
        :param options_type: The type of the :class:`.UserOptions` to use
        :param options: An optional instance of `options_type` preconfigured.
        """

        super().__init__(*args, **kwargs)

        if options is None:
            options = options_type()

        options.apply_options(self)

        self._original_options: OptionsT = copy.deepcopy(options)
        """
        The original configuration for this class
        """

    def reset_settings(self) -> None:
        """
        Resets the class to the state it was originally initialized with.
        """

        self.original_options.apply_options(self)

    @property
    def original_options(self) -> OptionsT:
        """
        Get the original configuration options.

        .. Warning::
            Modifying the returned object will affect reset behavior.
        """
        return self._original_options
