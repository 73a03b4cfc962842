from dataclasses import dataclass

from typing import Dict

from abc import ABCMeta


@dataclass
class UserOptions(metaclass=ABCMeta):
    """
    Base class for the dataclasses holding the user options of a configurable class.

    An options dataclass lists the settings of the class it configures along with their defaults.  The names follow the
    scheme ``<ClassName>Options`` (for instance :class:`.RotationTrackOptions` configures :class:`.RotationTrack`) and
    an instance is passed through the ``options`` keyword argument of the configured class.

    The options are copied onto the configured instance as attributes by :meth:`apply_options`:

        >>> @dataclass
        >>> class SamplerOptions(UserOptions):
        >>>     rate: float = 30.0

        >>> class Sampler(SamplerOptions):
        >>>     def __init__(self, options=None):
        >>>         if options is None:
        >>>             options = SamplerOptions()
        >>>         options.apply_options(self)
        >>> print(Sampler(SamplerOptions(rate=60.0)).rate)
        ...     60.0

    Usually this is done through the :class:`.UserOptionConfigured` mixin, which also remembers the options so they can
    be restored.
    """

    def override_options(self):
        '''
        Hook for subclasses that need to adjust some options before they are applied
        '''
        pass

    def apply_options(self, target: object) -> None:
        """
        Copies the options onto `target` as attributes

        :param target: the instance to configure
        """
        target.__dict__.update(self.options_dict)

    @property
    def options_dict(self) -> Dict:
        """
        The options as a dictionary of name to value.

        Only the dataclass fields are included (internal attributes are skipped), including the fields declared on parent
        options classes.
        """

        self.override_options()

        names = []
        for klass in reversed(type(self).__mro__):
            for key in getattr(klass, '__annotations__', {}):
                if key not in names:
                    names.append(key)

        self._options = {key: self.__dict__[key] for key in names if key in self.__dict__}
        return self._options
