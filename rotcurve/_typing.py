from typing import Union

import numpy as np
import numpy.typing as npt

DOUBLE_ARRAY = np.typing.NDArray[np.float64]
ARRAY_LIKE = npt.ArrayLike
SCALAR_OR_ARRAY = Union[float, npt.ArrayLike]
F_SCALAR_OR_ARRAY = Union[float, DOUBLE_ARRAY]

NONEARRAY = Union[DOUBLE_ARRAY, None]

