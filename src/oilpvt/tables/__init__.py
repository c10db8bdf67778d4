"""Raw property tables and the interpolants built from them."""

from .raw import *  # noqa
from .interpolation import *  # noqa
from .pvt import *  # noqa
