"""
*oilpvt*

Tabulated oil PVT properties (formation volume factor and viscosity) of dead
and live oil, per reservoir region.
"""

from ._precision import *  # noqa
from .constants import *  # noqa
from .config import *  # noqa
from .errors import *  # noqa
from .types import *  # noqa
from .units import *  # noqa
from .tables import *  # noqa
from .evaluators import *  # noqa
from .init_data import *  # noqa
from .oil import *  # noqa
