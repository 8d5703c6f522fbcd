'''Widgets and utilities for tiling window manager status bars.'''

from .diskusage import DiskUsage, DiskUsageProvider
from .leaf import Leaf
from .progressbar import Progressbar
from .status import Status, Provider

__version__ = '0.1.0'
