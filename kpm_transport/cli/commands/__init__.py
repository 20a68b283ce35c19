"""
CLI Commands
============

Commands:
  - info: Show version and backend information
  - run: Run a model from an input directory
  - dos: Density of states only for an input directory
  - chain: DOS / VAC / MSD of a uniform 1D chain
"""

from .info import info
from .run import run
from .dos import dos
from .chain import chain

__all__ = [
    'info',
    'run',
    'dos',
    'chain',
]
