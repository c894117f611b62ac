from . import bse
