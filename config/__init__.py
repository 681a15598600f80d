# =============================================================================
# config/__init__.py
# =============================================================================
# PURPOSE:
#   Makes the 'config' folder a package and re-exports every setting so
#   other files can do:
#       from config import GOODS_CURRENCY, AMOUNT_TOLERANCE
#
# NOTE:
#   Code that must honour a DB_PATH changed at runtime (tests) reads it as
#   config.DB_PATH instead of importing the name.
# =============================================================================

from .settings import *
