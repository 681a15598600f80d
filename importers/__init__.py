# =============================================================================
# importers/__init__.py
# =============================================================================
# PURPOSE:
#   Makes the importers folder a package.
#
# AVAILABLE IMPORTERS:
#   - GoodsImporter: Imports a shipment's goods lines from a CSV
# =============================================================================

from .goods_importer import GoodsImporter
