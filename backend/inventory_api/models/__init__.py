"""ORM model exports for convenient imports elsewhere in the app."""

from inventory_api.models.base import Base
from inventory_api.models.inv_audit import InvAuditLog
from inventory_api.models.inv_brand import InvBrandMaster
from inventory_api.models.inv_lookup import InvColorMaster, InvSeriesMaster
from inventory_api.models.inv_product import InvProductMaster
from inventory_api.models.inv_purchase_request import InvPurchaseRequest
from inventory_api.models.inv_sequence_counter import InvSequenceCounter
from inventory_api.models.inv_user import InvUserMaster

__all__ = [
    "Base",
    "InvAuditLog",
    "InvBrandMaster",
    "InvColorMaster",
    "InvSeriesMaster",
    "InvProductMaster",
    "InvPurchaseRequest",
    "InvSequenceCounter",
    "InvUserMaster",
]
