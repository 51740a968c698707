from phenofarm.models.users import User, UserRole
from phenofarm.models.grower import Grower
from phenofarm.models.dispensary import Dispensary
from phenofarm.models.strain import Strain
from phenofarm.models.batch import Batch
from phenofarm.models.product import Product
from phenofarm.models.order import Order, OrderItem, OrderStatus
from phenofarm.models.storage import StorageSlot
from phenofarm.models.log import Log

__all__ = [
    "User", "UserRole", "Grower", "Dispensary", "Strain", "Batch", "Product",
    "Order", "OrderItem", "OrderStatus", "StorageSlot", "Log",
]
