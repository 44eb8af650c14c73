from models.users import User
from models.catalogs import Catalog
from models.categories import Category
from models.sub_categories import SubCategory
from models.brands import Brand
from models.vehicle_types import VehicleType
from models.websites import Website
from models.vendors import Vendor
from models.products import Product, product_websites
from models.purchases import Purchase
from models.inventory_changes import InventoryChange

__all__ = ["User", "Catalog", "Category", "SubCategory", "Brand", "VehicleType", "Website",
           "Vendor", "Product", "product_websites", "Purchase", "InventoryChange"]
