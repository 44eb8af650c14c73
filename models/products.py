from core.database import Base
from sqlalchemy import (Column, Integer, String, Text, ForeignKey, Enum, JSON,
                        CheckConstraint, Table)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin, SoftDeleteMixin

PRODUCT_STATUSES = ("draft", "active", "inactive", "discontinued", "publish")

MAX_STOCK = 999999

# Multi-valued website membership
product_websites = Table(
    "product_websites",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("website_id", Integer, ForeignKey("websites.id", ondelete="CASCADE"), primary_key=True),
)


class Product(Base, SoftDeleteMixin, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "products"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    catalog_id = Column(Integer, ForeignKey("catalogs.id", ondelete="SET NULL"), index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), index=True)
    sub_category_id = Column(Integer, ForeignKey("sub_categories.id", ondelete="SET NULL"), index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="SET NULL"), index=True)
    vehicle_type_id = Column(Integer, ForeignKey("vehicle_types.id", ondelete="SET NULL"), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    #relationships
    catalog = relationship("Catalog", back_populates="products")
    category = relationship("Category", back_populates="products")
    sub_category = relationship("SubCategory", back_populates="products")
    brand = relationship("Brand", back_populates="products")
    vehicle_type = relationship("VehicleType", back_populates="products")
    websites = relationship("Website", secondary=product_websites,
                            back_populates="products", lazy="selectin")
    user = relationship("User", back_populates="products")
    purchases = relationship("Purchase", back_populates="product")
    inventory_changes = relationship("InventoryChange", back_populates="product")

    sku = Column(String(100), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    # Display only, not unique
    slug = Column(String(300), index=True)
    description = Column(Text)
    status = Column(Enum(*PRODUCT_STATUSES, name="product_status"), default="draft", nullable=False)
    version = Column(Integer, default=1, nullable=False)
    in_stock = Column(Integer, CheckConstraint("in_stock >= 0"), default=0, nullable=False)
    sale_stock = Column(Integer, CheckConstraint("sale_stock >= 0"), default=0, nullable=False)
    tags = Column(JSON, default=list, nullable=False)

    # Every ORM write is "UPDATE ... WHERE version = <loaded version>";
    # the application bumps the value itself.
    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": False,
    }

    @property
    def website_ids(self) -> list[int]:
        return sorted(website.id for website in self.websites)
