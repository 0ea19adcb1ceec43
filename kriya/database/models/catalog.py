"""
商品目录模型

Category / Product 均归属于某个店铺
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kriya.database.base import (
    Base,
    JSONType,
    StoreOwnedMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

if TYPE_CHECKING:
    from kriya.database.models.store import Store


class Category(Base, UUIDPrimaryKeyMixin, TimestampMixin, StoreOwnedMixin):
    """商品分类，(store_id, slug) 唯一"""

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("store_id", "slug", name="uq_categories_store_slug"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(String(1000))
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    store: Mapped["Store"] = relationship(back_populates="categories")

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, store_id={self.store_id}, slug={self.slug})>"


class Product(Base, UUIDPrimaryKeyMixin, TimestampMixin, StoreOwnedMixin):
    """
    商品

    external_id 为表格导入的来源 ID，(store_id, external_id) 唯一（为空时不约束）
    compare_at_price 仅用于展示，不要求大于 price
    """

    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("store_id", "external_id", name="uq_products_store_external_id"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    external_id: Mapped[Optional[str]] = mapped_column(String(200))
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # 价格
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    # 图片与标签
    images: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    tags: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    category_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="SET NULL"),
        index=True,
    )

    # 库存
    in_stock: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    stock_quantity: Mapped[Optional[int]] = mapped_column(Integer)

    variants: Mapped[Optional[list]] = mapped_column(JSONType)
    extra_data: Mapped[Optional[dict]] = mapped_column("metadata", JSONType)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    store: Mapped["Store"] = relationship(back_populates="products")

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, store_id={self.store_id}, name={self.name})>"
