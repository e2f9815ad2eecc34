from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from storefront.data.database import Base


class StockMutationModel(Base):
    """One applied stock mutation, keyed by the caller's idempotency key."""

    __tablename__ = "stock_mutations"
    __table_args__ = (
        UniqueConstraint("idempotency_key", "product_id", name="u_stock_mutation_key"),
    )

    id = Column(Integer, primary_key=True)
    idempotency_key = Column(String, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    operation = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    resulting_stock = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
