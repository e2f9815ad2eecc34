# storefront/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.stock_mutation import StockMutationModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(self) -> list[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars())

    def exists(self, product_id: int) -> bool:
        return self.db.execute(
            select(ProductModel.id).where(ProductModel.id == product_id)
        ).first() is not None

    def save_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        if product:
            self.db.delete(product)
            self.db.commit()

    def add_stock_conditionally(self, product_id: int, delta: int) -> int:
        """
        Single UPDATE that applies delta only while the result stays >= 0.
        UPDATE products SET available_stock = available_stock + :delta
        WHERE id = :id AND available_stock + :delta >= 0
        Returns rowcount, 0 means the floor would have been crossed (or no row).
        Not committed, the caller decides.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.available_stock + delta >= 0,
            )
            .values(available_stock=ProductModel.available_stock + delta)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_mutation(self, idempotency_key: str, product_id: int) -> StockMutationModel | None:
        return self.db.execute(
            select(StockMutationModel).where(
                StockMutationModel.idempotency_key == idempotency_key,
                StockMutationModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def record_mutation(self, mutation: StockMutationModel) -> None:
        self.db.add(mutation)

    def refresh(self, product: ProductModel) -> ProductModel:
        self.db.refresh(product)
        return product

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
