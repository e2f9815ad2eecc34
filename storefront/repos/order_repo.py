# storefront/repos/order_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def exists(self, order_id: int) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.id == order_id)
        ).first() is not None

    def list_orders(self, status: str | None = None) -> list[OrderModel]:
        query = select(OrderModel).order_by(OrderModel.id)
        if status is not None:
            query = query.where(OrderModel.status == status)
        return list(self.db.execute(query).scalars())

    def list_orders_by_user(self, user_id: str) -> list[OrderModel]:
        return list(self.db.execute(
            select(OrderModel).where(OrderModel.user_id == user_id).order_by(OrderModel.id)
        ).scalars())

    def save_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def update_order_status(self, order_id: int, status: str) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status
            self.db.commit()
            self.db.refresh(order)
        return order

    def bulk_update_status(self, order_ids: list[int], status: str, from_status: str) -> int:
        if not order_ids:
            return 0
        # from_status guard: a FAILED written by a saga in between stays FAILED
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id.in_(order_ids), OrderModel.status == from_status)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def delete_order(self, order: OrderModel) -> None:
        self.db.delete(order)
        self.db.commit()
