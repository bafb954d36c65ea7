"""
Product CRUD bound to a single owner.

Every query goes through ``_owned()``, which filters on the owner id, so
another user's product is indistinguishable from a missing one.
"""
import logging
from datetime import datetime
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..errors import InternalError, NotFound
from ..models import Product, User
from ..schemas import ProductIn

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Sorry, product not found."


class CatalogService:
    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def _owned(self) -> Query:
        return self.db.query(Product).filter(Product.owner_id == self.user.id)

    def list(self) -> List[Product]:
        return self._owned().order_by(Product.id).all()

    def create(self, payload: ProductIn) -> Product:
        product = Product(owner_id=self.user.id, **payload.model_dump())
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Product creation failed for user_id=%s", self.user.id)
            raise InternalError("Failed to create the product") from exc

        logger.info("Product created: id=%s owner_id=%s sku=%s", product.id, self.user.id, product.sku)
        return product

    def get(self, product_id: int) -> Product:
        product = self._owned().filter(Product.id == product_id).first()
        if product is None:
            raise NotFound(PRODUCT_NOT_FOUND)
        return product

    def update(self, product_id: int, payload: ProductIn) -> Product:
        """
        Overwrite all product fields.

        The UPDATE statement itself carries the owner filter, so a product
        owned by someone else is never written.
        """
        values = payload.model_dump()
        values["updated_at"] = datetime.utcnow()
        try:
            updated = (
                self._owned()
                .filter(Product.id == product_id)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Product update failed: id=%s owner_id=%s", product_id, self.user.id)
            raise InternalError("Failed to update the product") from exc

        if not updated:
            raise NotFound(PRODUCT_NOT_FOUND)
        logger.info("Product updated: id=%s owner_id=%s", product_id, self.user.id)
        return self.get(product_id)

    def delete(self, product_id: int) -> None:
        try:
            deleted = (
                self._owned()
                .filter(Product.id == product_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Product delete failed: id=%s owner_id=%s", product_id, self.user.id)
            raise InternalError("Failed to delete the product") from exc

        if not deleted:
            raise NotFound(PRODUCT_NOT_FOUND)
        logger.info("Product deleted: id=%s owner_id=%s", product_id, self.user.id)
