"""
Modelos de base de datos (ORM).
"""
from sqlalchemy import Column, String, Numeric, DateTime

from app.infrastructure.database.session import Base
from app.shared.constants.promotion_constants import (
    PROMOTIONS_TABLE,
    PRICE_PRECISION,
    PRICE_SCALE,
)


class PromotionModel(Base):
    """
    Modelo de base de datos para promociones.

    La tabla se vacia y se recarga completa en cada ciclo de refresco;
    nunca se altera despues de crearse.
    """

    __tablename__ = PROMOTIONS_TABLE

    # Identificador opaco sin limite de largo (TEXT)
    id = Column(String, primary_key=True)
    price = Column(Numeric(PRICE_PRECISION, PRICE_SCALE), nullable=False)
    # Hora de pared del archivo, sin zona
    expiration_date = Column(DateTime(timezone=False), nullable=False)

    def __repr__(self):
        return f"<Promotion(id={self.id}, price={self.price}, expiration_date={self.expiration_date})>"
