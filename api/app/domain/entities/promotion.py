"""
Entidad de dominio: Promotion (Promocion).
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Promotion:
    """
    Oferta de precio con vencimiento.

    - id: identificador opaco (se espera forma de UUID, no se valida)
    - price: precio decimal no negativo
    - expiration_date: instante de vencimiento tal como vino en el archivo
    """

    id: str
    price: Decimal
    expiration_date: datetime

    @property
    def local_expiration(self) -> datetime:
        """
        Hora de pared del vencimiento, sin zona.
        Es lo que se guarda en la columna TIMESTAMP.
        """
        return self.expiration_date.replace(tzinfo=None)
