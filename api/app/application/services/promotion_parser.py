"""
Parser de filas del CSV de promociones.

Convierte una fila cruda (id, price, expiration_date) en una Promotion
valida o en un RecordRejection con el motivo. Es una funcion pura: el
unico efecto lateral es el log del rechazo.

Reglas:
- price: numero decimal finito, no negativo y dentro de NUMERIC(12, 6)
- expiration_date: "YYYY-MM-DD HH:MM:SS[.fraccion] +HHMM ZONA"
  (p.ej. "2030-01-02 15:04:05 +0000 UTC"); el offset numerico define
  el instante y la zona es solo un nombre
- id: se toma tal cual
"""
from __future__ import annotations

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Tuple, Union

from loguru import logger

from app.domain.entities.promotion import Promotion
from app.domain.entities.refresh import RawRow, RecordRejection
from app.shared.constants.promotion_constants import (
    EXPIRATION_FORMAT_EXAMPLE,
    PRICE_SCALE,
    PRICE_UPPER_BOUND,
    RejectionReason,
)


ROW_FIELDS = 3

# Postgres redondea a la escala de la columna antes de validar la precision
_PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_SCALE)

# Sin espacios ni separadores "_" (Decimal los aceptaria)
_PRICE_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_EXPIRATION_PATTERN = re.compile(
    r"(?P<stamp>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r" (?P<offset>[+-]\d{4})"
    r" (?P<zone>[A-Z]{3,5}|[+-]\d{2}(?:\d{2})?)"
)

ParsedRow = Union[Promotion, RecordRejection]


class InvalidPriceError(ValueError):
    """El campo price no es un decimal valido."""


class InvalidExpirationError(ValueError):
    """El campo expiration_date no respeta el formato fijo."""


def parse_price(value: str) -> Decimal:
    """
    Parsea el precio.

    Raises:
        InvalidPriceError: Si no es decimal, es negativo o excede NUMERIC(12, 6)
    """
    if not _PRICE_PATTERN.fullmatch(value):
        raise InvalidPriceError(f"precio no numerico: {value!r}")
    try:
        price = Decimal(value)
    except InvalidOperation as e:
        raise InvalidPriceError(f"precio no numerico: {value!r}") from e

    if price < 0:
        raise InvalidPriceError(f"precio negativo: {value!r}")
    if price >= PRICE_UPPER_BOUND:
        raise InvalidPriceError(f"precio fuera de rango (< {PRICE_UPPER_BOUND}): {value!r}")

    # Se guarda el valor redondeado: 999999.9999995 pasa a 1000000.000000
    price = price.quantize(_PRICE_QUANTUM, rounding=ROUND_HALF_UP)
    if price >= PRICE_UPPER_BOUND:
        raise InvalidPriceError(f"precio fuera de rango tras redondear a {PRICE_SCALE} decimales: {value!r}")
    return price


def parse_expiration(value: str) -> datetime:
    """
    Parsea la fecha de expiracion a un datetime aware.

    Raises:
        InvalidExpirationError: Si no respeta el formato o la fecha no existe
    """
    match = _EXPIRATION_PATTERN.fullmatch(value)
    if not match:
        raise InvalidExpirationError(
            f"formato de expiracion invalido: {value!r} (esperado como {EXPIRATION_FORMAT_EXAMPLE!r})"
        )

    # datetime solo soporta microsegundos: se trunca la fraccion
    fraction = (match["fraction"] or "0")[:6].ljust(6, "0")
    try:
        return datetime.strptime(
            f"{match['stamp']}.{fraction} {match['offset']}",
            "%Y-%m-%d %H:%M:%S.%f %z",
        )
    except ValueError as e:
        raise InvalidExpirationError(f"fecha de expiracion inexistente: {value!r}") from e


def parse_promotion_row(row: RawRow, row_number: int) -> ParsedRow:
    """
    Valida una fila cruda.

    Args:
        row: Campos de la fila en orden de archivo
        row_number: Posicion (1-based) de la fila en el archivo

    Returns:
        Promotion si la fila es valida, RecordRejection si no
    """
    if len(row) != ROW_FIELDS:
        return RecordRejection(
            row_number=row_number,
            reason=RejectionReason.MALFORMED_ROW,
            value=",".join(row),
            detail=f"se esperaban {ROW_FIELDS} campos, llegaron {len(row)}",
        )

    promotion_id, raw_price, raw_expiration = row

    try:
        price = parse_price(raw_price)
    except InvalidPriceError as e:
        return RecordRejection(row_number, RejectionReason.INVALID_PRICE, raw_price, str(e))

    try:
        expiration = parse_expiration(raw_expiration)
    except InvalidExpirationError as e:
        return RecordRejection(row_number, RejectionReason.INVALID_EXPIRATION, raw_expiration, str(e))

    return Promotion(id=promotion_id, price=price, expiration_date=expiration)


def parse_rows(
    rows: Iterable[RawRow],
    first_row_number: int = 1,
) -> Tuple[List[Promotion], List[RecordRejection]]:
    """
    Parsea un lote de filas conservando el orden de archivo.
    Las filas rechazadas se loguean y se excluyen del resultado valido.
    """
    promotions: List[Promotion] = []
    rejections: List[RecordRejection] = []

    for offset, row in enumerate(rows):
        parsed = parse_promotion_row(row, first_row_number + offset)
        if isinstance(parsed, RecordRejection):
            logger.warning(
                f"Fila {parsed.row_number} descartada ({parsed.reason.value}): {parsed.detail}"
            )
            rejections.append(parsed)
        else:
            promotions.append(parsed)

    return promotions, rejections


def collapse_duplicate_ids(promotions: Iterable[Promotion]) -> Tuple[List[Promotion], int]:
    """
    Deja una sola promocion por id dentro de un lote: gana la ultima en
    orden de archivo. Las anteriores se loguean y se descartan.

    Returns:
        (promociones unicas, cantidad descartada)
    """
    latest: dict[str, Promotion] = {}
    dropped = 0

    for promotion in promotions:
        if promotion.id in latest:
            dropped += 1
            logger.warning(f"Promocion {promotion.id} repetida en el chunk; se conserva la ultima fila")
        latest[promotion.id] = promotion

    return list(latest.values()), dropped
