"""
Constantes del pipeline de ingesta de promociones.
Define la ubicacion del archivo fuente, el tamano de chunk, el calendario
de refresco y los estados/motivos que se reportan por ciclo.
"""
from decimal import Decimal
from enum import Enum


# Archivo fuente (CSV sin cabecera: id, price, expiration_date)
PROMOTIONS_CSV_FILE = "/app/promotions/promotions.csv"

# Tabla destino
PROMOTIONS_TABLE = "promotions"

# Filas por chunk; cada chunk se escribe en su propia transaccion
CHUNK_SIZE = 1000

# Pausa entre ciclos de refresco (30 minutos)
REFRESH_INTERVAL_SECONDS = 30 * 60

# Reintentos del borrado completo al inicio de cada ciclo
CLEANUP_MAX_ATTEMPTS = 5
CLEANUP_MIN_BACKOFF_SECONDS = 1.0
CLEANUP_MAX_BACKOFF_SECONDS = 60.0

# Limites de la columna price NUMERIC(12, 6)
PRICE_PRECISION = 12
PRICE_SCALE = 6
PRICE_UPPER_BOUND = Decimal(10) ** (PRICE_PRECISION - PRICE_SCALE)

# Formato de expiracion: "2006-01-02 15:04:05 -0700 MST"
EXPIRATION_FORMAT_EXAMPLE = "2030-01-02 15:04:05 +0000 UTC"


class RejectionReason(str, Enum):
    """Motivos por los que una fila del CSV se descarta."""
    INVALID_PRICE = "InvalidPrice"
    INVALID_EXPIRATION = "InvalidExpiration"
    MALFORMED_ROW = "MalformedRow"


class RefreshState(str, Enum):
    """Estados del orquestador de refresco."""
    IDLE = "idle"
    CLEANING = "cleaning"
    STREAMING = "streaming"
    DRAINING = "draining"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


class RefreshStatus(str, Enum):
    """Resultado final de un ciclo de refresco."""
    COMPLETED = "completed"
    PARTIAL = "partial"
    ABANDONED = "abandoned"
    FAILED = "failed"
