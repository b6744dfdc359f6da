"""
Excepciones del pipeline de ingesta y del acceso al almacenamiento.

No heredan de AppException: nunca se muestran tal cual al cliente HTTP.
"""


class PromotionStoreError(RuntimeError):
    """Fallo de la base de datos (conexion, COPY, commit, consultas)."""


class StoreUnavailableError(PromotionStoreError):
    """La base de datos no responde al iniciar el servicio (fatal)."""


class SourceFileError(RuntimeError):
    """
    Fallo al abrir o leer el archivo fuente.
    Es fatal para el proceso, no solo para el ciclo.
    """
