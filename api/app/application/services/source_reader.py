"""
Lectura del CSV fuente y particion en chunks.

El archivo se recorre de forma secuencial (streaming); en memoria solo
vive el chunk que se esta armando. Cualquier fallo de apertura o lectura
se reporta como SourceFileError, que es fatal para el proceso.
"""
from __future__ import annotations

import csv
from typing import Iterable, Iterator, List

from loguru import logger

from app.domain.entities.refresh import Chunk, RawRow
from app.shared.exceptions.ingestion import SourceFileError


def iter_source_rows(path: str) -> Iterator[List[str]]:
    """
    Itera las filas del CSV en orden de archivo.

    No se salta ninguna cabecera: si existe, el parser la rechaza.
    Las lineas vacias se ignoran.

    Raises:
        SourceFileError: Si el archivo no se puede abrir o leer
    """
    try:
        handle = open(path, newline="", encoding="utf-8")
    except OSError as e:
        raise SourceFileError(f"No se pudo abrir el archivo fuente '{path}': {e}") from e

    with handle:
        reader = csv.reader(handle, delimiter=",", strict=True)
        try:
            for row in reader:
                if not row:
                    continue
                yield row
        except (csv.Error, UnicodeDecodeError, OSError) as e:
            raise SourceFileError(
                f"Error leyendo '{path}' (linea {reader.line_num}): {e}"
            ) from e

    logger.debug(f"Archivo fuente leido completo: {path}")


def iter_chunks(rows: Iterable[RawRow], chunk_size: int) -> Iterator[Chunk]:
    """
    Agrupa filas en chunks de tamano fijo.
    Al final se emite el chunk parcial si no esta vacio.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size debe ser >= 1")

    index = 0
    first_row_number = 1
    buffer: List[RawRow] = []

    for row in rows:
        buffer.append(row)
        if len(buffer) == chunk_size:
            yield Chunk(index=index, first_row_number=first_row_number, rows=tuple(buffer))
            index += 1
            first_row_number += len(buffer)
            buffer = []

    if buffer:
        yield Chunk(index=index, first_row_number=first_row_number, rows=tuple(buffer))
