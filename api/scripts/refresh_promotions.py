"""
CLI: CSV de promociones -> Postgres (refresco completo).

Uso recomendado:
  - El API ya ejecuta el refresco en segundo plano (REFRESH_ENABLED=true).
  - Este script sirve para cargas manuales o para correr el refresco como
    job separado (cron/systemd) con REFRESH_ENABLED=false en el API.

Ejecucion:
  python scripts/refresh_promotions.py --once
  python scripts/refresh_promotions.py --once --source ./promotions.csv   (manual/depuracion)
  python scripts/refresh_promotions.py
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raiz `app/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

# Cargar variables desde .env si existe (api/.env o raiz del repo)
load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_API_ROOT.parent / ".env", override=False)

from app.core.config import settings
from app.application.services.chunk_loader import ChunkLoader
from app.application.services.refresh_orchestrator import PromotionRefresher
from app.infrastructure.database.session import engine, close_db
from app.infrastructure.executor.chunk_executor import ChunkDispatcher
from app.infrastructure.repositories.promotion_repository import PostgresPromotionStore
from app.shared.constants.promotion_constants import (
    CHUNK_SIZE,
    PROMOTIONS_CSV_FILE,
    REFRESH_INTERVAL_SECONDS,
    RefreshStatus,
)
from app.shared.exceptions.ingestion import PromotionStoreError, SourceFileError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--once",
        action="store_true",
        help="Ejecuta un solo ciclo y termina (sin bucle periodico).",
    )
    parser.add_argument(
        "--source",
        default=PROMOTIONS_CSV_FILE,
        help=(
            f"Ruta del CSV de promociones (default: {PROMOTIONS_CSV_FILE}). "
            "Solo para cargas manuales o depuracion; el servicio siempre lee la ruta fija."
        ),
    )
    return parser


def main() -> int:
    args = build_parser().parse_args()

    store = PostgresPromotionStore(engine)
    try:
        store.ping()
        store.ensure_schema()
    except PromotionStoreError as e:
        logger.error(f"Base de datos no disponible: {e}")
        close_db()
        return 1

    dispatcher = ChunkDispatcher(ChunkLoader(store), max_workers=settings.loader_workers)
    refresher = PromotionRefresher(
        store=store,
        dispatcher=dispatcher,
        source_path=args.source,
        chunk_size=CHUNK_SIZE,
        interval_seconds=REFRESH_INTERVAL_SECONDS,
    )

    try:
        if args.once:
            report = refresher.run_cycle()
            return 0 if report.status == RefreshStatus.COMPLETED else 2
        refresher.run_forever()
        return 0
    except SourceFileError as e:
        logger.error(f"Error fatal leyendo el CSV: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrumpido por el usuario")
        refresher.stop()
        return 130
    finally:
        dispatcher.shutdown()
        close_db()


if __name__ == "__main__":
    raise SystemExit(main())
