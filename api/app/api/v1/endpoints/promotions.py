"""
Endpoint de consulta de promociones por ID.
Solo lectura: 200 con la promocion, 404 si no existe, 500 ante fallos.
"""
from fastapi import APIRouter, Depends

from app.application.dto.promotion_dto import PromotionDTO
from app.application.use_cases.promotion_use_cases import PromotionUseCases
from app.api.v1.dependencies.use_case_deps import get_promotion_use_cases

router = APIRouter(prefix="/promotions", tags=["Promotions"])


@router.get("/{promotion_id}", response_model=PromotionDTO)
async def get_promotion(
    promotion_id: str,
    use_cases: PromotionUseCases = Depends(get_promotion_use_cases)
):
    """
    Obtener una promocion por su ID.
    """
    return await use_cases.get_promotion(promotion_id)
