from fastapi import APIRouter, status

from core.environment import settings
from model.dto.base import BaseResponseDTO
from model.dto.nit import NitValidationDTO, VerificationDigitDTO
from service.verification_digit import compute_verification_digit, validate_nit


nit_router = APIRouter(prefix="/nit", tags=["NIT"])


@nit_router.post("/validate", status_code=status.HTTP_200_OK)
async def validate(dto: NitValidationDTO) -> BaseResponseDTO:
    result = validate_nit(dto.nit, dto.document_type, settings.NIT_WEIGHT_ORDER)

    return BaseResponseDTO(
        data=result,
        message="NIT is valid." if result.is_valid else "NIT must contain only digits.",
    )


@nit_router.get("/{tax_id}/verification-digit", status_code=status.HTTP_200_OK)
async def verification_digit(tax_id: str) -> BaseResponseDTO:
    digit = compute_verification_digit(tax_id, settings.NIT_WEIGHT_ORDER)

    return BaseResponseDTO(
        data=VerificationDigitDTO(tax_id=tax_id, verification_digit=digit),
        message="Verification digit computed.",
    )
