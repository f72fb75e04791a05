from pydantic import BaseModel


class NitValidationDTO(BaseModel):
    nit: str
    document_type: str


class NitValidationResultDTO(BaseModel):
    is_valid: bool
    verification_digit: int | None = None


class VerificationDigitDTO(BaseModel):
    tax_id: str
    verification_digit: int
