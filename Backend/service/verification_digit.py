"""DIAN verification digit (DV) for Colombian tax ids (NIT).

The calculator pads the id to fifteen digits and weighs each position with a
fixed prime sequence. ``WeightOrder.LEFT_TO_RIGHT`` pairs the first weight
with the leftmost padded digit. ``WeightOrder.RIGHT_TO_LEFT`` pairs it with
the rightmost digit, which is the alignment DIAN publishes.
"""

import re
from typing import Any, Iterable, Mapping

from core.environment import WeightOrder, settings
from core.exceptions import InvalidFormatException
from core.logger import app_logger
from model.dto.forms import AuxiliaryFieldDTO, FormFieldDTO
from model.dto.nit import NitValidationResultDTO


NIT_DOCUMENT_TYPE = "31"
NIT_LENGTH = 15
WEIGHTS = (3, 7, 13, 17, 19, 23, 29, 37, 41, 43, 47, 53, 59, 67, 71)

VERIFICATION_DIGIT_LABEL = "Dígito de Verificación (DV)"

_NIT_MARKERS = ("nit",)
_NIT_WORD = re.compile(r"\bnit\b")
_DOCUMENT_TYPE_MARKERS = ("tipodocumento", "tipo de documento")
_VERIFICATION_DIGIT_MARKERS = (
    "digitoverificacion",
    "digito de verificacion",
    "dígito de verificación",
    "verification digit",
)


def compute_verification_digit(
    tax_id: str, weight_order: WeightOrder | None = None
) -> int:
    """Return the verification digit (0-10) for a digits-only tax id.

    Raises ``InvalidFormatException`` for empty input, non-digit characters
    or ids longer than fifteen digits.
    """
    if not tax_id or not (tax_id.isascii() and tax_id.isdigit()):
        app_logger.warning(f"NIT must contain only digits, got `{tax_id}`")
        raise InvalidFormatException()

    if len(tax_id) > NIT_LENGTH:
        app_logger.warning(f"NIT `{tax_id}` is longer than {NIT_LENGTH} digits")
        raise InvalidFormatException(f"NIT must have at most {NIT_LENGTH} digits")

    weight_order = weight_order or settings.NIT_WEIGHT_ORDER
    weights = WEIGHTS if weight_order == WeightOrder.LEFT_TO_RIGHT else WEIGHTS[::-1]

    padded = tax_id.rjust(NIT_LENGTH, "0")
    total = sum(int(digit) * weight for digit, weight in zip(padded, weights))

    remainder = total % 11
    return remainder if remainder in (0, 1) else 11 - remainder


def validate_nit(
    nit: str, document_type: str, weight_order: WeightOrder | None = None
) -> NitValidationResultDTO:
    # Only document type 31 identifies a NIT; anything else is not checked.
    if document_type != NIT_DOCUMENT_TYPE:
        return NitValidationResultDTO(is_valid=True)

    try:
        digit = compute_verification_digit(nit, weight_order)
    except InvalidFormatException:
        return NitValidationResultDTO(is_valid=False)

    return NitValidationResultDTO(is_valid=digit >= 0, verification_digit=digit)


def _matches(field: FormFieldDTO, markers: Iterable[str]) -> bool:
    name = field.name.lower()
    label = field.label.lower()
    return any(marker in name or marker in label for marker in markers)


def _is_nit_candidate(field: FormFieldDTO) -> bool:
    return _matches(field, _NIT_MARKERS) and not (
        _matches(field, _DOCUMENT_TYPE_MARKERS)
        or _matches(field, _VERIFICATION_DIGIT_MARKERS)
    )


def find_nit_field(fields: Iterable[FormFieldDTO]) -> FormFieldDTO | None:
    """Pick the tax id field.

    A field whose name is ``nit`` or whose label holds the word "nit" wins
    over one that merely contains the letters, such as ``UnitPrice``.
    """
    candidates = [field for field in fields if _is_nit_candidate(field)]
    for field in candidates:
        if field.name.lower() == "nit" or _NIT_WORD.search(field.label.lower()):
            return field
    return candidates[0] if candidates else None


def find_document_type_field(fields: Iterable[FormFieldDTO]) -> FormFieldDTO | None:
    return next((f for f in fields if _matches(f, _DOCUMENT_TYPE_MARKERS)), None)


def requires_verification_digit(fields: Iterable[FormFieldDTO]) -> bool:
    """True when the fields hold a NIT and a document type but no DV yet."""
    fields = list(fields)
    if any(_matches(field, _VERIFICATION_DIGIT_MARKERS) for field in fields):
        return False
    return (
        find_nit_field(fields) is not None
        and find_document_type_field(fields) is not None
    )


def build_verification_digit_field(
    fields: Iterable[FormFieldDTO],
    values: Mapping[str, Any] | None = None,
    weight_order: WeightOrder | None = None,
) -> AuxiliaryFieldDTO | None:
    """Synthesize the read-only DV field shown next to a NIT.

    The digit is computed from the live NIT and document type values; it is
    left empty until both allow a computation.
    """
    fields = list(fields)
    if not requires_verification_digit(fields):
        return None

    values = values or {}
    nit_value = values.get(find_nit_field(fields).name)
    document_type = values.get(find_document_type_field(fields).name)

    digit = None
    if nit_value is not None and document_type is not None:
        digit = validate_nit(str(nit_value), str(document_type), weight_order).verification_digit

    return AuxiliaryFieldDTO(label=VERIFICATION_DIGIT_LABEL, value=digit)
