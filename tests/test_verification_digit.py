import unittest

from core.environment import WeightOrder
from core.exceptions import InvalidFormatException
from model.dao.enums import FieldType, FormErrorKind
from model.dto.forms import FormFieldDTO
from service.verification_digit import (
    VERIFICATION_DIGIT_LABEL,
    build_verification_digit_field,
    compute_verification_digit,
    find_nit_field,
    requires_verification_digit,
    validate_nit,
)


LEFT = WeightOrder.LEFT_TO_RIGHT
RIGHT = WeightOrder.RIGHT_TO_LEFT


def _field(name: str, label: str | None = None, order: int = 0) -> FormFieldDTO:
    return FormFieldDTO(
        id=f"field-{order}",
        name=name,
        label=label or name,
        type=FieldType.TEXT,
        required=False,
        order=order,
    )


class ComputeVerificationDigitTests(unittest.TestCase):
    def test_left_to_right_weighting(self):
        # 000000900123456 -> 9*29 + 1*43 + 2*47 + 3*53 + 4*59 + 5*67 + 6*71 = 1554
        self.assertEqual(compute_verification_digit("900123456", LEFT), 8)
        self.assertEqual(compute_verification_digit("890903938", LEFT), 9)
        self.assertEqual(compute_verification_digit("800197268", LEFT), 1)

    def test_right_to_left_matches_published_dian_digits(self):
        self.assertEqual(compute_verification_digit("890903938", RIGHT), 8)
        self.assertEqual(compute_verification_digit("800197268", RIGHT), 4)
        self.assertEqual(compute_verification_digit("900123456", RIGHT), 8)

    def test_default_order_is_left_to_right(self):
        self.assertEqual(compute_verification_digit("800197268"), 1)

    def test_remainders_zero_and_one_are_returned_as_is(self):
        self.assertEqual(compute_verification_digit("0", LEFT), 0)
        # 9 * 71 = 639 = 58 * 11 + 1
        self.assertEqual(compute_verification_digit("9", LEFT), 1)

    def test_other_remainders_are_subtracted_from_eleven(self):
        # 71 % 11 == 5
        self.assertEqual(compute_verification_digit("1", LEFT), 6)
        # 142 % 11 == 10
        self.assertEqual(compute_verification_digit("2", LEFT), 1)

    def test_leading_zeros_do_not_change_the_digit(self):
        self.assertEqual(
            compute_verification_digit("000900123456", LEFT),
            compute_verification_digit("900123456", LEFT),
        )

    def test_fifteen_digits_are_accepted(self):
        digit = compute_verification_digit("123456789012345", LEFT)
        self.assertGreaterEqual(digit, 0)
        self.assertLessEqual(digit, 10)

    def test_invalid_formats_raise(self):
        for tax_id in ("", "abc", "900.123.456", "900123456-8", " 900123456", "١٢٣"):
            with self.assertRaises(InvalidFormatException) as ctx:
                compute_verification_digit(tax_id)
            self.assertEqual(ctx.exception.kind, FormErrorKind.INVALID_FORMAT)

    def test_more_than_fifteen_digits_raise(self):
        with self.assertRaises(InvalidFormatException):
            compute_verification_digit("1234567890123456")


class ValidateNitTests(unittest.TestCase):
    def test_nit_document_type_computes_digit(self):
        result = validate_nit("900123456", "31", LEFT)

        self.assertTrue(result.is_valid)
        self.assertEqual(result.verification_digit, compute_verification_digit("900123456", LEFT))

    def test_other_document_types_are_not_checked(self):
        result = validate_nit("900123456", "13")

        self.assertTrue(result.is_valid)
        self.assertIsNone(result.verification_digit)

        self.assertTrue(validate_nit("not-a-number", "13").is_valid)

    def test_malformed_nit_is_invalid(self):
        result = validate_nit("abc", "31")

        self.assertFalse(result.is_valid)
        self.assertIsNone(result.verification_digit)


class VerificationDigitFieldTests(unittest.TestCase):
    def setUp(self):
        self.fields = [
            _field("Nit", order=0),
            _field("TipoDocumento", "Tipo Documento", order=1),
            _field("RazonSocial", "Razon Social", order=2),
        ]

    def test_requires_nit_and_document_type(self):
        self.assertTrue(requires_verification_digit(self.fields))
        self.assertFalse(requires_verification_digit(self.fields[:1]))
        self.assertFalse(requires_verification_digit(self.fields[1:]))

    def test_document_type_can_be_matched_by_label(self):
        fields = [_field("Nit"), _field("doc_type", "Tipo de documento", order=1)]
        self.assertTrue(requires_verification_digit(fields))

    def test_existing_verification_digit_field_disables_synthesis(self):
        for name, label in (
            ("DigitoVerificacion", None),
            ("dv", "Dígito de verificación"),
            ("check", "Verification digit"),
        ):
            fields = self.fields + [_field(name, label, order=3)]
            self.assertFalse(requires_verification_digit(fields), name)
            self.assertIsNone(build_verification_digit_field(fields))

    def test_digit_is_bound_to_live_nit_value(self):
        field = build_verification_digit_field(
            self.fields, {"Nit": "900123456", "TipoDocumento": "31"}, LEFT
        )

        self.assertEqual(field.label, VERIFICATION_DIGIT_LABEL)
        self.assertTrue(field.read_only)
        self.assertEqual(field.value, 8)

    def test_digit_is_empty_without_values(self):
        field = build_verification_digit_field(self.fields)

        self.assertIsNotNone(field)
        self.assertIsNone(field.value)

    def test_digit_is_empty_for_other_document_types(self):
        field = build_verification_digit_field(
            self.fields, {"Nit": "900123456", "TipoDocumento": "13"}
        )
        self.assertIsNone(field.value)

    def test_digit_is_empty_for_malformed_nit(self):
        field = build_verification_digit_field(
            self.fields, {"Nit": "90A", "TipoDocumento": "31"}
        )
        self.assertIsNone(field.value)

    def test_nit_field_is_preferred_over_embedded_letters(self):
        fields = [
            _field("UnitPrice", "Unit Price", order=0),
            _field("TipoDocumento", "Tipo Documento", order=1),
            _field("Nit", order=2),
        ]

        self.assertEqual(find_nit_field(fields).name, "Nit")
        field = build_verification_digit_field(
            fields, {"UnitPrice": "7", "TipoDocumento": "31", "Nit": "900123456"}, LEFT
        )
        self.assertEqual(field.value, 8)

    def test_nit_word_in_label_is_preferred(self):
        fields = [
            _field("UnitsInStock", "Units In Stock", order=0),
            _field("NitCliente", "Nit Cliente", order=1),
        ]
        self.assertEqual(find_nit_field(fields).name, "NitCliente")

    def test_embedded_match_is_the_fallback(self):
        fields = [_field("TipoDocumento", "Tipo Documento"), _field("UnitCode", "Unit Code", order=1)]
        self.assertEqual(find_nit_field(fields).name, "UnitCode")
