import unittest

from pydantic import ValidationError

from model.dao.enums import FieldType
from model.dto.catalog import ColumnMetadataDTO
from service.catalog import MOCK_COLUMNS
from service.field_derivation import (
    FieldDerivationEngine,
    derive_label,
    select_field_type,
)


def _column(data_type: str, **kwargs) -> ColumnMetadataDTO:
    kwargs.setdefault("name", "Value")
    kwargs.setdefault("nullable", True)
    return ColumnMetadataDTO(data_type=data_type, **kwargs)


class SelectFieldTypeTests(unittest.TestCase):
    def test_bit_maps_to_switch(self):
        self.assertEqual(select_field_type(_column("bit")), FieldType.SWITCH)
        self.assertEqual(select_field_type(_column("BIT")), FieldType.SWITCH)

    def test_integer_types_map_to_number(self):
        for data_type in ("int", "bigint", "smallint", "tinyint", "INT"):
            self.assertEqual(select_field_type(_column(data_type)), FieldType.NUMBER, data_type)

    def test_date_types_map_to_date(self):
        for data_type in ("date", "datetime", "smalldatetime", "datetime2(7)"):
            self.assertEqual(select_field_type(_column(data_type)), FieldType.DATE, data_type)

    def test_text_and_long_varchar_map_to_textarea(self):
        self.assertEqual(select_field_type(_column("text")), FieldType.TEXTAREA)
        self.assertEqual(select_field_type(_column("ntext")), FieldType.TEXTAREA)
        self.assertEqual(select_field_type(_column("varchar(256)")), FieldType.TEXTAREA)
        self.assertEqual(select_field_type(_column("nvarchar(4000)")), FieldType.TEXTAREA)

    def test_short_or_unsized_varchar_maps_to_text(self):
        self.assertEqual(select_field_type(_column("varchar(255)")), FieldType.TEXT)
        self.assertEqual(select_field_type(_column("varchar(100)")), FieldType.TEXT)
        self.assertEqual(select_field_type(_column("nvarchar(max)")), FieldType.TEXT)

    def test_other_types_fall_back_to_text(self):
        self.assertEqual(select_field_type(_column("decimal(10,2)")), FieldType.TEXT)
        self.assertEqual(select_field_type(_column("uniqueidentifier")), FieldType.TEXT)

    def test_foreign_key_overrides_declared_type(self):
        for data_type in ("bit", "int", "datetime", "text", "varchar(50)"):
            column = _column(data_type, is_foreign_key=True, referenced_table="Customers")
            self.assertEqual(select_field_type(column), FieldType.SELECT, data_type)


class DeriveLabelTests(unittest.TestCase):
    def test_splits_camel_case(self):
        self.assertEqual(derive_label("CompanyName"), "Company Name")
        self.assertEqual(derive_label("IsActive"), "Is Active")

    def test_acronyms_are_split_letter_by_letter(self):
        self.assertEqual(derive_label("CustomerID"), "Customer I D")

    def test_underscores_become_spaces_and_first_letter_is_capitalized(self):
        self.assertEqual(derive_label("contact_title"), "Contact title")

    def test_single_word(self):
        self.assertEqual(derive_label("city"), "City")
        self.assertEqual(derive_label("Fax"), "Fax")

    def test_empty_name(self):
        self.assertEqual(derive_label(""), "")


class FieldDerivationEngineTests(unittest.TestCase):
    def setUp(self):
        self.engine = FieldDerivationEngine()

    def test_empty_columns_yield_no_fields(self):
        self.assertEqual(self.engine.derive("Empty", []), [])

    def test_order_follows_input_positions(self):
        fields = self.engine.derive("Customers", MOCK_COLUMNS["Customers"])

        self.assertEqual([f.order for f in fields], list(range(len(fields))))
        self.assertEqual(
            [f.name for f in fields], [c.name for c in MOCK_COLUMNS["Customers"]]
        )
        self.assertEqual(len({f.id for f in fields}), len(fields))

    def test_primary_key_field(self):
        field = self.engine.derive("Customers", MOCK_COLUMNS["Customers"])[0]

        self.assertEqual(field.name, "CustomerID")
        self.assertEqual(field.label, "Customer I D")
        self.assertEqual(field.type, FieldType.NUMBER)
        self.assertTrue(field.required)
        self.assertTrue(field.is_primary_key)
        self.assertFalse(field.is_foreign_key)
        self.assertIsNone(field.foreign_key_fields)
        self.assertIsNone(field.options)

    def test_required_is_negation_of_nullable(self):
        fields = self.engine.derive("Customers", MOCK_COLUMNS["Customers"])
        for field, column in zip(fields, MOCK_COLUMNS["Customers"]):
            self.assertEqual(field.required, not column.nullable)

    def test_foreign_key_defaults(self):
        fields = self.engine.derive("Orders", MOCK_COLUMNS["Orders"])
        customer = next(f for f in fields if f.name == "CustomerID")

        self.assertEqual(customer.type, FieldType.SELECT)
        self.assertEqual(customer.referenced_table, "Customers")
        self.assertEqual(customer.foreign_key_fields, ("id", "name"))
        self.assertEqual(len(customer.options), 1)
        self.assertEqual(customer.options[0].label, "Loading...")
        self.assertEqual(customer.options[0].value, "loading")

    def test_derived_fields_are_immutable(self):
        fields = self.engine.derive("Orders", MOCK_COLUMNS["Orders"])
        first, second = [f for f in fields if f.is_foreign_key][:2]

        with self.assertRaises(ValidationError):
            first.label = "changed"
        with self.assertRaises(ValidationError):
            first.options[0].label = "changed"
        with self.assertRaises(AttributeError):
            first.foreign_key_fields.append("code")

        self.assertEqual(second.foreign_key_fields, ("id", "name"))
        self.assertEqual(second.options[0].label, "Loading...")

    def test_bit_column_becomes_switch(self):
        fields = self.engine.derive("Customers", MOCK_COLUMNS["Customers"])
        self.assertEqual(fields[-1].name, "IsActive")
        self.assertEqual(fields[-1].type, FieldType.SWITCH)


class ColumnMetadataTests(unittest.TestCase):
    def test_foreign_key_requires_referenced_table(self):
        with self.assertRaises(ValueError):
            ColumnMetadataDTO(name="CustomerID", data_type="int", nullable=False, is_foreign_key=True)

    def test_referenced_table_only_for_foreign_keys(self):
        with self.assertRaises(ValueError):
            ColumnMetadataDTO(
                name="CustomerID", data_type="int", nullable=False, referenced_table="Customers"
            )
