import json
import unittest

from model.dao.forms import FormConfigDAO
from service.catalog import MOCK_COLUMNS
from service.form_configuration import FormConfigurationModel


class FormConfigDAOTests(unittest.TestCase):
    def setUp(self):
        model = FormConfigurationModel.from_columns("Orders", MOCK_COLUMNS["Orders"])
        model.update_details(name="Orders Form", description="Back office orders")
        model.update_field("field-1", {"foreign_key_fields": ["id", "code"]})
        model.update_field("field-14", {"label": "Order status", "required": False})
        self.snapshot = model.to_snapshot()

    def test_row_converts_back_to_the_same_snapshot(self):
        dao = FormConfigDAO.from_dto(self.snapshot)

        self.assertEqual(dao.to_dto(), self.snapshot)

    def test_fields_are_stored_as_plain_json(self):
        stored = FormConfigDAO.from_dto(self.snapshot).form_fields

        self.assertEqual(json.loads(json.dumps(stored)), stored)
        self.assertEqual(stored[1]["type"], "select")
        self.assertEqual(stored[1]["foreign_key_fields"], ["id", "code"])
        self.assertEqual(stored[14]["label"], "Order status")
        self.assertEqual([f["order"] for f in stored], list(range(15)))

    def test_restored_fields_are_frozen_models(self):
        restored = FormConfigDAO.from_dto(self.snapshot).to_dto()

        self.assertEqual(restored.fields[1].foreign_key_fields, ("id", "code"))
        self.assertEqual(restored.table_name, "Orders")
        self.assertEqual(restored.description, "Back office orders")
