import unittest
from datetime import datetime

from worxnotes.schemas.compat import CURRENT_SCHEMA_VERSION, upgrade_record
from worxnotes.schemas.repair_sheet import (
    BrakePadUnit,
    RepairSheet,
    RepairSheetCreate,
    TirePressure,
    coerce_measurement,
    customer_display_name,
    format_timestamp,
)


def stored_row(**fields):
    row = {
        "id": "abc",
        "created_at": "2025-05-14T09:05:00",
        "technician_name": "J. Rivera",
        "ro_number": "RO-1042",
        "tire_tread": {"lf": 8, "rf": 8, "lr": 6, "rr": 6},
        "brake_pads": {"lf": 9, "rf": 9, "lr": 7, "rr": 7},
        "tire_pressure": {},
    }
    row.update(fields)
    return row


class TestMeasurementCoercion(unittest.TestCase):
    def test_empty_string_is_zero(self):
        self.assertEqual(coerce_measurement(""), 0)
        self.assertEqual(coerce_measurement("   "), 0)

    def test_non_numeric_is_zero(self):
        self.assertEqual(coerce_measurement("abc"), 0)
        self.assertEqual(coerce_measurement("7/32"), 0)

    def test_integer_string(self):
        self.assertEqual(coerce_measurement("12"), 12)
        self.assertEqual(coerce_measurement(" 4 "), 4)

    def test_missing_values(self):
        self.assertEqual(coerce_measurement(None), 0)
        self.assertEqual(coerce_measurement(float("nan")), 0)

    def test_groups_never_hold_null(self):
        pressure = TirePressure(front_left_in=None, rear_out="x")
        self.assertEqual(pressure.front_left_in, 0)
        self.assertEqual(pressure.rear_out, 0)

    def test_missing_group_defaults_to_zeros(self):
        sheet = RepairSheetCreate(technician_name="A", ro_number="1", tire_tread=None)
        self.assertEqual(sheet.tire_tread.model_dump(), {"lf": 0, "rf": 0, "lr": 0, "rr": 0})


class TestRequiredFields(unittest.TestCase):
    def test_blank_technician_rejected(self):
        with self.assertRaises(ValueError):
            RepairSheetCreate(technician_name="   ", ro_number="RO-1")

    def test_values_are_trimmed(self):
        sheet = RepairSheetCreate(technician_name=" Ana ", ro_number=" RO-7 ")
        self.assertEqual((sheet.technician_name, sheet.ro_number), ("Ana", "RO-7"))


class TestCompatibilityFill(unittest.TestCase):
    def test_legacy_tire_pressure_populates_both_sides(self):
        row = stored_row(tire_pressure={"front_in": 32, "rear_in": 35, "front_out": 36, "rear_out": 36})
        sheet = RepairSheet.model_validate(upgrade_record(row))
        self.assertEqual(sheet.tire_pressure.front_left_in, 32)
        self.assertEqual(sheet.tire_pressure.front_right_in, 32)
        self.assertEqual(sheet.tire_pressure.rear_left_in, 35)
        self.assertEqual(sheet.tire_pressure.rear_right_in, 35)
        self.assertEqual(sheet.tire_pressure.front_out, 36)

    def test_new_pressure_fields_take_precedence(self):
        row = stored_row(tire_pressure={
            "front_in": 30, "front_left_in": 33, "front_right_in": 34,
            "rear_left_in": 31, "rear_right_in": 31,
        })
        sheet = RepairSheet.model_validate(upgrade_record(row))
        self.assertEqual(sheet.tire_pressure.front_left_in, 33)
        self.assertEqual(sheet.tire_pressure.front_right_in, 34)

    def test_current_rows_are_left_untouched(self):
        row = stored_row(
            schema_version=CURRENT_SCHEMA_VERSION,
            customer_first_name="Dana",
            customer_last_name="Lee",
            tire_pressure={"front_left_in": 33, "front_right_in": 34},
            front_brake_pad_unit="%",
            rear_brake_pad_unit="MM",
        )
        upgraded = upgrade_record(row)
        self.assertEqual(upgraded["tire_pressure"], {"front_left_in": 33, "front_right_in": 34})
        self.assertEqual(upgraded["front_brake_pad_unit"], "%")

    def test_legacy_customer_name_is_split(self):
        sheet = RepairSheet.model_validate(upgrade_record(stored_row(customer_name="Maria de la Cruz")))
        self.assertEqual(sheet.customer_first_name, "Maria")
        self.assertEqual(sheet.customer_last_name, "de la Cruz")

    def test_split_name_wins_over_legacy(self):
        row = stored_row(customer_name="Old Name", customer_first_name="New")
        sheet = RepairSheet.model_validate(upgrade_record(row))
        self.assertEqual(sheet.customer_first_name, "New")
        self.assertIsNone(sheet.customer_last_name)

    def test_legacy_brake_unit_applies_to_both_axles(self):
        sheet = RepairSheet.model_validate(upgrade_record(stored_row(brake_pad_unit="%")))
        self.assertEqual(sheet.front_brake_pad_unit, BrakePadUnit.PERCENT)
        self.assertEqual(sheet.rear_brake_pad_unit, BrakePadUnit.PERCENT)

    def test_legacy_mileage(self):
        sheet = RepairSheet.model_validate(upgrade_record(stored_row(vehicle_mileage=84211)))
        self.assertEqual(sheet.vehicle_mileage_in, 84211)

    def test_upgrade_does_not_mutate_input(self):
        row = stored_row(customer_name="A B")
        upgrade_record(row)
        self.assertEqual(row["customer_name"], "A B")
        self.assertNotIn("customer_first_name", row)


class TestDisplayHelpers(unittest.TestCase):
    def test_customer_display_name(self):
        self.assertEqual(customer_display_name("Dana", "Lee"), "Dana Lee")
        self.assertEqual(customer_display_name("Dana", None), "Dana")
        self.assertEqual(customer_display_name(None, "Lee"), "Lee")
        self.assertEqual(customer_display_name("", "  "), "—")

    def test_unit_toggle_twice_is_identity(self):
        for unit in BrakePadUnit:
            self.assertIs(unit.toggled().toggled(), unit)
        self.assertIs(BrakePadUnit.MM.toggled(), BrakePadUnit.PERCENT)

    def test_format_timestamp(self):
        self.assertEqual(format_timestamp(datetime(2025, 5, 14, 9, 5)), "May 14, 2025, 09:05 AM")

    def test_has_attachment(self):
        sheet = RepairSheet.model_validate(stored_row())
        self.assertFalse(sheet.has_attachment)
        sheet = RepairSheet.model_validate(stored_row(diagnostic_file_id="1-scan.txt"))
        self.assertTrue(sheet.has_attachment)


if __name__ == "__main__":
    unittest.main()
