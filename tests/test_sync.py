"""
Tests for the daily generation sync service.
"""

import unittest
from unittest.mock import Mock

import requests  # type: ignore

from src.solar_telemetry.models import MeterRecord
from src.solar_telemetry.services import DailyGenerationSync
from src.solar_telemetry.storage import InMemoryMeterStore


class TestDailyGenerationSync(unittest.TestCase):
    """Test cases for DailyGenerationSync."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = InMemoryMeterStore(logger=Mock())
        self.store.upsert(MeterRecord(date="01-06-2025", active_energy_export=120.0, site_name="Plant A",
                                      status="submitted"))
        self.store.upsert(MeterRecord(date="01-06-2025", time="12:00", active_energy_export=30.0,
                                      status="submitted"))
        self.store.upsert(MeterRecord(date="02-06-2025", active_energy_export=90.0, status="submitted"))
        self.store.upsert(MeterRecord(date="03-06-2025", active_energy_export=70.0, status="draft"))

        self.api_client = Mock()
        self.api_client.get_sites = Mock(return_value=[
            {"_id": "site-a-id", "siteName": "Plant A", "siteNumber": 7},
            {"_id": "site-b-id", "siteName": "Plant B"},
        ])
        self.api_client.post_daily_generation = Mock(return_value={"ok": True})

        self.sync = DailyGenerationSync(self.store, self.api_client, timezone="Asia/Kolkata", logger=Mock())

    def test_aggregate_daily_totals(self):
        totals = DailyGenerationSync.aggregate_daily_totals(self.store.find(status="submitted"))

        self.assertEqual([t.date for t in totals], ["01-06-2025", "02-06-2025"])
        self.assertEqual(totals[0].total_export, 150.0)
        self.assertEqual(totals[0].record_count, 2)
        self.assertEqual(totals[0].site_name, "Plant A")
        self.assertEqual(totals[1].site_name, "Unknown Site")

    def test_site_mapping(self):
        mapping = self.sync.get_site_mapping()

        self.assertEqual(mapping["plant a"], "site-a-id")
        self.assertEqual(mapping["site-7"], "site-a-id")
        self.assertEqual(mapping["plant b"], "site-b-id")
        self.assertEqual(mapping["default"], "site-a-id")

    def test_site_mapping_unreachable(self):
        self.api_client.get_sites.side_effect = requests.exceptions.ConnectionError("down")
        self.assertEqual(self.sync.get_site_mapping(), {})

    def test_sync_all_submitted(self):
        result = self.sync.sync_to_daily_generation()

        self.assertEqual(result["synced"], 2)
        self.assertEqual(result["total"], 2)

        payload = self.api_client.post_daily_generation.call_args_list[0][0][0]
        self.assertEqual(payload, {
            "site": "site-a-id",
            "date": "2025-06-01T00:00:00+05:30",
            "dailyGeneration": 150.0,
            "status": "submitted",
        })
        # Unknown site falls back to the default site
        self.assertEqual(self.api_client.post_daily_generation.call_args_list[1][0][0]["site"], "site-a-id")

    def test_sync_date(self):
        result = self.sync.sync_date("02-Jun-25")

        self.assertEqual(result["synced"], 1)
        self.api_client.post_daily_generation.assert_called_once()

    def test_nothing_to_sync(self):
        result = self.sync.sync_date("03-06-2025")

        self.assertEqual(result["synced"], 0)
        self.api_client.post_daily_generation.assert_not_called()

    def test_per_date_failures_reported(self):
        self.api_client.post_daily_generation.side_effect = [
            requests.exceptions.HTTPError("500"), {"ok": True}
        ]

        result = self.sync.sync_to_daily_generation()

        self.assertEqual(result["synced"], 1)
        self.assertFalse(result["results"][0]["success"])
        self.assertTrue(result["results"][1]["success"])

    def test_no_site_mapping_skips(self):
        self.api_client.get_sites.return_value = []

        result = self.sync.sync_to_daily_generation()

        self.assertEqual(result["synced"], 0)
        self.api_client.post_daily_generation.assert_not_called()

    def test_sync_status(self):
        status = self.sync.get_sync_status()

        self.assertEqual(status["total"], 4)
        self.assertEqual(status["submitted"], 3)
        self.assertEqual(status["draft"], 1)
        self.assertEqual(status["syncable"], 3)
        self.assertIn("lastChecked", status)

    def test_export_json(self):
        exported = self.sync.export_data(start_date="01-06-2025", end_date="01-Jun-25")

        self.assertEqual(exported["total"], 1)
        self.assertEqual(exported["records"], [{
            "date": "01-06-2025",
            "siteName": "Plant A",
            "dailyGeneration": 150.0,
            "plantStartTime": "00:00",
            "plantStopTime": "00:00",
            "totalOperationTime": "00:00",
            "recordCount": 2,
        }])
        self.api_client.post_daily_generation.assert_not_called()

    def test_export_csv(self):
        self.store.upsert(MeterRecord(date="04-06-2025", active_energy_export=40.0, plant_start_time="06:30",
                                      plant_stop_time="18:00", total_operating_time="11:30",
                                      site_name="Plant, B", status="submitted"))

        lines = self.sync.export_data(fmt="csv").splitlines()

        self.assertEqual(
            lines[0],
            "Date,Site Name,Daily Generation (kWh),Plant Start Time,Plant Stop Time,Total Operation Time",
        )
        self.assertEqual(lines[1], "01-06-2025,Plant A,150.0,00:00,00:00,00:00")
        self.assertEqual(lines[3], '04-06-2025,"Plant, B",40.0,06:30,18:00,11:30')
        self.assertEqual(len(lines), 4)

    def test_export_csv_without_records(self):
        self.assertEqual(
            self.sync.export_data(start_date="01-01-2020", end_date="02-01-2020", fmt="csv"),
            "Date,Site Name,Daily Generation (kWh),Plant Start Time,Plant Stop Time,Total Operation Time\n",
        )

    def test_export_rejects_unknown_format(self):
        with self.assertRaises(ValueError):
            self.sync.export_data(fmt="xlsx")

    def test_auto_sync_on_submit(self):
        records = self.store.find(status="submitted")

        result = self.sync.auto_sync_on_submit(records)

        self.assertEqual(result["dates"], 2)
        self.assertEqual(result["synced"], 2)

    def test_auto_sync_never_raises(self):
        self.sync.sync_date = Mock(side_effect=RuntimeError("boom"))

        result = self.sync.auto_sync_on_submit(self.store.find(status="submitted"))

        self.assertEqual(result["synced"], 0)
        self.assertIn("boom", result["error"])

    def test_auto_sync_without_records(self):
        self.assertEqual(self.sync.auto_sync_on_submit([])["synced"], 0)


if __name__ == "__main__":
    unittest.main()
