# -*- coding: utf-8 -*-

from datetime import datetime

from odoo.tests import tagged
from odoo.tests.common import BaseCase

from ..tools.telemetry import (
    coerce_counter,
    has_snmp_signal,
    is_low_toner,
    normalize_supplies,
    parse_timestamp,
    supply_percentage,
)


@tagged('post_install', '-at_install')
class TestTimestampParsing(BaseCase):

    def test_utc_suffix(self):
        self.assertEqual(parse_timestamp('2025-10-13T10:30:00Z'), datetime(2025, 10, 13, 10, 30))

    def test_offset_converted_to_utc(self):
        self.assertEqual(parse_timestamp('2025-10-13T10:30:00-05:00'), datetime(2025, 10, 13, 15, 30))

    def test_naive_formats(self):
        self.assertEqual(parse_timestamp('2025-10-13 10:30:00'), datetime(2025, 10, 13, 10, 30))
        self.assertEqual(
            parse_timestamp('2025-10-19T10:57:00.161493'),
            datetime(2025, 10, 19, 10, 57, 0, 161493)
        )

    def test_unparsable(self):
        self.assertIsNone(parse_timestamp('ayer por la tarde'))
        self.assertIsNone(parse_timestamp(''))
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp(1697193000))


@tagged('post_install', '-at_install')
class TestCounterAndSupplies(BaseCase):

    def test_coerce_counter(self):
        self.assertEqual(coerce_counter(1500), 1500)
        self.assertEqual(coerce_counter(1500.0), 1500)
        self.assertEqual(coerce_counter(0), 0)
        self.assertIsNone(coerce_counter('1500'))
        self.assertIsNone(coerce_counter(True))
        self.assertIsNone(coerce_counter(None))
        self.assertIsNone(coerce_counter(float('nan')))
        self.assertIsNone(coerce_counter(float('inf')))

    def test_normalize_supplies(self):
        supplies = [{'name': 'Black', 'level': 40, 'max': 100}]
        self.assertEqual(normalize_supplies(supplies), supplies)
        self.assertIsNot(normalize_supplies(supplies), supplies)
        self.assertEqual(normalize_supplies({'name': 'Black'}), [])
        self.assertEqual(normalize_supplies(None), [])

    def test_supply_percentage(self):
        self.assertEqual(supply_percentage({'level': 15, 'max': 100}), 15.0)
        self.assertEqual(supply_percentage({'level': 4000, 'max': 8000}), 50.0)
        self.assertEqual(supply_percentage({'level': 18}), 18.0)
        self.assertEqual(supply_percentage({'level': 18, 'max': 0}), 18.0)
        self.assertIsNone(supply_percentage({'name': 'Drum'}))
        self.assertIsNone(supply_percentage('Black'))


@tagged('post_install', '-at_install')
class TestLowToner(BaseCase):

    def test_below_threshold_with_max(self):
        self.assertTrue(is_low_toner([{'name': 'Black', 'level': 15, 'max': 100}]))

    def test_above_threshold_with_max(self):
        self.assertFalse(is_low_toner([{'name': 'Black', 'level': 25, 'max': 100}]))

    def test_bare_level_is_percentage(self):
        self.assertTrue(is_low_toner([{'name': 'Black', 'level': 18}]))

    def test_threshold_is_inclusive(self):
        self.assertTrue(is_low_toner([{'level': 20, 'max': 100}]))

    def test_any_supply_triggers(self):
        self.assertTrue(is_low_toner([
            {'name': 'Cyan', 'level': 90, 'max': 100},
            {'name': 'Magenta', 'level': 5, 'max': 100},
        ]))

    def test_non_numeric_levels_ignored(self):
        self.assertFalse(is_low_toner([{'name': 'Black', 'level': 'OK'}, 'basura']))
        self.assertFalse(is_low_toner([]))
        self.assertFalse(is_low_toner(None))

    def test_null_level_counts_as_empty(self):
        self.assertTrue(is_low_toner([{'name': 'Black', 'level': None, 'max': 100}]))
        self.assertTrue(is_low_toner([{'name': 'Black', 'level': ''}]))
        self.assertEqual(supply_percentage({'level': None, 'max': 100}), 0.0)

    def test_missing_level_ignored(self):
        self.assertFalse(is_low_toner([{'name': 'Black', 'max': 100}]))


@tagged('post_install', '-at_install')
class TestSnmpSignal(BaseCase):

    def test_host_only_has_no_signal(self):
        self.assertFalse(has_snmp_signal({'host': '10.0.0.14'}))
        self.assertFalse(has_snmp_signal({'host': '10.0.0.14', 'supplies': []}))

    def test_zero_page_count_is_signal(self):
        self.assertTrue(has_snmp_signal({'host': '10.0.0.14', 'pageCount': 0}))

    def test_supplies_or_identity_is_signal(self):
        self.assertTrue(has_snmp_signal({'supplies': [{'level': 10}]}))
        self.assertTrue(has_snmp_signal({'serial': 'XYZ123'}))
        self.assertTrue(has_snmp_signal({'sysDescr': 'HP LaserJet'}))
