# -*- coding: utf-8 -*-

from datetime import datetime, timedelta

from odoo.tests import tagged
from odoo.tests.common import BaseCase

from ..tools.online_state import (
    DEFAULT_ONLINE_STALE_MS,
    compute_derived_online,
    read_stale_threshold,
)

NOW = datetime(2025, 10, 13, 12, 0, 0)
STALE_MS = 120000


@tagged('post_install', '-at_install')
class TestDerivedOnline(BaseCase):

    def _online(self, last_seen_at, online=None, now=NOW):
        latest = {'last_seen_at': last_seen_at}
        if online is not None:
            latest['online'] = online
        return compute_derived_online(latest, now=now, stale_ms=STALE_MS)

    def test_missing_state(self):
        self.assertFalse(compute_derived_online(None, now=NOW, stale_ms=STALE_MS))
        self.assertFalse(compute_derived_online({}, now=NOW, stale_ms=STALE_MS))

    def test_never_seen(self):
        self.assertFalse(self._online(None))

    def test_fresh_report(self):
        self.assertTrue(self._online(NOW - timedelta(seconds=10)))

    def test_exact_threshold_is_online(self):
        self.assertTrue(self._online(NOW - timedelta(milliseconds=STALE_MS)))

    def test_one_millisecond_past_threshold(self):
        self.assertFalse(self._online(NOW - timedelta(milliseconds=STALE_MS + 1)))

    def test_explicit_offline_wins(self):
        self.assertFalse(self._online(NOW, online=False))
        self.assertTrue(self._online(NOW, online=True))

    def test_string_timestamps(self):
        self.assertTrue(self._online('2025-10-13T11:59:00Z', now='2025-10-13T12:00:00Z'))
        self.assertFalse(self._online('2025-10-13T06:59:00-05:00', now='2025-10-13T12:00:00Z'))

    def test_unparsable_last_seen(self):
        self.assertFalse(self._online('hace un rato'))

    def test_record_like_snapshot(self):
        class Snapshot:
            last_seen_at = NOW - timedelta(seconds=30)
            online_signal = False

        self.assertFalse(compute_derived_online(Snapshot(), now=NOW, stale_ms=STALE_MS))
        Snapshot.online_signal = True
        self.assertTrue(compute_derived_online(Snapshot(), now=NOW, stale_ms=STALE_MS))


@tagged('post_install', '-at_install')
class TestStaleThresholdConfig(BaseCase):

    logger_name = 'odoo.addons.print_monitor.tools.online_state'

    def test_default(self):
        self.assertEqual(DEFAULT_ONLINE_STALE_MS, 120000)
        self.assertEqual(read_stale_threshold({}), DEFAULT_ONLINE_STALE_MS)
        self.assertEqual(read_stale_threshold({'ONLINE_STALE_MS': ''}), DEFAULT_ONLINE_STALE_MS)

    def test_override(self):
        self.assertEqual(read_stale_threshold({'ONLINE_STALE_MS': '5000'}), 5000)
        self.assertEqual(read_stale_threshold({'ONLINE_STALE_MS': '0'}), 0)

    def test_invalid_values_fall_back(self):
        with self.assertLogs(self.logger_name, level='WARNING'):
            self.assertEqual(read_stale_threshold({'ONLINE_STALE_MS': 'dos minutos'}), DEFAULT_ONLINE_STALE_MS)
        with self.assertLogs(self.logger_name, level='WARNING'):
            self.assertEqual(read_stale_threshold({'ONLINE_STALE_MS': '-1'}), DEFAULT_ONLINE_STALE_MS)
        with self.assertLogs(self.logger_name, level='WARNING'):
            self.assertEqual(read_stale_threshold({'ONLINE_STALE_MS': 'inf'}), DEFAULT_ONLINE_STALE_MS)
        with self.assertLogs(self.logger_name, level='WARNING'):
            self.assertEqual(read_stale_threshold({'ONLINE_STALE_MS': '1e400'}), DEFAULT_ONLINE_STALE_MS)
