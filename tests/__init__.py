# -*- coding: utf-8 -*-

from . import test_telemetry
from . import test_online_state
from . import test_cut_period
from . import test_ingest
from . import test_printer_cut
from . import test_cut_report
from . import test_printer_api
