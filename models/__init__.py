# -*- coding: utf-8 -*-

from . import printer_tenant
from . import printer
from . import printer_latest_state  # Depende de printer.device
from . import printer_cut  # Depende de printer.device y printer.latest.state
