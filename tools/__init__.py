# -*- coding: utf-8 -*-

from . import telemetry
from . import online_state
from . import cut_period
