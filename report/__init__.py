# -*- coding: utf-8 -*-

from . import cut_report
