# -*- coding: utf-8 -*-

from . import printer_api
