# -*- coding: utf-8 -*-

from . import tools
from . import report
from . import models
from . import controllers
