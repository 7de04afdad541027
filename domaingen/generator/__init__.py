"""Domain model code generator."""

from .descriptor import *
from .diagnostics import *
from .parser import parse as parse
from .pipeline import check as check
from .pipeline import check_all as check_all
from .types import *
