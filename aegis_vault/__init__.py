"""
Aegis Vault Modules
"""

__version__ = "1.0.0"

from .crypto import *
from .database import *
from .models import *
from .users import *
from .credentials import *
from .password_generator import *
from .validation import *
