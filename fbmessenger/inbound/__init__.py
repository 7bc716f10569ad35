# fbmessenger/inbound/__init__.py
from . import callbacks
from .callbacks import CallbackKind, classify
