"""
fbmessenger
Facebook Messenger Platform bot client.

- fbmessenger.outbound: Graph API client (Send, Messenger Profile, User Profile APIs)
- fbmessenger.inbound: webhook callback classification
"""

from fbmessenger.outbound import (
    ErrorKind,
    GraphApiClient,
    GraphApiSettings,
    MessengerError,
    Upload,
)

__version__ = "0.3.0"
