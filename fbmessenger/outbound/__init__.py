# fbmessenger/outbound/__init__.py
from .errors import ErrorKind, MessengerError
from .graph import GraphApiClient
from .payloads import (
    AccountLinkingUrl,
    AttachmentMessage,
    GetStartedButton,
    GreetingText,
    HomeUrl,
    MediaMessage,
    PersistentMenu,
    ReusableMediaMessage,
    SenderAction,
    TargetAudience,
    TemplateMessage,
    TextMessage,
    WhitelistedDomains,
)
from .settings import GraphApiSettings, load_graph_settings
from .uploads import Upload
