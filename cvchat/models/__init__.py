from .user import User, UserSession
from .cv import CV, CVMeta
from .evidence import Certificate, ReferenceDocument, AdditionalText
from .app_event import AppEvent

__all__ = [
    "User",
    "UserSession",
    "CV",
    "CVMeta",
    "Certificate",
    "ReferenceDocument",
    "AdditionalText",
    "AppEvent"
]
