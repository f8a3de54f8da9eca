from .responses import MarkedRead, NotificationResponse, UnreadCount

__all__ = ["MarkedRead", "NotificationResponse", "UnreadCount"]
