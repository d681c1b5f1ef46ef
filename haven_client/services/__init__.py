"""Backend services, one method per backend operation."""

from haven_client.services.articles import ArticleService
from haven_client.services.authentication import AuthenticationService
from haven_client.services.base import BaseService
from haven_client.services.categories import CategoryService
from haven_client.services.chat import ChatService
from haven_client.services.notifications import NotificationService
from haven_client.services.quotes import QuoteService


__all__ = [
    "BaseService",
    "ArticleService",
    "AuthenticationService",
    "CategoryService",
    "ChatService",
    "NotificationService",
    "QuoteService",
]
