"""Backend endpoint paths, relative to the base URL."""

CATEGORIES_ENDPOINT = "api/v1/categories"
ARTICLES_ENDPOINT = "api/v1/articles"
LOGIN_ENDPOINT = "api/v1/user/authenticate"
REGISTER_ENDPOINT = "api/v2/user/authenticate"
NOTIFICATIONS_ENDPOINT = "api/v1/user/get-notifications"
QUOTES_ENDPOINT = "api/v3/get-quotes"
CHAT_ENDPOINT = "api/v1/chat/{prompt}"
