from .views import (
    alias,
    email_log,
    index,
)
