"""Quote URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.quotes.views import QuoteViewSet

router = SimpleRouter(trailing_slash=True)
router.register("quotes", QuoteViewSet, basename="quote")

urlpatterns = router.urls
