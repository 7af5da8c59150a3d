"""Order URL configuration.

``SimpleRouter`` because three modules share the ``api/v1/`` prefix and
none of them owns an API root view.
"""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.orders.views import OrderViewSet

router = SimpleRouter(trailing_slash=True)
router.register("orders", OrderViewSet, basename="order")

urlpatterns = router.urls
