"""
URL configuration for the settlement connector.

URL Structure:
    /admin/                          - Django admin (transfers, account mappings)
    /onboarding/refresh/<token>/     - Stripe onboarding refresh callback

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("settlements.urls")),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Settlement Admin"
admin.site.site_title = "Settlement Admin"
admin.site.index_title = "Transfers and seller accounts"
