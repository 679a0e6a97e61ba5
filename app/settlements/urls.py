"""
URL configuration for the settlements app.

Routes:
    - GET /onboarding/refresh/<token>/ - Stripe onboarding refresh callback

Usage:
    # In config/urls.py
    path("", include("settlements.urls")),
"""

from django.urls import path

from settlements.views import onboarding_refresh

app_name = "settlements"

urlpatterns = [
    path(
        "onboarding/refresh/<str:token>/",
        onboarding_refresh,
        name="onboarding_refresh",
    ),
]
