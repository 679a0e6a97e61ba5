"""
Onboarding refresh endpoint.

Stripe account links expire quickly. Every link issued to a seller has
this view as refresh_url: when the seller opens an expired link, Stripe
sends them here, a new account link is created for the same token and
the seller is redirected to it.

Usage:
    # In urls.py
    path("onboarding/refresh/<str:token>/", onboarding_refresh, name="onboarding_refresh")
"""

from __future__ import annotations

import logging

from django.http import Http404, HttpRequest, HttpResponseRedirect
from django.views.decorators.http import require_GET

from settlements.models import AccountMapping
from settlements.services import SellerOnboardingService

logger = logging.getLogger(__name__)


@require_GET
def onboarding_refresh(request: HttpRequest, token: str) -> HttpResponseRedirect:
    """
    Redirect the seller to a fresh onboarding link.

    Returns:
        302 to the new Stripe account link

    Raises:
        Http404: No account mapping carries this token
    """
    mapping = AccountMapping.objects.get_by_onboarding_token(token)
    if mapping is None:
        logger.warning("Onboarding refresh with unknown token")
        raise Http404("Unknown onboarding token")

    with SellerOnboardingService() as service:
        url = service.add_onboarding_link_to_shop(mapping.marketplace_shop_id, mapping)

    logger.info(
        "Issued refreshed onboarding link",
        extra={
            "marketplace_shop_id": mapping.marketplace_shop_id,
            "stripe_account_id": mapping.stripe_account_id,
        },
    )
    return HttpResponseRedirect(url)
