"""
Settlements app for Mirakl marketplace revenue on Stripe Connect.

This app handles:
- Transfer processing (platform to seller, seller to platform, reversals)
- Account mappings between Mirakl shops and Stripe connected accounts
- Seller onboarding and login links pushed back to Mirakl shops

Related packages:
    - marketplace: Mirakl API client used for orders and shop custom fields

Usage:
    from settlements.tasks import process_transfer

    # Queue a transfer for processing
    process_transfer.delay(str(transfer.id))

    # Resolve the connected account of a shop
    from settlements.services import SellerOnboardingService

    with SellerOnboardingService() as service:
        mapping = service.get_account_mapping_from_shop(shop)
"""
