# coursepay/services/payment/__init__.py
"""
Payment pricing and verification services.

Import from the submodules directly:
    from coursepay.services.payment.pricing import PricingCalculator
    from coursepay.services.payment.promo import PromoCodeValidator, PromoCodeService
    from coursepay.services.payment.bundles import BundleComposer, BundleService
    from coursepay.services.payment.methods import PaymentMethodService
    from coursepay.services.payment.ledger import PaymentTransactionLedger
    from coursepay.services.payment.verification import PaymentVerificationWorkflow
    from coursepay.services.payment.refund import RefundRequestManager
"""
