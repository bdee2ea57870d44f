class PaymentsError(Exception):
    pass


class ValidationError(PaymentsError):
    """Payment session request failed the checks made before reaching Stripe."""


class ProcessorUnavailable(PaymentsError):
    """Stripe could not create the session (network, auth, rate limit)."""


class SignatureVerificationFailed(PaymentsError):
    """Webhook authenticity could not be established."""
