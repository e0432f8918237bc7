from __future__ import annotations


class RewardsError(Exception):
    """Base class for every error the rewards backend reports to callers.

    ``status_code`` is the HTTP status the API answers with; the body is
    always ``{"error": message}``.
    """

    status_code = 500
    message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class NotFoundError(RewardsError):
    status_code = 404
    message = "Not found"


class CampaignNotFoundError(NotFoundError):
    # Raised while issuing; the caller asked for a voucher, not for the campaign.
    status_code = 400
    message = "Campaign not found"

    def __init__(self, campaign_id: object) -> None:
        super().__init__()
        self.campaign_id = campaign_id


class RejectedError(RewardsError):
    """A business rule refused the request."""

    status_code = 400
    message = "Rejected"


class OutOfStockError(RejectedError):
    message = "Out of stock"

    def __init__(self, campaign_id: object, content: str, quantity: int) -> None:
        super().__init__()
        self.campaign_id = campaign_id
        self.content = content
        self.quantity = quantity


class StoreError(RewardsError):
    """Persistence failure. The driver exception is chained as ``__cause__``.

    ``reason`` is one of ``timeout``, ``unavailable``, ``integrity`` or ``error``.
    """

    message = "Store error"

    def __init__(self, message: str | None = None, reason: str = "error") -> None:
        super().__init__(message)
        self.reason = reason
