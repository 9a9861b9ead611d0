"""Domain exceptions raised by the service layer and mapped to HTTP by routers"""


class MarketplaceError(Exception):
    status_code = 422

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message}


class SlotLimitReached(MarketplaceError):
    """The current subscription has no free slot for this promotion type"""

    def __init__(self, promotion_type: str, plan_type: str, used: int, max_slots: int):
        self.promotion_type = promotion_type
        self.plan_type = plan_type
        self.used = used
        self.max_slots = max_slots
        label = "featured product" if promotion_type == "featured" else "hot deal"
        if max_slots == 0:
            message = f"Your {plan_type} plan does not include {label} slots. Upgrade to promote products."
        else:
            message = f"You have used all {max_slots} {label} slot(s) for this subscription."
        super().__init__(message)

    @property
    def remaining(self) -> int:
        return max(0, self.max_slots - self.used)

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "remaining_slots": self.remaining,
            "used": self.used,
            "max_allowed": self.max_slots,
        }


class PromotionConflict(MarketplaceError):
    """Product is already featured / already has a running deal"""


class InvalidTransition(MarketplaceError):
    status_code = 400
