"""
Error taxonomy shared by the pricing engine, the checkout orchestrator and the
repositories. Routes never catch these; a single FastAPI handler renders them.
"""


class PosError(Exception):
    code = "POS_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(PosError):
    """Malformed or empty input. The caller can fix it and resubmit."""
    code = "VALIDATION_ERROR"
    http_status = 400


class InvalidInput(ValidationError):
    """Raised by the pricing engine for out-of-range lines."""
    code = "INVALID_INPUT"


class NotFound(PosError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity: str, ids):
        if isinstance(ids, (list, tuple, set, frozenset)):
            ids = sorted(ids)
            label = ", ".join(str(i) for i in ids)
        else:
            label = str(ids)
        super().__init__(f"{entity} not found: {label}")
        self.entity = entity
        self.ids = ids


class Conflict(PosError):
    code = "CONFLICT"
    http_status = 409


class Declined(PosError):
    """The gateway refused the charge. Nothing was persisted."""
    code = "PAYMENT_DECLINED"
    http_status = 402

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class Failed(PosError):
    """
    System fault with ambiguous settlement: the gateway timed out or crashed,
    or the order could not be stored after a successful charge. Never retried
    automatically and never treated as a decline.
    """
    code = "CHECKOUT_FAILED"
    http_status = 500

    def __init__(self, message: str, stage: str, transaction_id: str | None = None):
        super().__init__(message)
        self.stage = stage
        self.transaction_id = transaction_id

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["stage"] = self.stage
        if self.transaction_id:
            body["transactionId"] = self.transaction_id
        return body
