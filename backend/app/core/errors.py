"""Error taxonomy for the grading core.

"You cannot see this" (NotFound) and "you can see it but cannot attempt it"
(NotEligible) stay separate all the way to the HTTP layer.
"""


class GradingError(Exception):
    """Base class for rule-core failures surfaced to callers."""


class ValidationError(GradingError):
    """Malformed input; rejected before anything is computed or written."""


class NotFound(GradingError):
    """Referenced record does not exist or is inactive."""

    def __init__(self, what: str, ident=None):
        self.what = what
        self.ident = ident
        detail = f"{what} not found" if ident is None else f"{what} {ident} not found"
        super().__init__(detail)


class NotEligible(GradingError):
    """Athlete can see the challenge but a restriction blocks the attempt."""

    def __init__(self, reasons: list[str]):
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons) or "Not eligible")


class ProofInvalid(GradingError):
    """Activity proof failed one or more rules; every failure is listed."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid proof")


class ResubmitTooSoon(GradingError):
    def __init__(self, retry_after_hours: int):
        self.retry_after_hours = retry_after_hours
        plural = "" if retry_after_hours == 1 else "s"
        super().__init__(
            "You can only submit once per day per challenge. "
            f"Try again in {retry_after_hours} hour{plural}."
        )
