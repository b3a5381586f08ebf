from datetime import datetime
import secrets
import time


_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    if value == 0:
        return "0"

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


class IdentifierGenerator:
    """Clock and randomness used to mint certificates.

    Swap in a deterministic subclass in tests instead of patching time or secrets.
    """

    def now(self) -> datetime:
        return datetime.today()

    def current_millis(self) -> int:
        return time.time_ns() // 1_000_000

    def new_certificate_id(self) -> str:
        """CERT-<base36 millisecond timestamp>-<8 hex chars>, upper-cased."""
        timestamp = to_base36(self.current_millis())
        random_part = secrets.token_hex(4)
        return f"CERT-{timestamp}-{random_part}".upper()

    def new_verification_code(self) -> str:
        """16 random bytes as 32 upper-case hex characters."""
        return secrets.token_hex(16).upper()
