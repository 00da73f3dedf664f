from tixly.config import get_settings

settings = get_settings()

BPS_DENOMINATOR = 10000
FEE_BPS = settings.fee_bps


def calculate_fee(amount: int, fee_bps: int = FEE_BPS) -> int:
    """Platform cut of a sale, rounded down to the smallest unit."""
    return amount * fee_bps // BPS_DENOMINATOR
