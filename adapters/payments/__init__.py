from typing import List

from ..registry import all_names


def available_payment_adapters() -> List[str]:
    """
    Short names of the registered payment gateways.
    Example: ["fake", "stripe"]
    """
    return [n.split(".", 1)[1] for n in all_names() if n.startswith("payments.")]
