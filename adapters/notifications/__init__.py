from typing import List

from ..registry import all_names


def available_notification_adapters() -> List[str]:
    return [n.split(".", 1)[1] for n in all_names() if n.startswith("notifications.")]
