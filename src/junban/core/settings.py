import copy
from typing import Any

_DEFAULT_SETTINGS: dict[str, Any] = {
    "theme": "dark",
    "language": "en",
    "notifications": {
        "enabled": True,
        "sound": True,
        "desktop": True,
    },
    "sorting": {
        "defaultSort": "priority",
        "groupByStatus": False,
        "prioritizeOverdue": True,
    },
    "display": {
        "showSubTasks": True,
        "compactMode": False,
        "showProgress": True,
    },
}


def default_settings() -> dict[str, Any]:
    return copy.deepcopy(_DEFAULT_SETTINGS)
