from typing import Any, List, TypedDict

from sabmon.errors import UpstreamDecodeError

# --- Typing ---


class QueueItem(TypedDict):
    filename: str
    status: str
    sizeleft: str
    percentage: str
    timeleft: str


class Queue(TypedDict):
    status: str
    speed: str
    sizeleft: str
    timeleft: str
    percentage: str
    slots: List[QueueItem]


class QueueStatus(TypedDict):
    status: str
    queue: Queue


# Values are display strings supplied by SABnzbd and are never coerced.
QUEUE_ITEM_FIELDS = ("filename", "status", "sizeleft", "percentage", "timeleft")
QUEUE_FIELDS = ("status", "speed", "sizeleft", "timeleft", "percentage")


def _object(value: Any, where: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UpstreamDecodeError(f"expected an object for {where}")
    return value


def _strings(data: dict, fields, where: str) -> dict:
    result = {}
    for field in fields:
        value = data.get(field)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise UpstreamDecodeError(f"expected a string for {where}.{field}")
        result[field] = value
    return result


def parse_queue_item(data: Any) -> QueueItem:
    item = _object(data, "slot")
    return QueueItem(**_strings(item, QUEUE_ITEM_FIELDS, "slot"))


def parse_queue(data: Any) -> Queue:
    queue = _object(data, "queue")
    slots = queue.get("slots")
    if slots is None:
        slots = []
    if not isinstance(slots, list):
        raise UpstreamDecodeError("expected a list for queue.slots")
    return Queue(
        **_strings(queue, QUEUE_FIELDS, "queue"),
        slots=[parse_queue_item(slot) for slot in slots],
    )


def parse_status(payload: Any) -> QueueStatus:
    """Builds a QueueStatus from a decoded SABnzbd ``mode=queue`` response."""
    if not isinstance(payload, dict):
        raise UpstreamDecodeError("expected a JSON object")
    status = payload.get("status")
    if status is None:
        status = ""
    if not isinstance(status, str):
        raise UpstreamDecodeError("expected a string for status")
    return QueueStatus(status=status, queue=parse_queue(payload.get("queue")))
