"""Toast Queue — verifies the bounded flash-notification list.

Tests cover:
    - Adding beyond MAX_TOASTS drops the oldest
    - remove / clear / pop_all
    - Round trip through plain dicts (session cookie storage)
    - Malformed stored entries are skipped
"""

from rihigo_web.core.domain_types import ToastType
from rihigo_web.core.toasts import MAX_TOASTS, Toast, ToastQueue


def test_add_returns_unique_ids():
    queue = ToastQueue()
    first = queue.success("Saved")
    second = queue.error("Failed")
    assert first != second
    assert [t.type for t in queue] == [ToastType.SUCCESS, ToastType.ERROR]


def test_queue_is_bounded_and_drops_oldest():
    queue = ToastQueue()
    for i in range(MAX_TOASTS + 2):
        queue.info(f"message {i}")
    assert len(queue) == MAX_TOASTS
    assert [t.message for t in queue][0] == "message 2"
    assert [t.message for t in queue][-1] == f"message {MAX_TOASTS + 1}"


def test_remove_and_clear():
    queue = ToastQueue()
    keep = queue.warning("Keep me")
    drop = queue.info("Drop me")
    queue.remove(drop)
    assert [t.id for t in queue] == [keep]
    queue.clear()
    assert len(queue) == 0


def test_pop_all_empties_queue():
    queue = ToastQueue()
    queue.success("Booking created", title="Done")
    popped = queue.pop_all()
    assert len(popped) == 1
    assert popped[0].title == "Done"
    assert len(queue) == 0


def test_round_trip_through_dicts():
    queue = ToastQueue()
    queue.success("Saved")
    restored = ToastQueue(queue.to_list())
    (toast,) = list(restored)
    assert toast.type == ToastType.SUCCESS
    assert toast.message == "Saved"
    assert queue.to_list()[0]["type"] == "success"


def test_stored_list_is_truncated_and_bad_entries_skipped():
    stored = [{"type": "info", "message": str(i)} for i in range(MAX_TOASTS + 3)]
    stored.insert(0, {"type": "explosion", "message": "bad"})
    queue = ToastQueue(stored)
    assert len(queue) == MAX_TOASTS
    assert [t.message for t in queue][-1] == str(MAX_TOASTS + 2)


def test_from_dict_defaults():
    toast = Toast.from_dict({"message": "Hi"})
    assert toast.type == ToastType.INFO
    assert toast.dismissible
    assert toast.id.startswith("toast-")
