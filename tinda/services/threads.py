"""Group a user's direct messages into per-listing, per-counterpart chat threads."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple

logger = logging.getLogger(__name__)

ThreadKey = Tuple[Any, Any]  # (listing_id, counterpart_id)


def _message_order(message):
    return (message.created_at, message.id)


@dataclass
class ChatThread:
    """Derived view over messages; never stored."""

    listing: Any
    other_user: Any
    messages: List[Any] = field(default_factory=list)
    viewer_id: Any = None

    @property
    def key(self) -> ThreadKey:
        return (self.listing.id, self.other_user.id)

    @property
    def last_message(self):
        return max(self.messages, key=_message_order)

    @property
    def unread_count(self) -> int:
        return sum(1 for m in self.messages if m.to_user_id == self.viewer_id and not m.read)


def build_threads(
    messages: Iterable,
    viewer_id,
    listings: Mapping,
    users: Mapping,
) -> List[ChatThread]:
    """
    Build chat threads for ``viewer_id``.

    ``listings`` and ``users`` map ids to records. Messages the viewer is not
    part of are ignored, and threads whose listing or counterpart cannot be
    resolved are dropped instead of failing the whole call.
    """
    grouped: Dict[ThreadKey, List[Any]] = {}

    for m in messages:
        if m.from_user_id != viewer_id and m.to_user_id != viewer_id:
            continue
        other_id = m.to_user_id if m.from_user_id == viewer_id else m.from_user_id
        grouped.setdefault((m.listing_id, other_id), []).append(m)

    threads: List[ChatThread] = []
    for (listing_id, other_id), members in grouped.items():
        listing = listings.get(listing_id)
        other_user = users.get(other_id)
        if listing is None or other_user is None:
            logger.warning(
                "Skipping thread listing=%s user=%s: dangling reference", listing_id, other_id
            )
            continue
        threads.append(
            ChatThread(
                listing=listing,
                other_user=other_user,
                messages=sorted(members, key=_message_order),
                viewer_id=viewer_id,
            )
        )

    return threads


def sort_threads_by_recency(threads: Iterable[ChatThread]) -> List[ChatThread]:
    return sorted(threads, key=lambda t: _message_order(t.last_message), reverse=True)
