"""
history.py
Serializes the engine's action log to JSON and renders entries as one-line history text for display.
Related modules:
- state.py: Defines the GameAction entries.
- engine.py: Produces the action log (get_actions).
"""

import dataclasses
import datetime
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .bid import Bid, MAX_FACE
from .state import BID, CHALLENGE, DICE_LOST, GAME_OVER, GameAction


def _plain(obj: Any) -> Any:
    if isinstance(obj, Bid):
        return dataclasses.asdict(obj)
    if isinstance(obj, datetime.datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items()}
    return obj


def action_to_dict(action: GameAction) -> Dict[str, Any]:
    """
    Convert a log entry into a JSON-ready dict (bids become dicts, the timestamp an ISO-8601 string).
    """
    return {
        "type": action.type,
        "player_id": action.player_id,
        "data": _plain(action.data),
        "timestamp": action.timestamp.isoformat(),
    }


def dumps(actions: Iterable[GameAction]) -> str:
    """
    Serialize an action log to a JSON string.
    Args:
        actions: Log entries, oldest first.
    Returns:
        str: JSON array.
    """
    return json.dumps([action_to_dict(a) for a in actions])


def loads(s: str) -> List[Dict[str, Any]]:
    """Deserialize a JSON action log into plain dicts."""
    return json.loads(s)


def describe_action(action: GameAction, names: Optional[Mapping[str, str]] = None, is_endgame: bool = False) -> str:
    """
    Render a log entry as a line of human-readable history.
    Args:
        action (GameAction): Entry to describe.
        names (mapping): Player id -> display name; unknown ids print as 'Unknown'.
        is_endgame (bool): Treat bid entries as claimed sums. Bids above the top face are always sums.
    Returns:
        str: e.g. "Ann bid 3 × 4" or "Bob lost a die (2 remaining)".
    """
    name = (names or {}).get(action.player_id, "Unknown")
    data = action.data

    if action.type == BID:
        if not isinstance(data, Bid):
            return f"{name} made a bid"
        if is_endgame or data.face_value > MAX_FACE:
            return f"{name} bid sum: {data.face_value}"
        return f"{name} bid {data}"

    if action.type == CHALLENGE:
        if not isinstance(data, dict) or "successful" not in data:
            return f"{name} challenged the bid"
        outcome = "successful" if data["successful"] else "failed"
        bid = data["bid"]
        if data.get("is_endgame"):
            return f"{name} challenged sum: {bid.face_value} ({outcome} - actual sum: {data['actual_count']})"
        return f"{name} challenged {bid} ({outcome} - actual: {data['actual_count']})"

    if action.type == DICE_LOST:
        if isinstance(data, dict) and "remaining_dice" in data:
            return f"{name} lost a die ({data['remaining_dice']} remaining)"
        return f"{name} lost a die"

    if action.type == GAME_OVER:
        return f"{name} won the game!"

    return f"{name} performed an action"
