"""
Pure shuffle queue functions.

The shuffle queue is a permutation of track indices served front to back.
Regeneration avoids the current track and, when there is room, the most
recently played ones so short playlists don't fall into obvious patterns.
"""

import random
from typing import Collection, NamedTuple, Optional, Sequence

DEFAULT_RECENT_WINDOW = 2
DEFAULT_RECENT_LIMIT = 5


class ShuffleState(NamedTuple):
    queue: tuple[int, ...] = ()
    queue_index: int = 0  # Position of the next index to serve
    recently_played: tuple[int, ...] = ()

    @property
    def is_exhausted(self) -> bool:
        return not self.queue or self.queue_index >= len(self.queue)


def reset_shuffle_state() -> ShuffleState:
    """Empty state, used when shuffle is turned off or tracks change."""
    return ShuffleState()


def generate_shuffle_queue(
    track_count: int,
    exclude: Collection[int] = (),
    recently_played: Sequence[int] = (),
    rng: Optional[random.Random] = None,
    recent_window: int = DEFAULT_RECENT_WINDOW,
) -> list[int]:
    """
    Generate a shuffled permutation of track indices.

    Args:
        track_count: Number of tracks
        exclude: Indices never included (typically the current track)
        recently_played: Play history, oldest first
        rng: Random source (module random when omitted)
        recent_window: How many of the latest history entries to avoid

    Returns:
        Shuffled indices. Recent tracks are only filtered when more than two
        candidates remain, and never if that would leave nothing.
    """
    rng = rng or random
    available = [i for i in range(track_count) if i not in exclude]

    candidates = available
    if len(available) > 2 and recently_played and recent_window > 0:
        recent = set(recently_played[-recent_window:])
        candidates = [i for i in available if i not in recent] or available

    return rng.sample(candidates, len(candidates))


def update_recently_played(
    history: Sequence[int], index: int, limit: int = DEFAULT_RECENT_LIMIT
) -> tuple[int, ...]:
    """Append to history, dropping the oldest entries beyond `limit`."""
    updated = tuple(history) + (index,)
    return updated[-limit:] if limit > 0 else ()


def shuffle_next(
    track_count: int,
    current_index: int,
    state: ShuffleState,
    rng: Optional[random.Random] = None,
    recent_window: int = DEFAULT_RECENT_WINDOW,
    recent_limit: int = DEFAULT_RECENT_LIMIT,
) -> Optional[tuple[int, ShuffleState]]:
    """
    Next index in shuffle mode.

    Returns:
        (next_index, new_state), or None for 0 or 1 tracks (no change)
    """
    if track_count <= 1:
        return None

    queue, queue_index = state.queue, state.queue_index
    # The queue may still hold the current track (e.g. after prev()); never replay it
    while queue_index < len(queue) and queue[queue_index] == current_index:
        queue_index += 1

    history = update_recently_played(state.recently_played, current_index, recent_limit)

    if not queue or queue_index >= len(queue):
        new_queue = generate_shuffle_queue(
            track_count,
            exclude=(current_index,),
            recently_played=state.recently_played,
            rng=rng,
            recent_window=recent_window,
        )
        return new_queue[0], ShuffleState(tuple(new_queue), 1, history)

    return queue[queue_index], ShuffleState(queue, queue_index + 1, history)


def shuffle_prev(
    track_count: int,
    current_index: int,
    state: ShuffleState,
    rng: Optional[random.Random] = None,
) -> Optional[tuple[int, ShuffleState]]:
    """
    Previous index in shuffle mode.

    With the pointer past the start, steps back one slot. At the start, a
    fresh permutation excluding only the current track is generated and its
    last element served; recency history is not consulted here.

    Returns:
        (prev_index, new_state), or None for 0 or 1 tracks (no change)
    """
    if track_count <= 1:
        return None

    if state.queue_index > 0 and state.queue:
        queue_index = min(state.queue_index, len(state.queue)) - 1
        return state.queue[queue_index], state._replace(queue_index=queue_index)

    new_queue = generate_shuffle_queue(track_count, exclude=(current_index,), rng=rng, recent_window=0)
    last = len(new_queue) - 1
    return new_queue[last], ShuffleState(tuple(new_queue), last, state.recently_played)


def shuffle_manual_select(
    track_count: int,
    selected_index: int,
    rng: Optional[random.Random] = None,
) -> ShuffleState:
    """New shuffle state after the user picks a track directly."""
    new_queue = generate_shuffle_queue(track_count, exclude=(selected_index,), rng=rng)
    return ShuffleState(tuple(new_queue), 0, (selected_index,))
