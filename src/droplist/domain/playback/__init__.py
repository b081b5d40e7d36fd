"""Playback domain - queue navigation and resource caches.

This domain handles:
- Playlist state and shuffle/repeat modes
- Shuffle queue generation and navigation
- Duration probing and the persisted duration cache
- Playable-source and artist-image caches
- The playback session that owns all of the above
"""

# State
from .state import PlaylistState, clamp_volume
from .shuffle import (
    ShuffleState,
    generate_shuffle_queue,
    reset_shuffle_state,
    shuffle_manual_select,
    shuffle_next,
    shuffle_prev,
    update_recently_played,
)

# Queue engine
from .queue import (
    PlaybackError,
    Player,
    QueueEngine,
    next_track,
    on_track_end,
    prev_track,
    replace_tracks,
    select_track,
    set_repeat,
    set_shuffle,
)

# Caches and background work
from .batching import run_in_batches
from .duration_cache import DurationCache
from .source_cache import PlayableSourceCache, SourceHandle
from .probing import DurationProber
from .image_cache import ImageCache

# Session
from .session import PlaybackSession

__all__ = [
    # State
    "PlaylistState",
    "clamp_volume",
    "ShuffleState",
    "generate_shuffle_queue",
    "reset_shuffle_state",
    "shuffle_manual_select",
    "shuffle_next",
    "shuffle_prev",
    "update_recently_played",
    # Queue engine
    "PlaybackError",
    "Player",
    "QueueEngine",
    "next_track",
    "on_track_end",
    "prev_track",
    "replace_tracks",
    "select_track",
    "set_repeat",
    "set_shuffle",
    # Caches
    "run_in_batches",
    "DurationCache",
    "PlayableSourceCache",
    "SourceHandle",
    "DurationProber",
    "ImageCache",
    # Session
    "PlaybackSession",
]
