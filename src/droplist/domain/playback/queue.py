"""
Queue engine: sequential, shuffled and repeated navigation.

Pure transition functions take the playlist and shuffle sub-state and
return new ones as (PlaylistState, ShuffleState) tuples. QueueEngine
holds the latest pair for callers that want a stateful surface.
"""

import random
from typing import Iterable, Optional, Protocol

from loguru import logger

from droplist.core.config import QueueConfig
from droplist.domain.library.models import Track

from .shuffle import (
    ShuffleState,
    generate_shuffle_queue,
    reset_shuffle_state,
    shuffle_manual_select,
    shuffle_next,
    shuffle_prev,
)
from .state import PlaylistState

QueueStates = tuple[PlaylistState, ShuffleState]


class PlaybackError(Exception):
    """Raised by a player when it cannot resume or start playback."""

    pass


class Player(Protocol):
    """The part of the audio player the queue engine drives."""

    async def restart(self) -> None:
        """Seek the current track to zero and resume playback."""
        ...


def initial_shuffle_state(
    playlist: PlaylistState, rng: Optional[random.Random] = None
) -> ShuffleState:
    """Shuffle state for a freshly shuffled playlist (current track excluded)."""
    if playlist.track_count <= 1 or playlist.current_index is None:
        return reset_shuffle_state()
    queue = generate_shuffle_queue(
        playlist.track_count, exclude=(playlist.current_index,), rng=rng
    )
    return ShuffleState(tuple(queue), 0, (playlist.current_index,))


def next_track(
    playlist: PlaylistState,
    shuffle: ShuffleState,
    rng: Optional[random.Random] = None,
    config: Optional[QueueConfig] = None,
) -> QueueStates:
    """Advance one track. Sequential and repeated modes wrap around the list."""
    config = config or QueueConfig()
    count = playlist.track_count
    if count <= 1 or playlist.current_index is None:
        return playlist, shuffle

    current = playlist.current_index
    if playlist.is_shuffled:
        result = shuffle_next(
            count,
            current,
            shuffle,
            rng=rng,
            recent_window=config.recent_history_window,
            recent_limit=config.recent_history_limit,
        )
        if result is None:
            return playlist, shuffle
        index, shuffle = result
    else:
        index = (current + 1) % count

    return playlist.with_current_index(index), shuffle


def prev_track(
    playlist: PlaylistState,
    shuffle: ShuffleState,
    rng: Optional[random.Random] = None,
) -> QueueStates:
    """Step back one track. Sequential and repeated modes wrap around the list."""
    count = playlist.track_count
    if count <= 1 or playlist.current_index is None:
        return playlist, shuffle

    current = playlist.current_index
    if playlist.is_shuffled:
        result = shuffle_prev(count, current, shuffle, rng=rng)
        if result is None:
            return playlist, shuffle
        index, shuffle = result
    else:
        index = (current - 1) % count

    return playlist.with_current_index(index), shuffle


def select_track(
    playlist: PlaylistState,
    shuffle: ShuffleState,
    index: int,
    rng: Optional[random.Random] = None,
) -> QueueStates:
    """
    Jump to a track picked by the user.

    In shuffle mode the queue is regenerated without the selected track and
    the history restarts from it, so shuffle won't replay it right away.

    Raises:
        IndexError: If index is outside the track list
    """
    playlist = playlist.with_current_index(index)
    if playlist.is_shuffled:
        shuffle = shuffle_manual_select(playlist.track_count, index, rng=rng)
    return playlist, shuffle


def set_shuffle(
    playlist: PlaylistState,
    shuffle: ShuffleState,
    enabled: bool,
    rng: Optional[random.Random] = None,
) -> QueueStates:
    """Turn shuffle on (clears repeat, new queue) or off (queue discarded)."""
    playlist = playlist.with_shuffle(enabled)
    if enabled:
        return playlist, initial_shuffle_state(playlist, rng)
    return playlist, reset_shuffle_state()


def set_repeat(playlist: PlaylistState, shuffle: ShuffleState, enabled: bool) -> QueueStates:
    """Turn repeat on (clears shuffle and its queue) or off."""
    if enabled:
        return playlist.with_repeat(True), reset_shuffle_state()
    return playlist.with_repeat(False), shuffle


def replace_tracks(
    playlist: PlaylistState,
    tracks: Iterable[Track],
    current_index: int = 0,
    rng: Optional[random.Random] = None,
) -> QueueStates:
    """Load a new track list. Any previous shuffle queue is discarded."""
    playlist = playlist.with_tracks(tracks, current_index)
    if playlist.is_shuffled:
        return playlist, initial_shuffle_state(playlist, rng)
    return playlist, reset_shuffle_state()


async def on_track_end(
    playlist: PlaylistState,
    shuffle: ShuffleState,
    player: Player,
    rng: Optional[random.Random] = None,
    config: Optional[QueueConfig] = None,
) -> QueueStates:
    """
    Handle the end of the current track.

    Repeat mode restarts the same track in place; if the player cannot
    resume, playback moves on to the next track instead.
    """
    if playlist.is_repeated and playlist.current_track is not None:
        try:
            await player.restart()
            return playlist, shuffle
        except PlaybackError as e:
            logger.warning(f"Could not restart {playlist.current_track.name!r}: {e}")

    return next_track(playlist, shuffle, rng=rng, config=config)


class QueueEngine:
    """Stateful wrapper over the transition functions.

    Holds the latest PlaylistState/ShuffleState pair and the random source.
    """

    def __init__(
        self,
        config: Optional[QueueConfig] = None,
        rng: Optional[random.Random] = None,
        playlist: Optional[PlaylistState] = None,
    ):
        self.config = config or QueueConfig()
        self.rng = rng or random.Random()
        self.playlist = playlist or PlaylistState()
        self.shuffle = reset_shuffle_state()

    @property
    def current_index(self) -> Optional[int]:
        return self.playlist.current_index

    @property
    def current_track(self) -> Optional[Track]:
        return self.playlist.current_track

    def _apply(self, states: QueueStates) -> Optional[int]:
        self.playlist, self.shuffle = states
        return self.playlist.current_index

    def next(self) -> Optional[int]:
        return self._apply(next_track(self.playlist, self.shuffle, self.rng, self.config))

    def prev(self) -> Optional[int]:
        return self._apply(prev_track(self.playlist, self.shuffle, self.rng))

    def select(self, index: int) -> Optional[int]:
        return self._apply(select_track(self.playlist, self.shuffle, index, self.rng))

    def set_shuffle(self, enabled: bool) -> None:
        self._apply(set_shuffle(self.playlist, self.shuffle, enabled, self.rng))

    def set_repeat(self, enabled: bool) -> None:
        self._apply(set_repeat(self.playlist, self.shuffle, enabled))

    def set_volume(self, volume: float) -> float:
        self.playlist = self.playlist.with_volume(volume)
        return self.playlist.volume

    def replace_tracks(self, tracks: Iterable[Track], current_index: int = 0) -> None:
        self._apply(replace_tracks(self.playlist, tracks, current_index, self.rng))

    async def on_track_end(self, player: Player) -> Optional[int]:
        return self._apply(
            await on_track_end(self.playlist, self.shuffle, player, self.rng, self.config)
        )
