"""
Playlist state for the playback surface.

Immutable state container: every change returns a new PlaylistState.
Shuffle and repeat are mutually exclusive modes over one linear list.
"""

from typing import Iterable, NamedTuple, Optional

from droplist.domain.library.models import Track


def clamp_volume(volume: float) -> float:
    """Clamp a volume to [0, 1]."""
    return max(0.0, min(1.0, float(volume)))


class PlaylistState(NamedTuple):
    """Ordered tracks (listing/selection order) plus playback mode."""

    tracks: tuple[Track, ...] = ()
    current_index: Optional[int] = None  # None when the playlist is empty
    is_shuffled: bool = False
    is_repeated: bool = False
    volume: float = 1.0

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    @property
    def current_track(self) -> Optional[Track]:
        if self.current_index is None:
            return None
        return self.tracks[self.current_index]

    def with_tracks(self, tracks: Iterable[Track], current_index: int = 0) -> "PlaylistState":
        """Return new state with a replaced track list (modes are kept)."""
        tracks = tuple(tracks)
        index = min(max(current_index, 0), len(tracks) - 1) if tracks else None
        return self._replace(tracks=tracks, current_index=index)

    def with_current_index(self, index: int) -> "PlaylistState":
        """Return new state pointing at `index`.

        Raises:
            IndexError: If index is outside the track list
        """
        if not 0 <= index < len(self.tracks):
            raise IndexError(f"Track index {index} out of range (0-{len(self.tracks) - 1})")
        return self._replace(current_index=index)

    def with_shuffle(self, enabled: bool) -> "PlaylistState":
        """Enable/disable shuffle. Enabling shuffle clears repeat."""
        if enabled:
            return self._replace(is_shuffled=True, is_repeated=False)
        return self._replace(is_shuffled=False)

    def with_repeat(self, enabled: bool) -> "PlaylistState":
        """Enable/disable repeat. Enabling repeat clears shuffle."""
        if enabled:
            return self._replace(is_repeated=True, is_shuffled=False)
        return self._replace(is_repeated=False)

    def with_volume(self, volume: float) -> "PlaylistState":
        return self._replace(volume=clamp_volume(volume))
