"""Field layouts: ordered (tag, extent) descriptions of a field's shape."""

from __future__ import annotations

from enum import Enum

from .constants import MAX_RANK

__all__ = ["FieldLayout", "FieldTag"]


class FieldTag(Enum):
    """Semantic tag of a field dimension.

    ``COL`` is the partition axis, split across processes. ``LEV`` is the
    vertical level axis, which is never split.
    """

    EL = "Element"
    GP = "GaussPoint"
    COL = "Column"
    LEV = "LevelMidPoint"
    ILEV = "LevelInterface"
    CMP = "Component"
    TL = "TimeLevel"
    NGAS = "GasComponent"
    INV = "Invalid"

    def __str__(self):
        return self.name


def _as_tag(tag):
    if isinstance(tag, FieldTag):
        return tag
    if isinstance(tag, str) and tag in FieldTag.__members__:
        return FieldTag[tag]
    return FieldTag(tag)


class FieldLayout:
    """Immutable shape of a field as an ordered sequence of (tag, extent) pairs.

    Two layouts are equal when they carry the same tags, in the same order,
    with the same extents.

    Parameters
    ----------
    tags : sequence of FieldTag
        Dimension tags, outermost first.
    dims : sequence of int
        Dimension extents, all positive.
    """

    __slots__ = ("_tags", "_dims")

    def __init__(self, tags, dims):
        tags = tuple(_as_tag(t) for t in tags)
        dims = tuple(int(d) for d in dims)
        if len(tags) != len(dims):
            raise ValueError(f"Layout needs one extent per tag, got {len(tags)} tags and {len(dims)} extents.")
        if len(tags) > MAX_RANK:
            raise ValueError(f"Layout rank {len(tags)} exceeds the maximum supported rank {MAX_RANK}.")
        if any(d <= 0 for d in dims):
            raise ValueError(f"Layout extents must be positive, got {dims}.")
        self._tags = tags
        self._dims = dims

    @property
    def rank(self):
        return len(self._dims)

    @property
    def dims(self):
        return self._dims

    @property
    def tags(self):
        return self._tags

    @property
    def size(self):
        size = 1
        for d in self._dims:
            size *= d
        return size

    def dim(self, idim):
        """Return the extent of dimension ``idim`` (negative positions count from the end)."""
        return self._dims[self._check_position(idim)]

    def tag(self, idim):
        """Return the tag of dimension ``idim``."""
        return self._tags[self._check_position(idim)]

    def has_tag(self, tag):
        return _as_tag(tag) in self._tags

    def dim_idx(self, tag):
        """Return the position of the first dimension tagged ``tag``, or ``None`` if absent."""
        try:
            return self._tags.index(_as_tag(tag))
        except ValueError:
            return None

    def position_of(self, dim_or_tag):
        """Resolve a tag, tag name or (possibly negative) position to a non-negative position."""
        if isinstance(dim_or_tag, str):
            dim_or_tag = _as_tag(dim_or_tag)
        if isinstance(dim_or_tag, FieldTag):
            idim = self.dim_idx(dim_or_tag)
            if idim is None:
                raise ValueError(f"Tag {dim_or_tag} not found in layout {self.to_string()}.")
            return idim
        return self._check_position(dim_or_tag)

    def strip_dim(self, dim_or_tag):
        """Return a new layout with one dimension removed."""
        idim = self.position_of(dim_or_tag)
        return FieldLayout(self._tags[:idim] + self._tags[idim + 1 :], self._dims[:idim] + self._dims[idim + 1 :])

    def strip_dims(self, tags):
        """Return a new layout with every dimension tagged with one of ``tags`` removed.

        Tags absent from the layout are ignored, so the result may equal
        this layout.
        """
        tags = {_as_tag(t) for t in tags}
        keep = [i for i, t in enumerate(self._tags) if t not in tags]
        return FieldLayout([self._tags[i] for i in keep], [self._dims[i] for i in keep])

    def reset_dim(self, dim_or_tag, extent):
        """Return a new layout with the extent of one dimension replaced."""
        idim = self.position_of(dim_or_tag)
        dims = list(self._dims)
        dims[idim] = extent
        return FieldLayout(self._tags, dims)

    def clone(self):
        return FieldLayout(self._tags, self._dims)

    def to_string(self):
        """Return ``<TAG,...>(extent,...)``."""
        tags = ",".join(t.name for t in self._tags)
        dims = ",".join(str(d) for d in self._dims)
        return f"<{tags}>({dims})"

    def _check_position(self, idim):
        idim = int(idim)
        if idim < 0:
            idim += self.rank
        if not 0 <= idim < self.rank:
            raise ValueError(f"Dimension {idim} out of range for layout {self.to_string()}.")
        return idim

    def __eq__(self, other):
        if not isinstance(other, FieldLayout):
            return NotImplemented
        return self._tags == other._tags and self._dims == other._dims

    def __hash__(self):
        return hash((self._tags, self._dims))

    def __repr__(self):
        return f"FieldLayout({self.to_string()})"
