"""Fields: named, typed arrays with a host and a device residency."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

import numpy as np

from .backend import _array_module, to_device, to_numpy
from .constants import DEFAULT_PACK_SIZE, DEFAULT_UNITS, SUPPORTED_DTYPES
from .layout import FieldLayout

__all__ = [
    "AllocationProperties",
    "DualBuffer",
    "Field",
    "FieldHeader",
    "FieldIdentifier",
]

log = logging.getLogger("simfield.core.field")


@dataclass(frozen=True)
class FieldIdentifier:
    """Immutable identity of a field."""

    name: str
    layout: FieldLayout
    units: str = DEFAULT_UNITS
    grid_name: str = ""

    def alias(self, layout):
        """Return the same identity over another layout."""
        return replace(self, layout=layout)


@dataclass(frozen=True)
class AllocationProperties:
    """How the root allocation of a field is laid out in memory.

    The last axis is padded up to a multiple of ``pack_size``; padding
    entries are never part of the logical view.
    """

    pack_size: int
    alloc_shape: tuple
    root_dims: tuple

    @classmethod
    def for_layout(cls, layout, pack_size=DEFAULT_PACK_SIZE):
        if pack_size < 1:
            raise ValueError(f"pack_size must be positive, got {pack_size}.")
        dims = layout.dims
        if not dims:
            return cls(pack_size, (), ())
        last = -(-dims[-1] // pack_size) * pack_size
        return cls(pack_size, dims[:-1] + (last,), dims)

    @property
    def alloc_size(self):
        return int(np.prod(self.alloc_shape, dtype=np.int64))

    @property
    def padded(self):
        return bool(self.root_dims) and self.alloc_shape[-1] != self.root_dims[-1]


class FieldHeader:
    """Identifier plus allocation metadata; subfields keep a reference to their parent's header."""

    def __init__(self, identifier, parent=None):
        self.identifier = identifier
        self.parent = parent
        self.alloc_props = None

    @property
    def layout(self):
        return self.identifier.layout

    def ancestor_with_rank(self, rank):
        """Walk up the parent chain until a header of at least ``rank`` is found."""
        fh = self
        while fh.layout.rank < rank:
            if fh.parent is None:
                raise ValueError(
                    f"Field '{fh.identifier.name}' has no ancestor of rank {rank}; "
                    f"root layout is {fh.layout.to_string()}."
                )
            fh = fh.parent
        return fh


class DualBuffer:
    """One allocation resident on host and on device.

    At most one side may be marked modified at a time. ``sync_to_host`` and
    ``sync_to_device`` copy only when the other side is marked modified, so
    they are idempotent and cheap once synchronized. When both sides are the
    same array (numpy backend) there is nothing to synchronize.

    Parameters
    ----------
    host : numpy.ndarray
        Flat host buffer.
    device : ndarray, optional
        Flat device buffer. Defaults to ``host``.
    """

    def __init__(self, host, device=None):
        self.host = host
        self.device = host if device is None else device
        self._host_modified = False
        self._device_modified = False

    @property
    def aliased(self):
        return self.device is self.host

    @property
    def host_modified(self):
        return self._host_modified

    @property
    def device_modified(self):
        return self._device_modified

    def modify_host(self):
        """Mark the host copy as authoritative."""
        if self.aliased:
            return
        if self._device_modified:
            raise RuntimeError("Host buffer modified while device modifications are still unsynced.")
        self._host_modified = True

    def modify_device(self):
        """Mark the device copy as authoritative."""
        if self.aliased:
            return
        if self._host_modified:
            raise RuntimeError("Device buffer modified while host modifications are still unsynced.")
        self._device_modified = True

    def sync_to_host(self):
        if not self._device_modified:
            return
        log.debug("sync_to_host: copying %d entries", self.host.size)
        self.host[...] = to_numpy(self.device)
        self._device_modified = False

    def sync_to_device(self):
        if not self._host_modified:
            return
        log.debug("sync_to_device: copying %d entries", self.host.size)
        if _array_module(self.device) is np:
            self.device[...] = self.host
        else:
            self.device.set(self.host)
        self._host_modified = False


class Field:
    """A named, shaped, typed array backing part of a simulation state.

    A field is created unallocated; :meth:`allocate_view` gives it storage.
    :meth:`subfield` and :meth:`subfield_range` return views sharing that
    storage, which must not outlive it.

    Parameters
    ----------
    identifier : FieldIdentifier
        Name, layout and units.
    dtype : dtype-like, default float64
        One of float32, float64, int32, int64.
    """

    def __init__(self, identifier, dtype=np.float64):
        dtype = np.dtype(dtype)
        if dtype.name not in SUPPORTED_DTYPES:
            raise ValueError(f"Unsupported field dtype {dtype.name!r}. Choose one of {', '.join(SUPPORTED_DTYPES)}.")
        self._header = FieldHeader(identifier)
        self._dtype = dtype
        self._buffer = None
        self._slices = ()

    @classmethod
    def from_array(cls, name, tags, values, units=DEFAULT_UNITS, pack_size=DEFAULT_PACK_SIZE, dtype=None):
        """Allocate a field with layout ``(tags, values.shape)`` and fill it with ``values``."""
        values = np.asarray(values, dtype=dtype)
        fid = FieldIdentifier(name, FieldLayout(tags, values.shape), units)
        f = cls(fid, dtype=values.dtype if dtype is None else dtype)
        f.allocate_view(pack_size)
        f.deep_copy(values)
        return f

    # ---- identity ----

    @property
    def header(self):
        return self._header

    @property
    def identifier(self):
        return self._header.identifier

    @property
    def name(self):
        return self._header.identifier.name

    @property
    def layout(self):
        return self._header.identifier.layout

    @property
    def units(self):
        return self._header.identifier.units

    @property
    def rank(self):
        return self.layout.rank

    @property
    def dtype(self):
        return self._dtype

    @property
    def parent(self):
        return self._header.parent

    @property
    def is_allocated(self):
        return self._buffer is not None

    # ---- storage ----

    def allocate_view(self, pack_size=DEFAULT_PACK_SIZE):
        """Allocate zero-initialized storage on host and on the active device backend."""
        if self.is_allocated:
            raise ValueError(f"Field '{self.name}' is already allocated.")
        props = AllocationProperties.for_layout(self.layout, pack_size)
        host = np.zeros(max(props.alloc_size, 1), dtype=self._dtype)
        self._header.alloc_props = props
        self._buffer = DualBuffer(host, to_device(host))
        log.debug("allocate_view: %s %s (pack_size=%d)", self.name, self.layout.to_string(), pack_size)

    def get_view(self):
        """Return the device array over the logical entries."""
        return self._logical(self._checked_buffer().device)

    def get_strided_view(self):
        """Return the host array over the logical entries; it may be non-contiguous."""
        return self._logical(self._checked_buffer().host)

    def get_contiguous_view(self):
        """Return the host array over the logical entries, which must be packed."""
        v = self.get_strided_view()
        if not v.flags.c_contiguous:
            raise ValueError(f"Field '{self.name}' is not contiguous; use get_strided_view().")
        return v

    @property
    def contiguous(self):
        return bool(self.get_strided_view().flags.c_contiguous)

    def sync_to_host(self):
        self._checked_buffer().sync_to_host()

    def sync_to_device(self):
        self._checked_buffer().sync_to_device()

    def modify_host(self):
        self._checked_buffer().modify_host()

    def modify_device(self):
        self._checked_buffer().modify_device()

    # ---- views ----

    def subfield(self, dim_or_tag, index):
        """Return the rank-1-lower view obtained by fixing one dimension to ``index``."""
        layout = self.layout
        if layout.rank == 0:
            raise ValueError(f"Cannot subview rank-0 field '{self.name}'.")
        idim = layout.position_of(dim_or_tag)
        index = int(index)
        if not 0 <= index < layout.dim(idim):
            raise ValueError(
                f"Index {index} out of bounds for dimension {idim} of field '{self.name}' {layout.to_string()}."
            )
        return self._view(layout.strip_dim(idim), idim, index)

    def subfield_range(self, dim_or_tag, start, stop):
        """Return the same-rank view restricted to ``[start, stop)`` along one dimension."""
        layout = self.layout
        idim = layout.position_of(dim_or_tag)
        start, stop = int(start), int(stop)
        if not 0 <= start < stop <= layout.dim(idim):
            raise ValueError(
                f"Range [{start},{stop}) invalid for dimension {idim} of field '{self.name}' {layout.to_string()}."
            )
        return self._view(layout.reset_dim(idim, stop - start), idim, slice(start, stop))

    def index_offsets(self):
        """Return, for each dimension, the root-allocation index of this view's first entry.

        Zero everywhere except along dimensions restricted by
        :meth:`subfield_range`.
        """
        self._checked_buffer()
        root_rank = len(self._header_root_props().root_dims)
        positions = list(range(root_rank))
        offsets = [0] * root_rank
        for idim, key in self._slices:
            if isinstance(key, slice):
                offsets[positions[idim]] += key.start
            else:
                del positions[idim]
        return tuple(offsets[p] for p in positions)

    # ---- elementwise updates ----

    def scale(self, other):
        """Multiply this field in place, entry by entry, by ``other``."""
        if other.layout != self.layout:
            raise ValueError(
                f"Cannot scale field '{self.name}' {self.layout.to_string()} "
                f"by field '{other.name}' {other.layout.to_string()}."
            )
        self.sync_to_host()
        other.sync_to_host()
        v = self.get_strided_view()
        np.multiply(v, other.get_strided_view(), out=v)
        self.modify_host()
        self.sync_to_device()

    def deep_copy(self, src):
        """Overwrite every entry with a scalar, an array of the logical shape, or another field."""
        if isinstance(src, Field):
            if src.layout != self.layout:
                raise ValueError(
                    f"Cannot copy field '{src.name}' {src.layout.to_string()} "
                    f"into field '{self.name}' {self.layout.to_string()}."
                )
            src.sync_to_host()
            src = src.get_strided_view()
        self.sync_to_host()
        self.get_strided_view()[...] = src
        self.modify_host()
        self.sync_to_device()

    def clone(self, name=None):
        """Return a newly allocated copy with the same layout, dtype and pack size."""
        fid = self.identifier if name is None else replace(self.identifier, name=name)
        f = Field(fid, dtype=self._dtype)
        props = self._header.alloc_props
        f.allocate_view(props.pack_size if props is not None and not self._slices else DEFAULT_PACK_SIZE)
        f.deep_copy(self)
        return f

    def __repr__(self):
        state = "allocated" if self.is_allocated else "unallocated"
        return f"Field({self.name!r}, {self.layout.to_string()}, {self._dtype.name}, {state})"

    # ---- internals ----

    def _checked_buffer(self):
        if self._buffer is None:
            raise ValueError(f"Field '{self.name}' is not allocated.")
        return self._buffer

    def _logical(self, flat):
        props = self._header_root_props()
        arr = flat.reshape(props.alloc_shape)
        if props.padded:
            arr = arr[..., : props.root_dims[-1]]
        # The trailing Ellipsis keeps fully indexed views as 0-d arrays instead of scalars.
        for idim, key in self._slices:
            arr = arr[(slice(None),) * idim + (key, Ellipsis)]
        return arr

    def _header_root_props(self):
        fh = self._header
        while fh.alloc_props is None:
            fh = fh.parent
        return fh.alloc_props

    def _view(self, layout, idim, key):
        buf = self._checked_buffer()
        view = Field(self.identifier.alias(layout), dtype=self._dtype)
        view._header.parent = self._header
        view._buffer = buf
        view._slices = self._slices + ((idim, key),)
        return view
