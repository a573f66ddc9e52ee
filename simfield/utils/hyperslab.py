"""Human-readable dumps of field hyperslabs, for debugging and tests."""

from __future__ import annotations

import io
import sys

import numpy as np

from simfield.core.config import HyperslabOptions
from simfield.core.constants import HYPERSLAB_RANKS
from simfield.core.layout import FieldTag


def print_field_hyperslab(f, tags=(), indices=(), out=None, options=None):
    """Slice ``f`` at ``tags``/``indices`` and print what is left.

    Each ``(tag, index)`` pair fixes one dimension, applied in order; the
    sliced dimension must be one of the first two remaining ones. Rows are
    labeled with coordinates in the original, unsliced field; along a
    dimension restricted with :meth:`Field.subfield_range` they count from
    the start of the full allocation, while ``indices`` stay local to ``f``.
    For example, slicing a ``<COL,CMP,LEV>`` field at ``COL=0`` and ``LEV=1``
    prints::

         T<COL,CMP,LEV>(2,3,4)

      T(0,:,1)
        0.123, 0.456, 0.789,

    Parameters
    ----------
    f : Field
        Field to print.
    tags : sequence of FieldTag
        Tags of the dimensions to fix.
    indices : sequence of int
        Index at which each tag is fixed.
    out : text stream, optional
        Destination, ``sys.stdout`` by default.
    options : HyperslabOptions, optional
        Line width and number formatting.
    """
    tags = [t if isinstance(t, FieldTag) else FieldTag[t] for t in tags]
    indices = [int(i) for i in indices]
    if len(tags) != len(indices):
        raise ValueError(
            f"Tags vector size ({len(tags)}) differs from indices vector size ({len(indices)}) "
            f"while printing field '{f.name}'."
        )
    out = sys.stdout if out is None else out
    options = HyperslabOptions() if options is None else options
    _print_hyperslab(
        f, tags, indices, out, f.rank, 0, options, list(range(f.rank)), [""] * f.rank, f.index_offsets()
    )


def field_hyperslab_to_string(f, tags=(), indices=(), options=None):
    """Return what :func:`print_field_hyperslab` would print."""
    buf = io.StringIO()
    print_field_hyperslab(f, tags, indices, buf, options)
    return buf.getvalue()


def _print_hyperslab(f, tags, indices, out, orig_rank, curr_idx, options, dims_left, dims_str, offsets):
    # dims_left maps each remaining dimension to its position in the original
    # layout; dims_str holds the original-layout label of every dimension;
    # offsets shifts labels along dimensions restricted to a range.
    layout = f.layout
    if curr_idx < len(tags):
        tag = tags[curr_idx]
        idim = layout.dim_idx(tag)
        if idim is None:
            raise ValueError(
                "Something went wrong while slicing field.\n"
                f"  - field name  : {f.name}\n"
                f"  - field layout: {layout.to_string()}\n"
                f"  - curr tag    : {tag}"
            )
        if idim not in (0, 1):
            raise ValueError(
                "Cannot subview field for printing.\n"
                f"  - field name  : {f.name}\n"
                f"  - field layout: {layout.to_string()}\n"
                f"  - loc tags    : <{','.join(str(t) for t in tags)}>\n"
                f"  - loc indices : ({','.join(str(i) for i in indices)})"
            )
        sub_f = f.subfield(idim, indices[curr_idx])
        dims_str = list(dims_str)
        dims_str[dims_left[idim]] = str(indices[curr_idx] + offsets[dims_left[idim]])
        dims_left = dims_left[:idim] + dims_left[idim + 1 :]
        return _print_hyperslab(
            sub_f, tags, indices, out, orig_rank, curr_idx + 1, options, dims_left, dims_str, offsets
        )

    if layout.rank not in HYPERSLAB_RANKS:
        raise ValueError(
            "Unsupported rank in print_field_hyperslab.\n"
            f"  - field name  : {f.name}\n"
            f"  - field layout (upon slicing): {layout.to_string()}"
        )

    orig_layout = f.header.ancestor_with_rank(orig_rank).layout
    dims_str = list(dims_str)

    f.sync_to_host()
    v = f.get_strided_view()
    name = f.name
    fmt = options.formatter
    per_line = options.max_per_line

    out.write(f"     {name}{orig_layout.to_string()}\n\n")
    if layout.rank == 0:
        # Trailing ", " keeps rank 0 consistent with the other ranks for scripts parsing the dump.
        out.write(f"  {name}({','.join(dims_str)})")
        out.write(f"\n    {fmt(v[()])}, \n")
        return

    dims_str[dims_left[-1]] = ":"
    for outer in np.ndindex(v.shape[:-1]):
        for pos, i in zip(dims_left[:-1], outer):
            dims_str[pos] = str(i + offsets[pos])
        out.write(f"  {name}({','.join(dims_str)})")
        row = v[outer]
        for j in range(row.shape[0]):
            if j % per_line == 0:
                out.write("\n    ")
            out.write(f"{fmt(row[j])}, ")
        out.write("\n")

