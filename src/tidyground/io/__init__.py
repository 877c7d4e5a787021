"""Loading of tables from external sources.

The only supported format is delimited text (like CSV or TSV),
see :func:`read_delimited`. Rendering tables to other formats
is left to other tools, :meth:`tidyground.model.Table.to_arrow`
gives access to the whole :mod:`pyarrow` ecosystem.
"""

from .delimited import ReadOptions, read_delimited

__all__ = ("ReadOptions", "read_delimited")
