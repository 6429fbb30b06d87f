"""
Foreign node converters.

Each module turns one family of foreign template nodes into unified nodes:
``root`` (the Program), ``element`` (fragment children and tag extraction),
``block``, ``mustache`` and ``attr``.
"""
