"""
Declarative configuration for web data services.

A data service is described as a hierarchy of nodes, one per URL path, whose attributes (the
operation that handles the path, the parameters it accepts, the formats and output fields it
supports, its documentation) are inherited down the hierarchy.  This package provides the
definition interface (:py:class:`~wds.service.DataService`), the attribute resolution engine
(:py:mod:`wds.resolve`), and diagnostic tools for taking snapshots ("digests") of a service's
configuration and comparing them (:py:mod:`wds.diag`).
"""
from .constants import RunMode
from .exceptions import *

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"

from .service import DataService
