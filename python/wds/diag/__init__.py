"""
Diagnostic tools for data services.

Diagnostics are requested like ordinary service requests: a node path selects the part of the
service to examine, and query parameters select the diagnostic to generate:

``show=digest``
    write a YAML digest of the configuration of the selected node and its descendants (see
    :py:mod:`wds.diag.digest`).  ``node=<pattern>`` restricts the digest to matching nodes.
``show=fields``
    write a report of the output fields defined for the service (see :py:mod:`wds.diag.fields`),
    optionally restricted with ``vocab=``, ``name=``, and ``data=``; ``doc=short|long`` includes
    field documentation.

Digests saved from two versions of a service can be compared with :py:mod:`wds.diag.diff`.
"""
import sys, logging

from ..web.utils import get_request_params
from ..resolve import path_of
from ..exceptions import UnknownDiagnosticParameter
from .digest import DigestBuilder, dump_digest
from .fields import fields_report

log = logging.getLogger("wds.diag")

DIAG_PARAM = ('show', 'splat')
FIELD_PARAM = ('name', 'vocab', 'data', 'doc')
DIGEST_PARAM = ('node',)

def _check_params(params, allowed):
    for key in params:
        if key not in DIAG_PARAM and key not in allowed:
            raise UnknownDiagnosticParameter(key)

def diagnostic_request(ds, request, get_params=get_request_params, out=None, logger=None):
    """
    generate the diagnostic output requested by a request's query parameters.

    :param DataService ds:  the data service to examine
    :param request:  the request; its ``node_path`` selects the node for a digest, and its
                     parameters (extracted with ``get_params``) select the diagnostic
    :param get_params:  a function that returns the query parameters of the request as a
                     dictionary
    :param out:      the stream to write the output to (default: standard output)
    :return:  the digest for ``show=digest``, the number of matching field names for
              ``show=fields``, or None if the request was not understood
    """
    if out is None:
        out = sys.stdout
    if not logger:
        logger = log

    params = get_params(request) or {}
    try:
        show = (params.get('show') or '').lower()
        if show == 'digest':
            _check_params(params, DIGEST_PARAM)
            digest = DigestBuilder(ds, logger.getChild("digest")).build([path_of(request)],
                                                                        params.get('node'))
            dump_digest(digest, out)
            return digest

        elif show == 'fields':
            _check_params(params, FIELD_PARAM)
            return fields_report(ds, params, out)

        else:
            raise UnknownDiagnosticParameter('show', show or None,
                                             "you must specify one of 'show=digest' or "
                                             "'show=fields'")

    except UnknownDiagnosticParameter as ex:
        logger.error("Diagnostic request failed: %s", str(ex))
        return None
