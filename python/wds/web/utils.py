"""
functions that assist with reading a web service request.  These provide the small part of the
HTTP layer that the data service configuration itself depends on: extracting query parameters
(used by diagnostic requests) and interpreting Accept headers (used for format selection).
"""
import re
from collections.abc import Mapping
from urllib.parse import parse_qs

__all__ = [ 'is_content_type', 'match_accept', 'acceptable', 'order_accepts', 'get_request_params' ]

def is_content_type(label):
    """
    return True if the given format label looks like a MIME type (i.e. contains a '/')
    rather than a format name
    """
    return '/' in label

def match_accept(ctype, accepted):
    """
    return the more specific of two content types if they match each other (allowing for
    wildcard subtypes, as in "text/*"), or None if they do not match
    """
    if ctype == accepted or (accepted.endswith('/*') and ctype.startswith(accepted[:-1])):
        return ctype
    if ctype.endswith('/*') and accepted.startswith(ctype[:-1]):
        return accepted
    return None

def acceptable(ctype, accepted):
    """
    return the first content type in the list ``accepted`` that matches ``ctype``, or None if
    none match.  An empty ``accepted`` list accepts anything.
    """
    if len(accepted) == 0:
        return ctype
    if ctype in ['*', '*/*']:
        return accepted[0]
    for ct in accepted:
        m = match_accept(ctype, ct)
        if m:
            return m
    return None

_qval_re = re.compile(r';\s*q=(\d+(\.\d+)?)')

def order_accepts(accepts):
    """
    return the MIME types given in one or more Accept header values, ordered by their q-values
    (highest first) with the q-values dropped.  Types with a q-value of zero are left out.

    :param accepts:  an Accept header value or a list of them
    :type accepts: str or list of str
    """
    if isinstance(accepts, str):
        accepts = [accepts]
    vals = []
    for a in accepts:
        vals.extend([b.strip() for b in a.split(',') if b.strip()])

    ordered = []
    for v in vals:
        q = 1.0
        m = _qval_re.search(v)
        if m:
            q = float(m.group(1))
        ordered.append((re.sub(r';.*$', '', v).strip(), q))

    ordered.sort(key=lambda a: a[1], reverse=True)
    return [a[0] for a in ordered if a[1] > 0]

def _flatten(params):
    # parse_qs returns a list for each parameter; a repeated parameter keeps its last value
    return dict((k, (v[-1] if isinstance(v, list) and v else v)) for k, v in params.items())

def get_request_params(request) -> Mapping:
    """
    return the query parameters of a request as a dictionary of strings.  The request can be a
    WSGI environment dictionary (with a ``QUERY_STRING``), an object or dictionary with a
    ``params`` property, or a query string itself.
    """
    if request is None:
        return {}
    if isinstance(request, str):
        return _flatten(parse_qs(request.lstrip('?'), keep_blank_values=True))
    if isinstance(request, Mapping):
        if 'QUERY_STRING' in request:
            return _flatten(parse_qs(request.get('QUERY_STRING') or '', keep_blank_values=True))
        if isinstance(request.get('params'), Mapping):
            return dict(request['params'])
        return {}
    params = getattr(request, 'params', None)
    if isinstance(params, Mapping):
        return dict(params)
    return {}
