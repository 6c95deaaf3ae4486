"""
Selection of the output format for a request, given the formats a node allows, the format
requested via a query parameter (or path suffix), and the client's Accept header.
"""
import re
from collections import namedtuple
from typing import List

from ..exceptions import WDSException
from .utils import is_content_type, match_accept, acceptable

class UnsupportedFormat(WDSException):
    """
    An exception indicating that none of the client-requested formats are allowed for the
    requested node.  This exception is expected to result in a 400 (Bad Request) response.
    """
    pass

class Unacceptable(WDSException):
    """
    An exception indicating that the requested (or otherwise selected) format corresponds to a
    content type that is not acceptable to the client.  This exception is expected to result in a
    406 (Not Acceptable) response.
    """
    pass

Format = namedtuple("Format", ["name", "ctype"])

class FormatSupport(object):
    """
    a class that encapsulates the formats allowed for a node and which can be used to select the
    most appropriate one among those acceptable to the client.
    """

    def __init__(self):
        self._lu = {}
        self._ctps = {}
        self._deffmt = None

    def support(self, format: Format, cts: List[str]=[], asdefault=False):
        """
        add support for a named format.

        :param Format format:  the format to support (providing its name and default content type)
        :param cts:  other content types that, when requested, should result in this format
        :param bool asdefault:  if True, make this the format returned by :py:meth:`default_format`;
                     otherwise, the first format added is the default.
        """
        if format.name in self._lu:
            self._lu = dict([i for i in self._lu.items() if i[1].name != format.name])

        for ct in cts:
            self._lu[ct] = format
        self._lu.setdefault(format.ctype, format)
        self._lu[format.name] = format
        self._ctps[format.name] = set(cts)
        self._ctps[format.name].add(format.ctype)

        if asdefault or not self._deffmt:
            self._deffmt = format

    def names(self):
        return sorted(self._ctps.keys())

    _wildc_ct_re = re.compile(r'^(\w+)/\*$')

    def match(self, fmtreq: str) -> Format:
        """
        return the Format that best matches the given content type or format name, or None if it
        is not supported
        """
        if fmtreq == '*/*' or fmtreq == '*':
            return self.default_format()

        m = self._wildc_ct_re.match(fmtreq)
        if m:
            mimestart = m.group(1) + '/'
            deffmt = self.default_format()
            if deffmt and deffmt.ctype.startswith(mimestart):
                return deffmt
            mts = sorted([c for c in self._lu.keys() if c.startswith(mimestart)])
            if mts:
                return self._lu.get(mts[0])
            return None

        fmt = self._lu.get(fmtreq)
        if fmt and is_content_type(fmtreq):
            fmt = Format(fmt.name, fmtreq)
        return fmt

    def default_format(self) -> Format:
        """
        the format to return when the client has not asked for a specific one
        """
        return self._deffmt

    def select_format(self, formats, accepts):
        """
        given format choices ordered by the client's preference, pick a supported format to return.
        If both ``formats`` and ``accepts`` are empty, None is returned.

        :param formats:  the format names or content types requested via query parameters (or a
                         path suffix), in order of preference
        :param accepts:  the content types the client accepts, in order of preference
        :rtype: Format
        :raise UnsupportedFormat:  if none of the requested formats are supported
        :raise Unacceptable:       if no supported format matches the acceptable content types
        """
        if formats:
            unacceptable = []
            for label in formats:
                fmt = self.match(label)
                if not fmt:
                    continue

                if not accepts or '*' in accepts or '*/*' in accepts:
                    return fmt

                if is_content_type(label):
                    mct = acceptable(label, accepts)
                    if mct:
                        if mct.endswith('/*') and match_accept(mct, fmt.ctype):
                            return fmt
                        return Format(fmt.name, mct)
                else:
                    for ct in accepts:
                        mct = acceptable(ct, sorted(self._ctps.get(fmt.name, [])))
                        if mct and not mct.endswith('/*'):
                            return Format(fmt.name, mct)

                unacceptable.append(label)

            if unacceptable:
                raise Unacceptable("format parameter is inconsistent with Accept header")
            raise UnsupportedFormat("Unsupported format requested: " + ", ".join(formats))

        if accepts:
            for label in accepts:
                fmt = self.match(label)
                if fmt:
                    if is_content_type(label) and not label.endswith('/*'):
                        fmt = Format(fmt.name, label)
                    return fmt
            raise Unacceptable("No given Accept types supported")

        return None

def format_support_for(catalog, allowed, default: str=None) -> FormatSupport:
    """
    create a FormatSupport instance for the formats a node allows.

    :param catalog:   the defined formats (a :py:class:`~wds.formats.FormatCatalog`)
    :param allowed:   the names of the formats the node allows
    :param str default:  the name of the node's default format
    """
    fs = FormatSupport()
    allowed = set(allowed or ())
    for name in catalog.format_list:
        if name not in allowed:
            continue
        rec = catalog[name]
        fs.support(Format(name, rec['content_type']), [rec['content_type']], name == default)
    return fs
