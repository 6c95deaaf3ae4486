"""
The structured result of comparing two digests, and its rendering as a plain-text report.

A :py:class:`DiffReport` holds one :py:class:`Section` per comparison axis.  Each section lists
the entries that appear only on the left, only on the right, and those that appear on both
sides but differ.  When rendered, it looks like this::

    Nodes:
    ------
    --- old/path
    +++ new/path (A new operation)
    !!! list
        title : List records | List the records
        params:
            --- limit
            !!! show | sort

An unchanged section reads ``No difference.``
"""
from collections import namedtuple

from .align import DELETE, INSERT, CHANGE

DEFAULT_MARKERS = {'left': '---', 'right': '+++'}
COMP_MARKERS = {'left': '<<<', 'right': '>>>'}
CHANGED_MARKER = '!!!'

LEFT = 'left'
RIGHT = 'right'

SubDiff = namedtuple("SubDiff", ["name", "edits"])
SubDiff.__doc__ = "the alignment of one kind of nested sequence (e.g. parameter names)"

class Entry(object):
    """
    a difference found for one compared entity.

    :ivar str key:     the name of the entity (e.g. a node path)
    :ivar str side:    LEFT or RIGHT if the entity appears on only one side, None otherwise
    :ivar str label:   a description (e.g. a title) shown with one-sided entries
    :ivar list changes:  (attribute, left value, right value) tuples for a two-sided entry
    :ivar list subdiffs: SubDiff instances with nested differences for a two-sided entry
    """

    def __init__(self, key, side=None, label=None, changes=None, subdiffs=None):
        self.key = key
        self.side = side
        self.label = label
        self.changes = changes or []
        self.subdiffs = subdiffs or []

    @property
    def modified(self) -> bool:
        return self.side is None

    def __repr__(self):
        return "Entry(%r, %r)" % (self.key, self.side or "modified")

class Section(object):
    """
    the differences found along one comparison axis
    """

    def __init__(self, name: str, title: str):
        self.name = name
        self.title = title
        self.entries = []

    def add(self, entry: Entry):
        self.entries.append(entry)

    @property
    def left_only(self):
        return [e for e in self.entries if e.side == LEFT]

    @property
    def right_only(self):
        return [e for e in self.entries if e.side == RIGHT]

    @property
    def modified(self):
        return [e for e in self.entries if e.side is None]

    def entry(self, key):
        """
        return the entry for the given key or None if there is none
        """
        for e in self.entries:
            if e.key == key:
                return e
        return None

    @property
    def unchanged(self) -> bool:
        return len(self.entries) == 0

class DiffReport(object):
    """
    the complete result of comparing two digests
    """

    def __init__(self, left_name=None, right_name=None):
        self.left_name = left_name
        self.right_name = right_name
        self.sections = []

    def add_section(self, section: Section):
        self.sections.append(section)
        return section

    def section(self, name: str):
        for s in self.sections:
            if s.name == name:
                return s
        return None

    @property
    def unchanged(self) -> bool:
        return all(s.unchanged for s in self.sections)

    def render(self, markers=None, indent: int=4) -> str:
        """
        render this report as plain text
        """
        return TextRenderer(markers, indent).render(self)

def _fmt(value):
    if value is None:
        return "(none)"
    return str(value)

class TextRenderer(object):
    """
    a renderer of DiffReports as plain text
    """

    def __init__(self, markers=None, indent: int=4):
        """
        :param dict markers:  the prefixes for left-only and right-only entries, given as a
                              dictionary with ``left`` and ``right`` properties
        :param int indent:    the number of spaces to indent the details of each entry
        """
        self.markers = dict(DEFAULT_MARKERS)
        if markers:
            self.markers.update(markers)
        self.indent = " " * indent

    def render(self, report: DiffReport) -> str:
        lines = []
        for section in report.sections:
            lines.extend(self.render_section(section))
            lines.append("")
        return "\n".join(lines)

    def render_section(self, section: Section):
        header = section.title + ":"
        lines = [header, "-" * len(header)]
        if section.unchanged:
            lines.append("No difference.")
            return lines

        for e in section.left_only + section.right_only:
            line = "%s %s" % (self.markers[e.side], e.key)
            if e.label:
                line += " (%s)" % e.label
            lines.append(line)

        for e in section.modified:
            lines.append("%s %s" % (CHANGED_MARKER, e.key))
            for attr, lval, rval in e.changes:
                lines.append("%s%s : %s | %s" % (self.indent, attr, _fmt(lval), _fmt(rval)))
            for sub in e.subdiffs:
                lines.extend(self.render_subdiff(sub))
        return lines

    def render_subdiff(self, sub: SubDiff):
        ind = self.indent
        lines = ["%s%s:" % (ind, sub.name)]
        for edit in sub.edits:
            if edit.op == DELETE:
                lines.append("%s%s%s %s" % (ind, ind, self.markers[LEFT], edit.left))
            elif edit.op == INSERT:
                lines.append("%s%s%s %s" % (ind, ind, self.markers[RIGHT], edit.right))
            elif edit.op == CHANGE:
                lines.append("%s%s%s %s | %s" % (ind, ind, CHANGED_MARKER, edit.left, edit.right))
        return lines
