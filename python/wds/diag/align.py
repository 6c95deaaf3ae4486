"""
Alignment of two sequences via their longest common subsequence.

:py:func:`sdiff` returns an edit script that walks both sequences in order, marking each element
as unchanged, deleted (left only), inserted (right only), or changed (a left element replaced by a
right one).  Deletions and insertions that fall between the same pair of unchanged elements are
paired up as changes, so that ``[a, b, c]`` vs. ``[a, b, d]`` yields a single change of ``c`` to
``d`` rather than a deletion and an insertion.
"""
from collections import namedtuple

UNCHANGED = 'u'
DELETE = '-'
INSERT = '+'
CHANGE = 'c'

Edit = namedtuple("Edit", ["op", "left", "right"])

def _lcs_lengths(a, b):
    # lengths[i][j] is the length of the LCS of a[i:] and b[j:]
    lengths = [[0] * (len(b) + 1) for i in range(len(a) + 1)]
    for i in range(len(a) - 1, -1, -1):
        for j in range(len(b) - 1, -1, -1):
            if a[i] == b[j]:
                lengths[i][j] = lengths[i+1][j+1] + 1
            else:
                lengths[i][j] = max(lengths[i+1][j], lengths[i][j+1])
    return lengths

def lcs(a, b):
    """
    return a longest common subsequence of two sequences as a list
    """
    a, b = list(a), list(b)
    lengths = _lcs_lengths(a, b)
    out = []
    i = j = 0
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            out.append(a[i])
            i += 1
            j += 1
        elif lengths[i+1][j] >= lengths[i][j+1]:
            i += 1
        else:
            j += 1
    return out

def _flush(dels, ins, out):
    for l, r in zip(dels, ins):
        out.append(Edit(CHANGE, l, r))
    for l in dels[len(ins):]:
        out.append(Edit(DELETE, l, None))
    for r in ins[len(dels):]:
        out.append(Edit(INSERT, None, r))
    del dels[:]
    del ins[:]

def sdiff(a, b):
    """
    compute the edit script that transforms sequence ``a`` into sequence ``b``.

    :return:  a list of :py:class:`Edit` tuples, each having an ``op`` (one of UNCHANGED, DELETE,
              INSERT, CHANGE) and the ``left`` and ``right`` elements involved (None where not
              applicable)
    """
    a = list(a or [])
    b = list(b or [])
    lengths = _lcs_lengths(a, b)

    out = []
    dels, ins = [], []
    i = j = 0
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            _flush(dels, ins, out)
            out.append(Edit(UNCHANGED, a[i], b[j]))
            i += 1
            j += 1
        elif lengths[i+1][j] >= lengths[i][j+1]:
            dels.append(a[i])
            i += 1
        else:
            ins.append(b[j])
            j += 1

    dels.extend(a[i:])
    ins.extend(b[j:])
    _flush(dels, ins, out)
    return out

def has_changes(edits) -> bool:
    """
    return True if the given edit script includes anything other than unchanged elements
    """
    return any(e.op != UNCHANGED for e in edits)
