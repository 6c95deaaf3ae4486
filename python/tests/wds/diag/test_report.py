import os, sys, pdb
import unittest as test

from wds.diag.report import (DiffReport, Section, Entry, SubDiff, TextRenderer, LEFT, RIGHT,
                             COMP_MARKERS)
from wds.diag.align import sdiff

def make_report():
    report = DiffReport("left", "right")
    report.add_section(Section("ds", "Data service"))
    nodes = report.add_section(Section("nodes", "Nodes"))
    nodes.add(Entry("old/path", LEFT))
    nodes.add(Entry("new/path", RIGHT, "A new operation"))
    nodes.add(Entry("list", changes=[("title", "List records", "List the records"),
                                     ("disabled", None, 1)],
                    subdiffs=[SubDiff("params", sdiff(["limit", "show"], ["show", "sort"]))]))
    return report

class TestDiffReport(test.TestCase):

    def test_structure(self):
        report = make_report()
        self.assertFalse(report.unchanged)
        self.assertTrue(report.section("ds").unchanged)
        self.assertIsNone(report.section("vocabs"))

        nodes = report.section("nodes")
        self.assertEqual([e.key for e in nodes.left_only], ["old/path"])
        self.assertEqual([e.key for e in nodes.right_only], ["new/path"])
        self.assertEqual([e.key for e in nodes.modified], ["list"])
        self.assertTrue(nodes.entry("list").modified)
        self.assertFalse(nodes.entry("new/path").modified)
        self.assertIsNone(nodes.entry("goob"))

    def test_unchanged(self):
        report = DiffReport()
        report.add_section(Section("nodes", "Nodes"))
        self.assertTrue(report.unchanged)
        self.assertEqual(report.render(), "Nodes:\n------\nNo difference.\n")

    def test_render(self):
        lines = make_report().render().split("\n")
        self.assertEqual(lines[:4], ["Data service:", "-------------", "No difference.", ""])
        self.assertEqual(lines[4:], [
            "Nodes:",
            "------",
            "--- old/path",
            "+++ new/path (A new operation)",
            "!!! list",
            "    title : List records | List the records",
            "    disabled : (none) | 1",
            "    params:",
            "        --- limit",
            "        +++ sort",
            ""
        ])

    def test_render_markers(self):
        text = TextRenderer(COMP_MARKERS, 2).render(make_report())
        self.assertIn("\n<<< old/path\n", text)
        self.assertIn("\n>>> new/path (A new operation)\n", text)
        self.assertIn("\n  title : List records | List the records\n", text)
        self.assertIn("\n    <<< limit\n", text)
        self.assertNotIn("---", text.split("Nodes:")[1].split("\n", 2)[2])

        text = make_report().render({'left': 'L'})
        self.assertIn("\nL old/path\n", text)
        self.assertIn("\n+++ new/path", text)


if __name__ == '__main__':
    test.main()
