import os, sys, logging, tempfile, pdb
import unittest as test
from unittest import mock
from io import StringIO

from wds import DataService
from wds.cli import wds
from wds.diag.digest import DigestBuilder, dump_digest
from wds.diag.report import DiffReport
from wds.utils.cli import CommandFailure
from wds import config as cfgmod

class Regions(object):
    operations = ['list']

    def list(self):
        pass

def make_service(name='data1.0', newer=False):
    ds = DataService(name, title="Regions service", version="1.0", ruleset_prefix="1.0:")
    ds.define_vocab({'name': 'com'})
    ds.define_format({'name': 'json'})
    ds.define_role('Regions', Regions)
    ds.define_ruleset('1.0:regions:list', {'param': 'region'},
                      {'optional': 'cutoff' if newer else 'order'})
    ds.define_node({'path': '/', 'title': 'Documentation'},
                   {'path': 'regions', 'title': 'Regions', 'role': 'Regions'},
                   {'path': 'regions/list', 'title': 'List regions', 'method': 'list'})
    if newer:
        ds.define_node({'path': 'lists', 'title': 'Lists of things'})
    return ds

tmpd = None
cfgfile = None

def write_digest(filename, *services):
    with open(os.path.join(tmpd.name, filename), 'w') as fd:
        for ds in services:
            dump_digest(DigestBuilder(ds).build(), fd)

def setUpModule():
    global tmpd, cfgfile
    tmpd = tempfile.TemporaryDirectory(prefix="_test_cli_diff.")
    cfgfile = os.path.join(tmpd.name, "wds.yml")
    with open(cfgfile, 'w') as fd:
        fd.write("cmd:\n  diff:\n    indent: 2\n")
    write_digest("old.yml", make_service())
    write_digest("new.yml", make_service(newer=True))
    write_digest("mixed.yml", make_service(), make_service('data2.0'))

def tearDownModule():
    tmpd.cleanup()

class TestDiffCmd(test.TestCase):

    def resetLogfile(self):
        rootlog = logging.getLogger()
        if cfgmod._log_handler:
            rootlog.removeHandler(cfgmod._log_handler)
            cfgmod._log_handler.close()
            cfgmod._log_handler = None

    def setUp(self):
        self.resetLogfile()

    def tearDown(self):
        self.resetLogfile()

    def run_wds(self, *args):
        return wds.main("wds", ["-q", "-w", tmpd.name, "-c", cfgfile] + list(args))

    def read(self, filename):
        with open(os.path.join(tmpd.name, filename)) as fd:
            return fd.read()

    def test_diff(self):
        self.run_wds("diff", "--all", "-o", "report.txt", "old.yml", "new.yml")
        report = self.read("report.txt")
        self.assertIn("Nodes:\n------\n+++ lists (Lists of things)\n", report)
        self.assertIn("!!! regions/list\n  params:\n    !!! order | cutoff\n", report)
        self.assertIn("Data service:\n-------------\nNo difference.\n", report)

    def test_same(self):
        with mock.patch('sys.stdout', new_callable=StringIO) as out:
            self.run_wds("diff", "old.yml", os.path.join(tmpd.name, "old.yml"))
        self.assertEqual(out.getvalue().count("No difference."), 5)
        self.assertNotIn("Operations:", out.getvalue())

    def test_comp_and_node(self):
        self.run_wds("diff", "--comp", "--ops", "--pages", "--node", "list*", "-o", "comp.txt",
                     "old.yml", "new.yml")
        report = self.read("comp.txt")
        self.assertIn("Pages:\n------\n>>> lists (Lists of things)\n", report)
        self.assertIn("Operations:\n-----------\nNo difference.\n", report)
        self.assertNotIn("Nodes:", report)

    def test_stdin(self):
        with mock.patch('sys.stdin', StringIO(self.read("old.yml"))):
            self.run_wds("diff", "--nodes", "-o", "stdin.txt", "new.yml")
        self.assertIn("+++ lists", self.read("stdin.txt"))

    def test_usage_errors(self):
        with self.assertRaises(CommandFailure) as cm:
            self.run_wds("diff")
        self.assertEqual(cm.exception.stat, 2)
        self.assertEqual(cm.exception.cmd, "diff")

        with self.assertRaises(CommandFailure) as cm:
            self.run_wds("diff", "old.yml", "new.yml", "mixed.yml")
        self.assertEqual(cm.exception.stat, 2)

    def test_bad_digests(self):
        with self.assertRaises(CommandFailure) as cm:
            self.run_wds("diff", "old.yml", "goob.yml")
        self.assertEqual(cm.exception.stat, 3)

        with self.assertRaises(CommandFailure) as cm:
            self.run_wds("diff", "old.yml", "mixed.yml")
        self.assertEqual(cm.exception.stat, 3)

        with self.assertRaises(CommandFailure) as cm:
            self.run_wds("diff", "wds.yml", "old.yml")
        self.assertEqual(cm.exception.stat, 3)

    def test_write_failure(self):
        with self.assertRaises(CommandFailure) as cm:
            self.run_wds("diff", "-o", os.path.join(tmpd.name, "nodir", "out.txt"),
                         "old.yml", "new.yml")
        self.assertEqual(cm.exception.stat, 4)

    def test_run(self):
        with self.assertRaises(SystemExit) as cm:
            wds.run(["wds", "-q", "-w", tmpd.name, "-c", cfgfile, "diff"])
        self.assertEqual(cm.exception.code, 2)

        with self.assertRaises(SystemExit) as cm:
            wds.run(["wds", "-q", "-w", tmpd.name, "-c", cfgfile, "diff", "-o", "run.txt",
                     "old.yml", "new.yml"])
        self.assertEqual(cm.exception.code, 0)


if __name__ == '__main__':
    test.main()
