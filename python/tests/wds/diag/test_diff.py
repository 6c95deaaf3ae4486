import os, sys, logging, argparse, pdb
import unittest as test
from io import StringIO

from wds import DataService
from wds.diag.digest import DigestBuilder, dump_digest
from wds.diag import diff
from wds.diag.align import Edit, CHANGE, INSERT
from wds.diag.report import LEFT, RIGHT
from wds.exceptions import NoDigest, IncompatibleDigest

class Regions(object):
    operations = ['list', 'single']

    def list(self):
        pass

    def single(self):
        pass

def make_service(newer=False):
    ds = DataService('data1.0', title="Regions service", version="1.0", ruleset_prefix="1.0:")
    ds.define_vocab({'name': 'com', 'title': 'Compact field names'},
                    {'name': 'pbdb', 'title': 'Full field names', 'use_field_names': 1})
    ds.define_format({'name': 'json', 'default_vocab': 'com'},
                     {'name': 'txt', 'default_vocab': 'pbdb'})
    ds.define_role('Regions', Regions)
    ds.define_block('1.0:regions:basic', {'output': 'region_no', 'name': 'region_id'},
                    {'output': 'name'})
    ds.define_block('1.0:regions:loc', {'output': 'lat'}, {'output': 'lng'})
    ds.define_ruleset('1.0:regions:selector', {'param': 'region'}, {'optional': 'detail'})
    ds.define_ruleset('1.0:regions:list', {'allow': '1.0:regions:selector'},
                      {'optional': 'cutoff' if newer else 'order'}, {'optional': 'show'})
    ds.define_ruleset('1.0:regions:single', {'param': 'region'})
    ds.define_node({'path': '/', 'title': 'Documentation'},
                   {'path': 'regions', 'title': 'Regions', 'role': 'Regions'},
                   {'path': 'regions/list', 'title': 'List regions', 'method': 'list',
                    'output': '1.0:regions:basic, 1.0:regions:loc' if newer else
                              '1.0:regions:basic'},
                   {'path': 'regions/single',
                    'title': 'Show a single region' if newer else 'Single region',
                    'method': 'single', 'output': '1.0:regions:basic'})
    if newer:
        ds.define_node({'path': 'lists', 'title': 'Lists of things'},
                       {'path': 'lists/regions', 'title': 'Region list', 'role': 'Regions',
                        'method': 'list', 'ruleset': '1.0:regions:list'})
    return ds

def digest_of(ds, roots=None):
    return DigestBuilder(ds).build(roots)

class TestDiffOptions(test.TestCase):

    def test_defaults(self):
        opts = diff.DiffOptions()
        self.assertEqual(opts.axes, list(diff.DEFAULT_AXES))
        self.assertEqual(opts.subs, [])
        self.assertIsNone(opts.node_pattern)

    def test_selection(self):
        opts = diff.DiffOptions(['params', 'ops'], 'regions/*')
        self.assertEqual(opts.axes, ['ops'])
        self.assertEqual(opts.subs, ['params'])
        self.assertEqual(opts.node_pattern, 'regions/*')

        opts = diff.DiffOptions(['fields', 'blocks'])
        self.assertEqual(opts.axes, ['nodes'])
        self.assertEqual(opts.subs, ['blocks', 'fields'])

        opts = diff.DiffOptions(['all'])
        self.assertEqual(opts.axes, list(diff.TOP_AXES))
        self.assertEqual(opts.subs, list(diff.SUB_AXES))

        with self.assertRaises(ValueError):
            diff.DiffOptions(['goober'])

    def test_from_args(self):
        args = argparse.Namespace(ds=True, nodes=False, params=True, node='list*')
        opts = diff.DiffOptions.from_args(args)
        self.assertEqual(opts.axes, ['ds'])
        self.assertEqual(opts.subs, ['params'])
        self.assertEqual(opts.node_pattern, 'list*')

class TestCondense(test.TestCase):

    def test_merge(self):
        ds = make_service()
        d1 = digest_of(ds, 'regions/list')
        d2 = digest_of(ds, 'regions/single')
        d2['errors'] = {'roots': ["unknown node 'x'"]}
        d1['errors'] = {'roots': ["unknown node 'y'"]}

        merged = diff.condense([d1, None, d2])
        self.assertEqual(sorted(merged['node'].keys()), ['regions/list', 'regions/single'])
        self.assertEqual(sorted(merged['ruleset'].keys()),
                         ['1.0:regions:list', '1.0:regions:selector', '1.0:regions:single'])
        self.assertEqual(merged['errors']['roots'], ["unknown node 'y'", "unknown node 'x'"])
        self.assertEqual(merged['ds']['name'], 'data1.0')
        self.assertEqual(sorted(d1['node'].keys()), ['regions/list'])

        self.assertIsNone(diff.condense([]))
        self.assertIsNone(diff.condense([None]))

    def test_incompatible(self):
        d1 = digest_of(make_service(), 'regions/list')
        d2 = digest_of(DataService('data2.0', version="1.0"))
        with self.assertRaises(IncompatibleDigest):
            diff.condense([d1, d2])

        d2 = digest_of(make_service(), 'regions/single')
        d2['ds']['version'] = "2.0"
        with self.assertRaises(IncompatibleDigest):
            diff.condense([d1, d2])

        with self.assertRaises(NoDigest):
            diff.condense([d1, ["a", "list"]])

    def test_missing_version(self):
        d1 = digest_of(make_service(), 'regions/list')
        d2 = digest_of(make_service(), 'regions/single')
        d2['ds']['version'] = None
        with self.assertLogs("wds.diag.diff", logging.WARNING):
            merged = diff.condense([d1, d2])
        self.assertEqual(len(merged['node']), 2)

    def test_load_digest(self):
        ds = make_service()
        stream = StringIO(dump_digest(digest_of(ds, 'regions/list')) +
                          dump_digest(digest_of(ds, 'regions/single')))
        merged = diff.load_digest(stream)
        self.assertEqual(sorted(merged['node'].keys()), ['regions/list', 'regions/single'])

        self.assertIsNone(diff.load_digest(StringIO("")))
        with self.assertRaises(NoDigest):
            diff.load_digest(StringIO("a: [b"))
        with self.assertRaises(NoDigest):
            diff.load_digest("/nonexistent/digest.yml")

    def test_load_concatenated(self):
        ds = make_service()
        out = StringIO()
        dump_digest(digest_of(ds, 'regions/list'), out)
        dump_digest(digest_of(ds, 'regions/single'), out)
        merged = diff.load_digest(StringIO(out.getvalue()))
        self.assertEqual(sorted(merged['node'].keys()), ['regions/list', 'regions/single'])
        self.assertEqual(merged['ds']['name'], 'data1.0')

        out = StringIO()
        dump_digest(digest_of(ds, 'regions/list'), out)
        dump_digest(digest_of(DataService('data2.0', version="1.0")), out)
        with self.assertRaises(IncompatibleDigest):
            diff.load_digest(StringIO(out.getvalue()))

class TestHelpers(test.TestCase):

    def test_flatten_params(self):
        digest = digest_of(make_service())
        self.assertEqual(diff.flatten_params(digest, '1.0:regions:list'),
                         ['region', 'detail', 'order', 'show'])
        self.assertEqual(diff.flatten_params(digest, '1.0:regions:list', ['show']),
                         ['region', 'detail', 'order'])
        self.assertEqual(diff.flatten_params(digest, None), [])
        self.assertEqual(diff.flatten_params(digest, 'goob'), [])

    def test_block_fields(self):
        digest = digest_of(make_service(True))
        self.assertEqual(diff.block_fields(digest, ['1.0:regions:basic', '1.0:regions:loc']),
                         ['region_id', 'name', 'lat', 'lng'])
        self.assertEqual(diff.block_fields(digest, ['goob']), [])

    def test_is_digest(self):
        self.assertTrue(diff.is_digest({'ds': {'name': 'data'}}))
        self.assertFalse(diff.is_digest({'ds': {}}))
        self.assertFalse(diff.is_digest(None))
        self.assertFalse(diff.is_digest("ds"))

class TestDigestDiffEngine(test.TestCase):

    def setUp(self):
        self.old = digest_of(make_service())
        self.new = digest_of(make_service(True))
        self.engine = diff.DigestDiffEngine()

    def test_no_difference(self):
        report = self.engine.diff(self.old, digest_of(make_service()),
                                  diff.DiffOptions(['all']))
        self.assertTrue(report.unchanged)
        self.assertEqual([s.name for s in report.sections], list(diff.TOP_AXES))
        text = report.render()
        self.assertEqual(text.count("No difference."), len(diff.TOP_AXES))
        self.assertIn("Special parameters:\n-------------------\nNo difference.\n", text)

    def test_nodes(self):
        report = self.engine.diff(self.old, self.new)
        self.assertEqual(report.left_name, 'data1.0')
        nodes = report.section('nodes')
        self.assertEqual([e.key for e in nodes.right_only], ['lists', 'lists/regions'])
        self.assertEqual(nodes.entry('lists').label, 'Lists of things')
        self.assertEqual(nodes.left_only, [])

        single = nodes.entry('regions/single')
        self.assertEqual(single.changes,
                         [('title', 'Single region', 'Show a single region')])
        self.assertEqual(single.subdiffs, [])
        self.assertIsNone(nodes.entry('regions/list'))

        self.assertTrue(report.section('ds').unchanged)
        self.assertTrue(report.section('vocabs').unchanged)
        self.assertIsNone(report.section('ops'))

        text = report.render()
        self.assertIn("\n+++ lists (Lists of things)\n", text)
        self.assertIn("\n!!! regions/single\n    title : Single region | Show a single region\n",
                      text)

    def test_params(self):
        report = self.engine.diff(self.old, self.new, diff.DiffOptions(['params']))
        self.assertEqual([s.name for s in report.sections], ['nodes'])
        entry = report.section('nodes').entry('regions/list')
        self.assertEqual(entry.changes, [])
        self.assertEqual(len(entry.subdiffs), 1)
        sub = entry.subdiffs[0]
        self.assertEqual(sub.name, 'params')
        self.assertEqual([e for e in sub.edits if e.op != 'u'], [Edit(CHANGE, 'order', 'cutoff')])
        self.assertIn("        !!! order | cutoff\n", report.render())

        self.assertEqual(report.section('nodes').entry('lists/regions').subdiffs, [])

    def test_blocks_fields(self):
        report = self.engine.diff(self.old, self.new, diff.DiffOptions(['blocks', 'fields']))
        entry = report.section('nodes').entry('regions/list')
        self.assertEqual([s.name for s in entry.subdiffs], ['blocks', 'fields'])
        self.assertEqual([e for e in entry.subdiffs[0].edits if e.op != 'u'],
                         [Edit(INSERT, None, '1.0:regions:loc')])
        self.assertEqual([e.right for e in entry.subdiffs[1].edits if e.op == INSERT],
                         ['lat', 'lng'])

    def test_node_axes(self):
        report = self.engine.diff(self.old, self.new, diff.DiffOptions(['ops', 'pages', 'dirs']))
        self.assertEqual([e.key for e in report.section('ops').right_only], ['lists/regions'])
        self.assertEqual([e.key for e in report.section('pages').right_only], ['lists'])
        self.assertTrue(report.section('dirs').unchanged)
        self.assertEqual(report.section('pages').title, "Pages")

    def test_node_pattern(self):
        report = self.engine.diff(self.old, self.new, diff.DiffOptions(['nodes'], 'list*'))
        self.assertEqual([e.key for e in report.section('nodes').entries],
                         ['lists', 'lists/regions'])

        report = self.engine.diff(self.old, self.new, diff.DiffOptions(['nodes'], 'regions/*'))
        self.assertEqual([e.key for e in report.section('nodes').entries], ['regions/single'])

    def test_ds_and_entities(self):
        self.new['ds']['title'] = "Regional data"
        self.new['ds']['vocab']['pbdb']['title'] = "PBDB names"
        del self.new['ds']['format']['txt']
        self.new['ds']['special']['limit'] = 'max'

        report = self.engine.diff(self.old, self.new)
        self.assertEqual(report.section('ds').entry('ds').changes,
                         [('title', 'Regions service', 'Regional data')])
        self.assertEqual(report.section('vocabs').entry('pbdb').changes,
                         [('title', 'Full field names', 'PBDB names')])
        self.assertEqual([e.key for e in report.section('formats').left_only], ['txt'])
        self.assertEqual(report.section('specials').entry('limit').changes,
                         [('name', 'limit', 'max')])

    def test_no_digest(self):
        with self.assertRaises(NoDigest):
            self.engine.diff(None, self.new)
        with self.assertRaises(NoDigest):
            self.engine.diff(self.old, {'node': {}})


if __name__ == '__main__':
    test.main()
