import os, sys, logging, pdb
import unittest as test

from wds.attrs import node_registry
from wds.paths import PathTree
from wds.resolve import AttributeResolver, path_of

class Request(object):
    def __init__(self, path):
        self.node_path = path

class TestPathOf(test.TestCase):

    def test_path_of(self):
        self.assertEqual(path_of('a/b'), 'a/b')
        self.assertEqual(path_of(''), '/')
        self.assertEqual(path_of(None), '/')
        self.assertEqual(path_of({'node_path': 'a'}), 'a')
        self.assertEqual(path_of({}), '/')
        self.assertEqual(path_of(Request('x/y')), 'x/y')
        self.assertEqual(path_of(object()), '/')

class TestAttributeResolver(test.TestCase):

    def setUp(self):
        self.config = {}
        self.registry = node_registry(lambda: ['json', 'txt', 'csv'], lambda: ['com'])
        self.tree = PathTree()
        self.resolver = AttributeResolver(self.tree, self.registry, self.config.get)

        self.define('/', {'title': 'Root', 'output': ('basic',), 'default_limit': 100,
                          'allow_format': ('a', 'b')})
        self.define('x', {'title': 'X', 'allow_format': ('+c', '-a')}, ['allow_format'])
        self.define('x/y', {'default_limit': '', 'output': ''})
        self.define('x/y/z', {'allow_format': ('p', 'q')})
        self.define('w', {'allow_format': ''})

    def define(self, path, attrs, compose=None):
        local = {'disabled': 0}
        local.update(attrs)
        self.tree.add(path, local, "line 0 of test", compose)

    def test_inheritance(self):
        self.assertEqual(self.resolver.resolve('/', 'default_limit'), 100)
        self.assertEqual(self.resolver.resolve('x', 'default_limit'), 100)
        self.assertEqual(self.resolver.resolve('x', 'output'), ('basic',))

    def test_empty_vs_absent(self):
        self.assertIsNone(self.resolver.resolve('x/y', 'default_limit'))
        self.assertIsNone(self.resolver.resolve('x/y', 'output'))
        self.assertIsNone(self.resolver.resolve('x/y/z', 'default_limit'))
        self.assertIsNone(self.resolver.resolve('x/y/z', 'output'))
        self.assertIsNone(self.resolver.resolve('w', 'allow_format'))

    def test_set_composition(self):
        self.assertEqual(self.resolver.resolve('/', 'allow_format'), frozenset(['a', 'b']))
        self.assertEqual(self.resolver.resolve('x', 'allow_format'), frozenset(['b', 'c']))
        self.assertEqual(self.resolver.resolve('x/y', 'allow_format'), frozenset(['b', 'c']))
        self.assertEqual(self.resolver.resolve('x/y/z', 'allow_format'), frozenset(['p', 'q']))

    def test_nonheritable(self):
        self.assertEqual(self.resolver.resolve('x', 'title'), 'X')
        self.assertIsNone(self.resolver.resolve('x/y', 'title'))

    def test_defaults(self):
        self.assertEqual(self.resolver.resolve('x/y', 'default_header'), 1)
        self.assertEqual(self.resolver.resolve('x/y', 'allow_method'), frozenset(['GET', 'HEAD']))
        self.assertEqual(self.resolver.resolve('x/y', 'allow_vocab'), frozenset(['com']))
        self.assertIsNone(self.resolver.resolve('x/y', 'role'))

    def test_config_value(self):
        self.config['default_limit'] = 500
        self.config['default_format'] = 'json'
        self.config['allow_method'] = '+POST'
        self.assertEqual(self.resolver.resolve('x', 'default_format'), 'json')
        self.assertEqual(self.resolver.resolve('x', 'default_limit'), 100)
        self.assertEqual(self.resolver.resolve('x', 'allow_method'),
                         frozenset(['GET', 'HEAD', 'POST']))

    def test_bad_config_value(self):
        self.config['allow_method'] = 'bad value'
        self.assertEqual(self.resolver.resolve('x', 'allow_method'), frozenset(['GET', 'HEAD']))

    def test_unknown(self):
        self.assertIsNone(self.resolver.resolve('x', 'goober'))
        self.assertIsNone(self.resolver.resolve('x', 'path'))
        self.assertIsNone(self.resolver.resolve('nope', 'default_limit'))

    def test_undefined_intermediate(self):
        self.define('u/v', {'title': 'orphan'})
        self.assertEqual(self.resolver.resolve('u/v', 'default_limit'), 100)
        self.assertIsNone(self.resolver.resolve('u', 'default_limit'))

    def test_request(self):
        self.assertEqual(self.resolver.resolve(Request('x'), 'title'), 'X')
        self.assertEqual(self.resolver.resolve({'node_path': 'x'}, 'default_limit'), 100)

    def test_cache(self):
        self.assertFalse(self.resolver.started)
        self.assertEqual(self.resolver.resolve('x', 'allow_format', cache=False),
                         frozenset(['b', 'c']))
        self.assertFalse(self.resolver.started)
        self.assertFalse(self.resolver.cached('x', 'allow_format'))

        val = self.resolver.resolve('x', 'allow_format')
        self.assertTrue(self.resolver.started)
        self.assertTrue(self.resolver.cached('x', 'allow_format'))
        self.assertTrue(self.resolver.cached('/', 'allow_format'))
        self.assertIs(self.resolver.resolve('x', 'allow_format'), val)

        # later definitions do not alter computed values
        self.define('x/new', {'allow_format': ('z',)})
        self.assertIs(self.resolver.resolve('x', 'allow_format'), val)
        self.assertEqual(self.resolver.resolve('x/new', 'allow_format'), frozenset(['z']))

    def test_cache_undefined(self):
        self.assertIsNone(self.resolver.resolve('x/y', 'output'))
        self.assertTrue(self.resolver.cached('x/y', 'output'))


if __name__ == '__main__':
    test.main()
