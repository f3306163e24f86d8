from unittest import TestCase

import pytest

from crategraph import (CrateGraph, CrateName, Dependency, Edition, CfgAtom, CfgOptions, Env, FileId,
                        InvalidCrateName, UnknownCrateError, CyclicDependenciesError,
                        DuplicateDependencyError, is_valid_crate_name)

from . import add_crate

def dep(crate_id, name):
    return Dependency(crate_id, CrateName.new(name))

def test_edition():
    assert Edition.parse('2015') is Edition.EDITION_2015
    assert str(Edition.EDITION_2018) == '2018'
    assert Edition.CURRENT is Edition.EDITION_2021
    assert list(Edition) == [Edition.EDITION_2015, Edition.EDITION_2018, Edition.EDITION_2021]
    with pytest.raises(ValueError):
        Edition.parse('2077')

def test_crate_name():
    assert str(CrateName.new('serde_json')) == 'serde_json'
    assert str(CrateName.normalize_dashes('serde-json')) == 'serde_json'
    for invalid in ['', 'serde-json', '1abc', 'foo bar', 'crate::x']:
        assert not is_valid_crate_name(invalid)
        with pytest.raises(InvalidCrateName):
            CrateName.new(invalid)
    assert is_valid_crate_name('_private2')
    assert str(InvalidCrateName('')) == "?: Invalid crate name ''"

def test_cfg_options():
    cfg = CfgOptions()
    cfg.insert_atom('test')
    cfg.insert_key_value('feature', 'std')
    cfg.insert_key_value('feature', 'alloc')
    cfg.insert_key_value('feature', 'std')

    assert cfg.get_cfg_keys() == ['test', 'feature']
    assert cfg.get_cfg_values('feature') == ['std', 'alloc']
    assert cfg.get_cfg_values('test') == []
    assert cfg.is_flag('test')
    assert not cfg.is_flag('feature')
    assert CfgAtom('feature', 'alloc') in cfg
    assert len(cfg) == 3
    assert str(CfgAtom('feature', 'std')) == 'feature="std"'

    other = CfgOptions([CfgAtom('feature', 'alloc'), CfgAtom('test'), CfgAtom('feature', 'std')])
    assert cfg == other
    other.insert_atom('debug_assertions')
    assert cfg != other

def test_env():
    env = Env([('A', '1'), ('B', '2'), ('A', '3')])
    assert env.get('A') == '3'
    assert env.get('C') is None
    assert list(env) == [('A', '3'), ('B', '2')]
    assert len(env) == 2
    assert env == Env([('B', '2'), ('A', '3')])

class TestCrateGraph(TestCase):

    def setUp(self):
        self.graph = CrateGraph()
        self.a = add_crate(self.graph, 1, 'a')
        self.b = add_crate(self.graph, 2, 'b')
        self.c = add_crate(self.graph, 3, 'c')

    def test_sequential_ids(self):
        self.assertEqual([self.a, self.b, self.c], [0, 1, 2])
        self.assertEqual(list(self.graph), [0, 1, 2])
        self.assertEqual(len(self.graph), 3)
        self.assertFalse(self.graph.is_empty())
        self.assertTrue(CrateGraph().is_empty())
        self.assertEqual(self.graph[self.b].display_name, 'b')
        self.assertEqual(self.graph[self.b].root_file_id, 2)
        self.assertEqual(self.graph[self.b].proc_macro, [])
        self.assertEqual(self.graph.crate_id_for_crate_root(FileId(3)), self.c)
        self.assertIsNone(self.graph.crate_id_for_crate_root(FileId(42)))

    def test_add_dep(self):
        self.graph.add_dep(self.a, dep(self.b, 'b'))
        self.graph.add_dep(self.a, dep(self.c, 'c'))
        # same target under another name is fine
        self.graph.add_dep(self.a, dep(self.c, 'c_again'))
        self.assertEqual([str(d.name) for d in self.graph[self.a].dependencies],
                         ['b', 'c', 'c_again'])

    def test_cycle(self):
        self.graph.add_dep(self.a, dep(self.b, 'b'))
        self.graph.add_dep(self.b, dep(self.c, 'c'))
        with self.assertRaises(CyclicDependenciesError) as ctx:
            self.graph.add_dep(self.c, dep(self.a, 'a'))
        self.assertEqual(tuple(ctx.exception.path), (2, 0, 1, 2))
        self.assertEqual(str(ctx.exception),
                         "crate #2: Cyclic dependency 'a' on crate #0: #2 -> #0 -> #1 -> #2")
        self.assertEqual(self.graph[self.c].dependencies, [])

    def test_self_dependency(self):
        with self.assertRaises(CyclicDependenciesError):
            self.graph.add_dep(self.a, dep(self.a, 'a'))
        self.assertEqual(self.graph[self.a].dependencies, [])

    def test_duplicate_name(self):
        self.graph.add_dep(self.a, dep(self.b, 'x'))
        with self.assertRaises(DuplicateDependencyError) as ctx:
            self.graph.add_dep(self.a, dep(self.c, 'x'))
        self.assertEqual(ctx.exception.existing, dep(self.b, 'x'))
        self.assertEqual(self.graph[self.a].dependencies, [dep(self.b, 'x')])

    def test_unknown_crate(self):
        with self.assertRaises(UnknownCrateError):
            self.graph.add_dep(self.a, dep(7, 'x'))
        with self.assertRaises(UnknownCrateError):
            self.graph.add_dep(7, dep(self.a, 'x'))
        with self.assertRaises(UnknownCrateError) as ctx:
            self.graph[7]
        self.assertEqual(str(ctx.exception), 'crate #7: Unknown crate, not in the graph')
        self.assertNotIn(7, self.graph)
        self.assertIn(self.a, self.graph)

    def test_topological_order(self):
        self.graph.add_dep(self.a, dep(self.c, 'c'))
        self.graph.add_dep(self.c, dep(self.b, 'b'))
        self.assertEqual(self.graph.crates_in_topological_order(), [self.b, self.c, self.a])

    def test_transitive_deps(self):
        self.graph.add_dep(self.a, dep(self.b, 'b'))
        self.graph.add_dep(self.b, dep(self.c, 'c'))
        self.assertEqual(self.graph.transitive_deps(self.a), {self.a, self.b, self.c})
        self.assertEqual(self.graph.transitive_deps(self.c), {self.c})
