import json

from crategraph import CrateGraph, CrateName, Dependency, dumps
from crategraph.__main__ import main

from . import add_crate

def write_doc(tmp_path, graph):
    path = tmp_path / 'graph.json'
    path.write_text(dumps(graph), encoding='utf-8')
    return path

def test_summary(tmp_path, capsys):
    graph = CrateGraph()
    a = add_crate(graph, 1, 'a')
    b = add_crate(graph, 2, 'b')
    graph.add_dep(a, Dependency(b, CrateName.new('b')))
    path = write_doc(tmp_path, graph)

    assert main([str(path), '--topo']) == 0
    assert capsys.readouterr().out.splitlines() == [
        f'{path}: 2 crates, 1 dependencies',
        ' - #1 b (file 2)',
        ' - #0 a (file 1)',
    ]

def test_skipped(tmp_path, capsys):
    path = tmp_path / 'graph.json'
    crate = {'root_file_id': 1, 'edition': '2018', 'display_name': None,
             'cfg_options': {'options': []}, 'potential_cfg_options': {'options': []},
             'env': {'env': []}, 'proc_macro': []}
    path.write_text(json.dumps({
        'crates': [[0, crate], [1, crate]],
        'deps': [{'from': 0, 'name': 'b', 'to': 1}, {'from': 1, 'name': 'a', 'to': 0}],
    }), encoding='utf-8')

    assert main([str(path), '--canonical']) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == f'{path}: 2 crates, 1 dependencies'
    assert lines[1] == f'{path}: 1 dependencies skipped'
    assert lines[2].startswith(" - 'a' from slot 1 to slot 0: crate #1: Cyclic dependency 'a'")
    assert json.loads(lines[3])['deps'] == [{'from': 0, 'name': 'b', 'to': 1}]

def test_malformed(tmp_path, capsys):
    path = tmp_path / 'graph.json'
    path.write_text('{"crates": []}', encoding='utf-8')
    missing = tmp_path / 'missing.json'
    latin1 = tmp_path / 'latin1.json'
    latin1.write_bytes(b'{"crates": [], "deps": [], "x": "\xff"}')
    good = tmp_path / 'good.json'
    good.write_text(dumps(CrateGraph()), encoding='utf-8')

    assert main([str(path), str(missing), str(latin1), str(good)]) == 1
    out, err = capsys.readouterr()
    err = err.splitlines()
    assert err[0] == f'{path}: deps: Invalid document, missing field'
    assert err[1].startswith(f'{missing}: ')
    assert err[2].startswith(f'{latin1}: ')
    assert 'utf-8' in err[2]
    # the remaining files are still processed
    assert out.splitlines() == [f'{good}: 0 crates, 0 dependencies']
