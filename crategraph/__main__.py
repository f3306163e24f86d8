import sys
import argparse
from pathlib import Path
from typing import List, Optional

from . import Codec
from ._lib import serial
from ._lib.exceptions import DocumentFormatError

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Playground frontend for the library: '
                                     'decode crate graph documents and report what was dropped.',
                                     prog='python3 -m crategraph',
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)

    parser.add_argument('FILE', help='path of JSON crate graph documents', nargs='+')
    parser.add_argument('-v', '--verbose', dest='verbosity', action='count', help='increase verbosity', )
    parser.add_argument('--topo', action='store_true', help='list crates in topological order')
    parser.add_argument('--canonical', action='store_true', help='print the re-encoded document')
    parser.add_argument('--indent', type=int, default=None, help='indentation of the printed document')

    args = parser.parse_args(argv)
    codec = Codec(verbosity=args.verbosity or 0,
                  outstream=sys.stdout,
                  indent=args.indent)

    status = 0
    for filename in args.FILE:
        try:
            doc = serial.loads(Path(filename).read_text(encoding='utf-8'))
        except (OSError, UnicodeDecodeError, DocumentFormatError) as e:
            print(f'{filename}: {e}', file=sys.stderr)
            status = 1
            continue

        result = codec.decode_with_report(doc)
        graph = result.graph
        ndeps = sum(len(data.dependencies) for _, data in graph.items())
        print(f'{filename}: {len(graph)} crates, {ndeps} dependencies')

        if result.skipped:
            print(f'{filename}: {len(result.skipped)} dependencies skipped')
            for skipped in result.skipped:
                dep = skipped.dep
                print(f' - {dep.name!r} from slot {dep.from_} to slot {dep.to}: {skipped.error}')

        if args.topo:
            for crate_id in graph.crates_in_topological_order():
                data = graph[crate_id]
                print(f' - #{crate_id} {data.display_name or "<unnamed>"} (file {data.root_file_id})')

        if args.canonical:
            print(codec.dumps(graph))

    return status

if __name__ == "__main__":
    sys.exit(main())
