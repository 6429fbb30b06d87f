from svelte_ast_bridge.parser.lines import LinesAndColumns


def test_offsets_map_to_line_and_column() -> None:
  lines = LinesAndColumns("ab\ncd\n")
  assert lines.get_loc_from_index(0).to_estree() == {"line": 1, "column": 0}
  assert lines.get_loc_from_index(2).to_estree() == {"line": 1, "column": 2}
  assert lines.get_loc_from_index(3).to_estree() == {"line": 2, "column": 0}
  assert lines.get_loc_from_index(4).to_estree() == {"line": 2, "column": 1}
  assert lines.get_loc_from_index(6).to_estree() == {"line": 3, "column": 0}


def test_index_from_loc_is_inverse() -> None:
  code = "x\n\nyz"
  lines = LinesAndColumns(code)
  for index in range(len(code) + 1):
    pos = lines.get_loc_from_index(index)
    assert lines.get_index_from_loc(pos.line, pos.column) == index


def test_empty_source() -> None:
  assert LinesAndColumns("").get_loc_from_index(0).to_estree() == {"line": 1, "column": 0}
