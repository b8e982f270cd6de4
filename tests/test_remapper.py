# tests/test_remapper.py
from ncmerge.core.remapper import (
    extract_tools,
    find_conflicts,
    generate_mapping_table,
    has_conflicts,
    remap_multiple_files,
    remap_single_file,
)
from ncmerge.models import NCFile, ToolMapping


def test_extract_tools_keeps_raw_digits():
    assert extract_tools("T1 M06\nt01\nG01 X1 T12") == {"1", "01", "12"}


def test_extract_tools_empty():
    assert extract_tools("G01 X1\nM30") == set()


def test_same_tool_in_two_files_gets_two_numbers():
    files = [NCFile("a.nc", "T1 G01 X0"), NCFile("b.nc", "T1 G01 X0")]
    result = remap_multiple_files(files)

    assert result.all_mappings == [
        ToolMapping("T1", "T1", 0),
        ToolMapping("T1", "T2", 1),
    ]
    assert result.files[0].content == "T1 G01 X0"
    assert result.files[1].content == "T2 G01 X0"


def test_assignment_is_ascending_within_file_and_global_across_files():
    files = [NCFile("a.nc", "T3\nT1"), NCFile("b.nc", "T2\nT1")]
    result = remap_multiple_files(files)

    assert [(m.original, m.remapped, m.file_index) for m in result.all_mappings] == [
        ("T1", "T1", 0),
        ("T3", "T2", 0),
        ("T1", "T3", 1),
        ("T2", "T4", 1),
    ]
    assert result.files[0].content == "T2\nT1"
    assert result.files[1].content == "T4\nT3"


def test_per_file_mappings_follow_rewrite_order():
    files = [NCFile("a.nc", "T1\nT3")]
    result = remap_multiple_files(files)
    assert [m.original for m in result.files[0].mappings] == ["T3", "T1"]


def test_padding_matches_original_width():
    files = [NCFile("a.nc", "T05 M06"), NCFile("b.nc", "T05 M06")]
    result = remap_multiple_files(files)
    assert [m.remapped for m in result.all_mappings] == ["T01", "T02"]
    assert result.files[1].content == "T02 M06"


def test_padding_overflow_gives_longer_token():
    files = [NCFile(f"{i}.nc", "T9 M06") for i in range(12)]
    result = remap_multiple_files(files)
    last = result.all_mappings[-1]
    assert last.original == "T9"
    assert last.remapped == "T12"
    assert len(last.remapped) > len(last.original)


def test_start_number():
    result = remap_multiple_files([NCFile("a.nc", "T1\nT2")], start_number=20)
    assert [m.remapped for m in result.all_mappings] == ["T20", "T21"]
    assert result.files[0].content == "T20\nT21"


def test_remapped_numbers_are_unique_and_cover_every_pair():
    files = [
        NCFile("a.nc", "T1 M06\nT2 M06\nT10 M06"),
        NCFile("b.nc", "T2 M06\nT10 M06"),
        NCFile("c.nc", "T1 M06"),
    ]
    result = remap_multiple_files(files)

    pairs = {(m.file_index, m.original) for m in result.all_mappings}
    assert len(pairs) == len(result.all_mappings) == 6
    remapped = [m.remapped for m in result.all_mappings]
    assert len(set(remapped)) == len(remapped)

    for file_index, remap in enumerate(result.files):
        expected = {m.remapped[1:] for m in result.all_mappings if m.file_index == file_index}
        assert extract_tools(remap.content) == expected


def test_rewrite_is_case_insensitive_and_word_bounded():
    files = [NCFile("a.nc", "T4"), NCFile("b.nc", "t4 m06\nT40 M06")]
    result = remap_multiple_files(files)
    # file b: T4 -> T2, T40 -> T03
    assert result.files[1].content == "T2 m06\nT03 M06"


def test_inputs_are_not_mutated():
    files = [NCFile("a.nc", "T1"), NCFile("b.nc", "T1")]
    remap_multiple_files(files)
    assert files[1].content == "T1"


def test_remap_single_file():
    result = remap_single_file("T1 M06\nT10 M06", {"1": "5", "10": "6"})
    assert result.content == "T5 M06\nT6 M06"
    assert [m.original for m in result.mappings] == ["T10", "T1"]
    assert all(m.file_index == 0 for m in result.mappings)


def test_conflicts():
    a = NCFile("a.nc", "T1\nT2")
    b = NCFile("b.nc", "T2\nT3")
    c = NCFile("c.nc", "T01")
    assert has_conflicts([a, b]) is True
    assert find_conflicts([a, b]) == ["T2"]
    # Raw strings: T1 and T01 are different tools here
    assert has_conflicts([a, c]) is False
    assert has_conflicts([a]) is False


def test_mapping_table():
    assert generate_mapping_table([]) == "No tool remapping required."
    table = generate_mapping_table([ToolMapping("T1", "T2", 1)])
    assert "File | Original | New Tool" in table
    assert "  2  | T1       | T2" in table


def test_descending_rewrite_chains_when_tools_move_down():
    result = remap_multiple_files([NCFile("a.nc", "T2 M06\nT5 M06")])

    assert [(m.original, m.remapped) for m in result.all_mappings] == [("T2", "T1"), ("T5", "T2")]
    assert result.files[0].content == "T1 M06\nT1 M06"
    assert extract_tools(result.files[0].content) == {"1"}


def test_non_ascii_digits_are_not_tool_numbers():
    content = "T١ M06\nT1 M06"
    assert extract_tools(content) == {"1"}

    result = remap_multiple_files([NCFile("a.nc", content)], start_number=7)
    assert result.files[0].content == "T١ M06\nT7 M06"
