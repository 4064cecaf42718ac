import json
import logging

import pytest

from ase_json.ase_parser import DecodeOptions, parse_ase, parse_ase_bytes
from ase_json.errors import (
    FileReadError,
    InvalidSignatureError,
    MalformedBlockError,
    UnknownBlockTypeError,
    UnsupportedColorModelError,
)
from ase_json.storage import dump_tree

from ase_samples import (
    COLOR_ENTRY,
    ase_file,
    block,
    color,
    color_payload,
    group_end,
    group_start,
    pack_u16,
)


def test_parse_minimal_ase_rgb() -> None:
    data = ase_file(color("Red", b"RGB ", [1.0, 0.0, 0.0]))

    tree = parse_ase_bytes(data)
    assert tree.header.version == "1.0"
    assert tree.header.block_count == 1
    assert json.loads(dump_tree(tree)) == {"Red": {"model": "RGB", "type": 2, "rgb": [255, 0, 0]}}


def test_decode_is_deterministic() -> None:
    data = ase_file(
        group_start("Warm"),
        color("Orange", b"CMYK", [0.0, 0.5, 1.0, 0.0], color_type=0),
        group_end(),
        color("Mid", b"LAB ", [50.0, 0.0, 0.0]),
    )
    assert dump_tree(parse_ase_bytes(data)) == dump_tree(parse_ase_bytes(data))


@pytest.mark.parametrize("data", [b"", b"AS", b"ASEX" + bytes(8), b"8BCB" + bytes(8)])
def test_invalid_signature(data: bytes) -> None:
    with pytest.raises(InvalidSignatureError):
        parse_ase_bytes(data)


def test_truncated_header_is_malformed() -> None:
    with pytest.raises(MalformedBlockError, match="header"):
        parse_ase_bytes(b"ASEF\x00\x01\x00")


def test_header_only_file_is_empty_tree() -> None:
    tree = parse_ase_bytes(ase_file())
    assert tree.to_dict() == {}


def test_group_assignment() -> None:
    data = ase_file(
        color("White", b"RGB ", [1.0, 1.0, 1.0]),
        group_start("Blues"),
        color("Navy", b"RGB ", [0.0, 0.0, 0.5]),
        group_end(),
        color("Black", b"RGB ", [0.0, 0.0, 0.0]),
    )
    swatches = parse_ase_bytes(data).to_dict()
    assert swatches["Blues"]["Navy"]["rgb"] == [0, 0, 128]
    assert swatches["White"]["rgb"] == [255, 255, 255]
    assert swatches["Black"]["rgb"] == [0, 0, 0]
    assert list(swatches) == ["White", "Blues", "Black"]


def test_flat_groups_second_start_overwrites_context() -> None:
    data = ase_file(
        group_start("Blues"),
        group_start("Greens"),
        color("Mint", b"RGB ", [0.6, 1.0, 0.8]),
        group_end(),
        color("Loose", b"RGB ", [0.0, 0.0, 0.0]),
    )
    swatches = parse_ase_bytes(data, options=DecodeOptions(nested_groups=False)).to_dict()
    assert set(swatches) == {"Greens", "Loose"}
    assert "Mint" in swatches["Greens"]


def test_nested_groups_follow_stack() -> None:
    data = ase_file(
        group_start("Blues"),
        group_start("Greens"),
        color("Mint", b"RGB ", [0.6, 1.0, 0.8]),
        group_end(),
        color("Sky", b"RGB ", [0.5, 0.8, 1.0]),
        group_end(),
        color("Loose", b"RGB ", [0.0, 0.0, 0.0]),
    )
    swatches = parse_ase_bytes(data).to_dict()
    assert set(swatches) == {"Blues", "Loose"}
    assert set(swatches["Blues"]) == {"Greens", "Sky"}
    assert "Mint" in swatches["Blues"]["Greens"]


def test_group_end_without_open_group_is_ignored() -> None:
    data = ase_file(group_end(), color("Red", b"RGB ", [1.0, 0.0, 0.0]))
    assert list(parse_ase_bytes(data).to_dict()) == ["Red"]


def test_empty_group_produces_no_key() -> None:
    data = ase_file(group_start("Empty"), group_end())
    assert parse_ase_bytes(data).to_dict() == {}


def test_reopened_group_merges() -> None:
    data = ase_file(
        group_start("Reds"),
        color("Brick", b"RGB ", [0.6, 0.2, 0.1]),
        group_end(),
        group_start("Reds"),
        color("Rose", b"RGB ", [1.0, 0.0, 0.5]),
        group_end(),
    )
    assert set(parse_ase_bytes(data).to_dict()["Reds"]) == {"Brick", "Rose"}


def test_duplicate_color_name_last_write_wins() -> None:
    data = ase_file(
        color("Accent", b"RGB ", [1.0, 0.0, 0.0]),
        color("Accent", b"RGB ", [0.0, 1.0, 0.0], color_type=1),
    )
    assert parse_ase_bytes(data).to_dict() == {"Accent": {"model": "RGB", "type": 1, "rgb": [0, 255, 0]}}


def test_cmyk_and_lab_entries() -> None:
    data = ase_file(
        color("Process", b"CMYK", [0.2, 0.4, 0.6, 0.1], color_type=1),
        color("Lab", b"LAB ", [50.0, -20.5, 10.25], color_type=0),
    )
    swatches = parse_ase_bytes(data).to_dict()
    assert swatches["Process"]["model"] == "CMYK"
    assert swatches["Process"]["type"] == 1
    assert swatches["Process"]["rgb"] == [184, 138, 92]
    assert swatches["Process"]["cmyk"] == pytest.approx([0.2, 0.4, 0.6, 0.1])
    assert swatches["Lab"] == {"model": "LAB", "type": 0, "lab": [50.0, -20.5, 10.25]}


def test_gray_requires_option() -> None:
    data = ase_file(color("Mid Gray", b"Gray", [0.5]))
    with pytest.raises(UnsupportedColorModelError):
        parse_ase_bytes(data)

    swatches = parse_ase_bytes(data, options=DecodeOptions(decode_gray=True)).to_dict()
    assert swatches == {"Mid Gray": {"model": "Gray", "type": 2, "gray": [0.5]}}


def test_unknown_block_type() -> None:
    data = ase_file(block(0x0002, b"\x00\x00"))
    with pytest.raises(UnknownBlockTypeError, match="0x0002"):
        parse_ase_bytes(data)


def test_truncated_buffer_is_malformed_at_every_cut() -> None:
    blocks = [
        group_start("Blues"),
        color("Navy", b"RGB ", [0.0, 0.0, 0.5]),
        group_end(),
    ]
    data = ase_file(*blocks)
    cuts: list[int] = []
    start = 12
    for item in blocks:
        cuts.extend(range(start + 1, start + len(item)))
        start += len(item)

    for cut in cuts:
        with pytest.raises(MalformedBlockError):
            parse_ase_bytes(data[:cut])


def test_strict_lengths_rejects_mismatch() -> None:
    payload = color_payload("Red", b"RGB ", [1.0, 0.0, 0.0])
    data = ase_file(block(COLOR_ENTRY, payload, declared_length=len(payload) + 4))

    assert "Red" in parse_ase_bytes(data).to_dict()
    with pytest.raises(MalformedBlockError, match="declares"):
        parse_ase_bytes(data, options=DecodeOptions(strict_lengths=True))


def test_strict_lengths_accepts_consistent_file() -> None:
    data = ase_file(group_start("Blues"), color("Navy", b"RGB ", [0.0, 0.0, 0.5]), group_end())
    tree = parse_ase_bytes(data, options=DecodeOptions(strict_lengths=True))
    assert tree.color_count() == 1


def test_block_count_mismatch_only_warns(caplog) -> None:
    data = ase_file(color("Red", b"RGB ", [1.0, 0.0, 0.0]), block_count=5)
    with caplog.at_level(logging.WARNING, logger="ase_json.ase_parser"):
        tree = parse_ase_bytes(data)
    assert tree.color_count() == 1
    assert "declares 5 blocks but 1 were read" in caplog.text


def test_utf16_names_and_empty_name() -> None:
    data = ase_file(
        group_start("Grüne Töne"),
        color("Салатовый", b"RGB ", [0.5, 1.0, 0.0]),
        group_end(),
        block(COLOR_ENTRY, pack_u16(0) + color_payload("", b"RGB ", [0.0, 0.0, 0.0])[4:]),
    )
    swatches = parse_ase_bytes(data).to_dict()
    assert swatches["Grüne Töne"]["Салатовый"]["rgb"] == [128, 255, 0]
    assert swatches[""]["rgb"] == [0, 0, 0]


def test_parse_ase_reads_from_disk(tmp_path) -> None:
    path = tmp_path / "sample.ase"
    path.write_bytes(ase_file(color("Red", b"RGB ", [1.0, 0.0, 0.0])))
    assert parse_ase(path).color_count() == 1

    with pytest.raises(FileReadError):
        parse_ase(tmp_path / "missing.ase")


def _strict_json(text: str):
    def reject(constant: str):
        raise ValueError(constant)

    return json.loads(text, parse_constant=reject)


def test_non_finite_floats_are_passed_through_as_null() -> None:
    inf = float("inf")
    nan = float("nan")
    data = ase_file(
        color("Inf", b"CMYK", [inf, 0.0, 0.0, 0.0]),
        color("NaN", b"RGB ", [nan, 0.0, 0.0]),
        color("Lab", b"LAB ", [nan, 0.0, -inf]),
    )
    swatches = _strict_json(dump_tree(parse_ase_bytes(data)))
    assert swatches["Inf"] == {"model": "CMYK", "type": 2, "cmyk": [None, 0.0, 0.0, 0.0], "rgb": [None, 255, 255]}
    assert swatches["NaN"] == {"model": "RGB", "type": 2, "rgb": [None, 0, 0]}
    assert swatches["Lab"] == {"model": "LAB", "type": 2, "lab": [None, 0.0, None]}
