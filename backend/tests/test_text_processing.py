import pytest
from utils.text_processing import (
    CardPair,
    clean_option_lines,
    format_pairs,
    parse_completion_output,
    parse_pairs,
    split_line
)

def test_parse_pairs_basic():
    """Test parsing one pair per line."""
    text = "Mitochondria: powerhouse of the cell\nDNA: genetic code"
    assert parse_pairs(text) == [
        CardPair("Mitochondria", "powerhouse of the cell"),
        CardPair("DNA", "genetic code")
    ]

def test_split_on_first_delimiter_only():
    """Test that later delimiters stay in the description."""
    pair = split_line("Ratio: 3:2 in most cases")
    assert pair == CardPair("Ratio", "3:2 in most cases")

def test_parse_pairs_drops_blank_and_invalid_lines():
    """Test that lines without a usable pair are skipped."""
    text = "\n".join([
        "Term A: Description A",
        "",
        "   ",
        "no delimiter here",
        ": missing term",
        "missing description:   ",
        "Term B : Description B  "
    ])
    assert parse_pairs(text) == [
        CardPair("Term A", "Description A"),
        CardPair("Term B", "Description B")
    ]

def test_parse_pairs_custom_delimiter():
    """Test parsing with a multi-character delimiter."""
    text = "cat - a small feline\ndog - a loyal friend\nbird: ignored"
    pairs = parse_pairs(text, " - ")
    assert [pair.term for pair in pairs] == ["cat", "dog"]

def test_parse_pairs_empty_text():
    assert parse_pairs("") == []

def test_empty_delimiter_is_rejected():
    with pytest.raises(ValueError):
        split_line("a:b", "")

def test_format_then_parse_keeps_pairs():
    """Test that formatted pairs parse back unchanged."""
    pairs = [CardPair("Osmosis", "movement of water: across a membrane"), CardPair("pH", "acidity")]
    assert parse_pairs(format_pairs(pairs)) == pairs

def test_parse_completion_output_strips_list_markers():
    """Test that numbering and bullets added by a model are removed."""
    output = "1. Atom: smallest unit\n2) Ion: charged atom\n- Bond: link between atoms\n* Mole: amount"
    assert [pair.term for pair in parse_completion_output(output)] == ["Atom", "Ion", "Bond", "Mole"]

def test_clean_option_lines():
    output = "1. Paris\n\n2) Berlin\n- Madrid  \n   \nRome"
    assert clean_option_lines(output) == ["Paris", "Berlin", "Madrid", "Rome"]

def test_card_pair_to_dict():
    assert CardPair("Term", "Description").to_dict() == {"term": "Term", "description": "Description"}
