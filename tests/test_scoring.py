from dataclasses import FrozenInstanceError

import pytest

from skinsearch.config import RELEVANCE_WEIGHTS, RelevanceWeights
from skinsearch.scoring import SIGNALS, explain_score, score_name, signal_predicates


def test_weight_table_defaults():
    w = RELEVANCE_WEIGHTS
    assert (w.exact, w.prefix, w.whole_word, w.substring) == (1000, 500, 300, 100)
    assert (w.first_last_exact, w.first_last_loose, w.word_boundary_join) == (400, 250, 150)


def test_weight_table_is_immutable():
    with pytest.raises(FrozenInstanceError):
        RELEVANCE_WEIGHTS.exact = 1


def test_exact_multi_word_match_stacks_every_signal():
    assert explain_score("Fire Serpent", "fire serpent") == {
        "exact": 1000,
        "prefix": 500,
        "whole_word": 300,
        "substring": 100,
        "first_last_exact": 400,
        "first_last_loose": 250,
        "word_boundary_join": 150,
    }
    assert score_name("Fire Serpent", "fire serpent") == 2700


def test_single_word_whole_word_match():
    # whole word + substring + join (a single word joined to itself)
    assert score_name("M4A4 | Howl", "howl") == 550


def test_prefix_without_word_end():
    signals = explain_score("M4A4 | Howl", "m4")
    assert signals["prefix"] == 500
    assert signals["substring"] == 100
    assert signals["whole_word"] == 0
    assert signals["word_boundary_join"] == 0


def test_first_last_signals_need_two_distinct_words():
    signals = explain_score("AK-47 | Fire Serpent", "fire serpent")
    assert signals["first_last_exact"] == 0
    assert signals["first_last_loose"] == 250
    assert signals["word_boundary_join"] == 150
    assert signals["whole_word"] == 300
    assert sum(signals.values()) == 800

    same = explain_score("AK-47 | AK-47", "ak-47 ak-47")
    assert same["first_last_exact"] == 0
    assert same["first_last_loose"] == 0


def test_partial_word_scores_zero():
    assert score_name("P250 | Fire Elemental", "fire serpent") == 0
    assert score_name("SSG 08 | Sea Serpent", "fire serpent") == 0


def test_exact_match_dominates_partial_matches():
    query = "ak-47 | redline"
    exact = score_name("AK-47 | Redline", query)
    for other in ["AK-47 | Redline (Field-Tested)", "StatTrak AK-47 | Redline", "AK-47 | Redline Redline"]:
        assert exact > score_name(other, query)


def test_case_insensitive_names():
    assert score_name("AK-47 | REDLINE", "redline") == score_name("ak-47 | redline", "redline")


def test_punctuation_query_is_literal():
    signals = explain_score("AK-47 | Redline", "| red")
    assert signals["substring"] == 100
    assert signals["whole_word"] == 0
    assert signals["first_last_loose"] == 250
    assert score_name("M4A4 | Howl", "| red") == 0


def test_custom_weights():
    flat = RelevanceWeights(
        exact=1, prefix=1, whole_word=1, substring=1,
        first_last_exact=1, first_last_loose=1, word_boundary_join=1,
    )
    assert score_name("Fire Serpent", "fire serpent", flat) == 7


def test_empty_inputs_score_zero():
    assert score_name("", "redline") == 0
    assert score_name("AK-47 | Redline", "") == 0


def test_three_word_join_needs_middle_word_start():
    mid_word = explain_score("AK-47 | Fire Serpent", "ak ire serpent")
    assert mid_word["word_boundary_join"] == 0
    assert mid_word["first_last_exact"] == 400
    assert mid_word["first_last_loose"] == 250
    assert sum(mid_word.values()) == 650

    word_start = explain_score("AK-47 | Fire Serpent", "ak fire serpent")
    assert word_start["word_boundary_join"] == 150
    assert sum(word_start.values()) == 800


def test_three_word_join_needs_order():
    signals = explain_score("AK-47 | Fire Serpent", "ak serpent fire")
    assert signals["word_boundary_join"] == 0
    assert signals["first_last_exact"] == 0
    assert signals["first_last_loose"] == 250


def test_unclean_names_are_normalized_before_scoring():
    assert explain_score("  AK-47 |  Redline ", "ak-47 | redline")["exact"] == 1000
    assert score_name("AK-47\t|  Redline", "ak-47 | redline") == score_name("AK-47 | Redline", "ak-47 | redline")


def test_signal_predicates_carry_their_weights():
    preds = signal_predicates("fire serpent")
    assert [p.signal for p in preds] == list(SIGNALS)
    assert sum(p.weight() for p in preds) == 2700
    # single-word queries have no first/last signals
    assert [p.signal for p in signal_predicates("howl")] == [
        "exact", "prefix", "whole_word", "substring", "word_boundary_join",
    ]
    assert signal_predicates("") == []
