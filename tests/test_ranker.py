"""
Tests for lexical relevance scoring and ranking.
"""

from __future__ import annotations

from src.rag import BilingualPassage, TextPassage, dedup_by_reference, rank, score


def _p(ref: str, content: str) -> TextPassage:
    return TextPassage(reference=ref, book="", section="", language="en", content=content)


def test_exact_term_and_word_both_count():
    a = _p("A.1", "the laws of damages are discussed here")
    b = _p("B.1", "unrelated text about holidays")
    # 5 (term) + 1 (word "damages") + 1 (short content)
    assert score(a, ["damages"]) == 7
    # short content bonus only
    assert score(b, ["damages"]) == 1
    ranked = rank([b, a], ["damages"])
    assert [sc.reference for sc in ranked] == ["A.1", "B.1"]


def test_multiword_term_counts_each_long_word():
    p = _p("X.1", "these are the laws of damages")
    # 5 (term) + "laws" + "damages" ("of" too short) + short bonus
    assert score(p, ["laws of damages"]) == 8


def test_case_insensitive_matching():
    p = _p("X.1", "The Laws Of DAMAGES")
    assert score(p, ["laws of damages"]) == 8


def test_long_content_gets_no_length_bonus():
    p = _p("X.1", "z" * 1000)
    assert score(p, ["damages"]) == 0


def test_reference_bonus():
    p = _p("Bava Kamma.2a", "")
    # short bonus + reference contains "bava" / "kamma"
    assert score(p, ["bava kamma"]) == 4


def test_reference_bonus_ignores_short_words():
    p = _p("Yoma.2a", "")
    assert score(p, ["2a"]) == 1


def test_bilingual_passage_scored_on_combined_content():
    p = BilingualPassage(
        reference="Berakhot.2a",
        book="Berakhot",
        section="2a",
        content_en="times of prayer",
        content_he="תפילה",
    )
    assert score(p, ["prayer"]) == 7
    assert score(p, ["תפילה"]) == 7


def test_score_is_deterministic():
    cands = [_p("A.1", "prayer and blessing"), _p("B.1", "blessing"), _p("C.1", "nothing")]
    terms = ["prayer", "blessing over bread"]
    first = [(sc.reference, sc.relevance_score) for sc in rank(cands, terms)]
    second = [(sc.reference, sc.relevance_score) for sc in rank(cands, terms)]
    assert first == second


def test_all_terms_beats_no_terms():
    terms = ["shema", "evening prayer", "recitation"]
    with_terms = _p("A.1", "shema evening prayer recitation")
    without = _p("A.1", "xxxxx xxxxxxx xxxxxx xxxxxxxxxx")
    assert score(with_terms, terms) > score(without, terms)


def test_ties_keep_input_order():
    cands = [_p("C.1", "same"), _p("A.1", "same"), _p("B.1", "same")]
    ranked = rank(cands, ["other"])
    assert [sc.reference for sc in ranked] == ["C.1", "A.1", "B.1"]


def test_rank_dedups_and_truncates():
    cands = [
        _p("A.1", "damages"),
        _p("A.1", "damages damages"),
        _p("B.1", "damages"),
        _p("C.1", "nothing"),
    ]
    ranked = rank(cands, ["damages"], limit=2)
    assert [sc.reference for sc in ranked] == ["A.1", "B.1"]
    assert ranked[0].passage.content == "damages"


def test_dedup_is_idempotent():
    items = [_p("A.1", "x"), _p("B.1", "y"), _p("A.1", "z"), _p("C.1", "w"), _p("B.1", "v")]
    once = dedup_by_reference(items)
    assert [p.reference for p in once] == ["A.1", "B.1", "C.1"]
    assert dedup_by_reference(once) == once


def test_repeated_terms_score_again():
    p = _p("X.1", "evening prayer")
    # each copy: 5 (term) + 1 (word), plus one short bonus
    assert score(p, ["prayer", "prayer"]) == 13
