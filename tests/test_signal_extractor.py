"""Tests for keyword signal extraction."""

from data_models.post import TextSignals, VisualFeatures
from processing.signal_extractor import SignalExtractor, extract_signals, merge_signals
from processing.vocabularies import KeywordVocabulary


def vocabulary_with(**terms) -> KeywordVocabulary:
    """Vocabulary with only the given categories filled in."""
    categories = dict.fromkeys(
        ("style", "emotion", "motion", "quality", "subjects", "environment", "ai_tools"), ()
    )
    categories.update(terms)
    return KeywordVocabulary(**categories)


def test_extracts_categories_from_text():
    signals = extract_signals("A cinematic cyberpunk robot walking through a neon city at night")

    assert "cinematic" in signals.style
    assert "cyberpunk" in signals.style
    assert "robot" in signals.subjects
    assert "city" in signals.environment


def test_single_words_match_on_word_boundaries():
    # "art" must not match inside "party" or "smart"
    vocabulary = vocabulary_with(style=("art",))
    extractor = SignalExtractor(vocabulary)

    assert extractor.extract("smart party").style == []
    assert extractor.extract("Digital ART piece").style == ["art"]


def test_multi_word_terms_match_as_substrings():
    vocabulary = vocabulary_with(style=("oil painting",))
    extractor = SignalExtractor(vocabulary)

    assert extractor.extract("An OIL PAINTING of a cat").style == ["oil painting"]


def test_ai_tools_accept_space_or_hyphen_variants():
    vocabulary = vocabulary_with(ai_tools=("stable-diffusion",))
    extractor = SignalExtractor(vocabulary)

    assert extractor.extract("made with Stable Diffusion").ai_tools == ["stable-diffusion"]
    assert extractor.extract("made with stablediffusion").ai_tools == ["stable-diffusion"]
    assert extractor.extract("made with stable-diffusion").ai_tools == ["stable-diffusion"]


def test_hashtags_lowercased_and_deduplicated():
    signals = extract_signals("#AIArt is great #aiart #Midjourney")

    assert signals.hashtags == ["aiart", "midjourney"]


def test_empty_text_yields_empty_signals():
    signals = extract_signals("")

    assert signals == TextSignals()


def test_results_follow_vocabulary_order():
    vocabulary = vocabulary_with(style=("anime", "cinematic"))
    extractor = SignalExtractor(vocabulary)

    assert extractor.extract("cinematic anime").style == ["anime", "cinematic"]


def test_extract_from_fields_joins_all_text():
    extractor = SignalExtractor(vocabulary_with(subjects=("robot", "dragon")))

    signals = extractor.extract_from_fields(title="robot", caption="dragon", comments=["nothing"])

    assert signals.subjects == ["robot", "dragon"]


def test_merge_puts_visual_tags_first_without_duplicates():
    visual = VisualFeatures(style=["anime"], subjects=["cat"])
    text = TextSignals(style=["cinematic", "anime"], quality=["4k"])

    merged = merge_signals(visual, text)

    assert merged.style == ["anime", "cinematic"]
    assert merged.subjects == ["cat"]
    assert not hasattr(merged, "quality")


def test_signal_strength_is_capped():
    signals = TextSignals(ai_tools=["a", "b", "c", "d", "e", "f", "g"])

    assert SignalExtractor.signal_strength(signals) == 100.0
    assert SignalExtractor.signal_strength(TextSignals(style=["anime"])) == 10.0
