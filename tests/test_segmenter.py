import pytest

from storyslides.common import ConfigurationError
from storyslides.segmentation import (
    SplitConfig,
    StorySegmenter,
    adjust_slide_count,
    first_sentence,
    segment_story,
    split_by_character_budget,
    split_on_punctuation,
    split_sentences,
)


def _letters(text: str) -> str:
    return "".join(text.split())


class TestSentenceSplitting:
    def test_keeps_punctuation_runs_with_their_sentence(self):
        assert split_sentences("Wait... what?! Yes") == ["Wait...", "what?!", "Yes"]

    def test_punctuation_without_whitespace_does_not_split(self):
        assert split_sentences("Version 1.5 is out. Enjoy") == ["Version 1.5 is out.", "Enjoy"]

    def test_first_sentence(self):
        assert first_sentence("  Hi there. Next one") == "Hi there."
        assert first_sentence("   ") == ""


class TestClauseSplitting:
    def test_regroups_at_commas_within_budget(self):
        sentence = "one two three four, five six seven eight, nine ten"

        assert split_on_punctuation(sentence, 30) == [
            "one two three four,",
            "five six seven eight, nine ten",
        ]

    def test_short_sentence_is_untouched(self):
        assert split_on_punctuation("short, sweet", 125) == ["short, sweet"]

    def test_hyphenated_words_are_not_clause_breaks(self):
        sentence = "the well-known road went on and on, far away"

        assert split_on_punctuation(sentence, 20) == [
            "the well-known road went on and on,",
            "far away",
        ]

    def test_unpunctuated_sentence_is_returned_whole(self):
        sentence = "word " * 40

        assert split_on_punctuation(sentence.strip(), 20) == [sentence.strip()]


class TestCharacterBudget:
    def test_packs_words_up_to_the_budget(self):
        assert split_by_character_budget("aaa bbb ccc", 7) == ["aaa bbb", "ccc"]

    def test_never_breaks_a_word(self):
        assert split_by_character_budget("supercalifragilistic ok", 5) == [
            "supercalifragilistic",
            "ok",
        ]


class TestSlideCountAdjustment:
    def test_merges_consecutive_batches_when_there_are_too_many(self):
        config = SplitConfig(min_slides=1, max_slides=2)

        assert adjust_slide_count(["a", "b", "c", "d", "e"], config) == ["a b c", "d e"]

    def test_expands_long_segments_when_there_are_too_few(self):
        segment = " ".join(["abcd"] * 60)

        result = adjust_slide_count([segment])

        assert 8 <= len(result) <= 20
        assert _letters(" ".join(result)) == _letters(segment)

    def test_bisects_longest_segment_until_threshold(self):
        segment = " ".join(["abcd"] * 18)

        result = adjust_slide_count([segment, segment])

        assert len(result) == 4
        assert all(len(item) <= 50 for item in result)
        assert _letters(" ".join(result)) == _letters(segment + segment)

    def test_single_unbreakable_word_stops_bisection(self):
        word = "x" * 80

        assert adjust_slide_count([word]) == [word]

    def test_unbreakable_word_does_not_block_other_segments(self):
        word = "x" * 80
        splittable = " ".join(["abcd"] * 14)

        result = adjust_slide_count([word, splittable])

        assert result[0] == word
        assert len(result) == 3
        assert all(len(item) <= 50 for item in result[1:])
        assert _letters(" ".join(result)) == _letters(word + splittable)

    def test_in_range_count_is_unchanged(self):
        segments = [f"segment {index}" for index in range(10)]

        assert adjust_slide_count(segments) == segments


class TestSegmentStory:
    def test_short_sentences_below_bisect_threshold_stay_as_they_are(self):
        assert segment_story("Hello world. This is a test! Short.") == [
            "Hello world.",
            "This is a test!",
            "Short.",
        ]

    def test_long_unpunctuated_sentence_is_packed_by_characters(self):
        story = "word " * 400

        segments = segment_story(story)

        assert len(segments) == 16
        assert all(len(segment) <= 125 for segment in segments)
        assert _letters(" ".join(segments)) == _letters(story)

    def test_many_short_sentences_are_merged_in_pairs(self):
        sentences = [f"Sn{index:02d}." for index in range(40)]

        segments = segment_story(" ".join(sentences))

        assert len(segments) == 20
        for index, segment in enumerate(segments):
            assert segment == f"{sentences[2 * index]} {sentences[2 * index + 1]}"

    @pytest.mark.parametrize("story", ["", "   ", "\n\t\n"])
    def test_blank_story_has_no_segments(self, story):
        assert segment_story(story) == []

    def test_is_deterministic(self):
        story = (
            "The lighthouse keeper woke before dawn, as he always did; the sea was calm. "
            "He climbed the stairs - all one hundred and twelve of them - and lit the lamp. "
            "Far away a ship answered with its horn! Nobody else was awake to hear it."
        )

        assert segment_story(story) == segment_story(story)

    def test_segments_respect_budget_and_keep_every_character(self):
        story = " ".join(
            f"Sentence number {index} talks about the harbour, the gulls and the tide, "
            f"and then it keeps going for a little while longer."
            for index in range(6)
        )

        segments = StorySegmenter(SplitConfig(max_chars_per_slide=60)).split(story)

        assert 8 <= len(segments) <= 20
        assert all(len(segment) <= 60 for segment in segments)
        assert _letters("".join(segments)) == _letters(story)


class TestSplitConfig:
    def test_rejects_inverted_range(self):
        with pytest.raises(ConfigurationError):
            SplitConfig(min_slides=10, max_slides=5)

    def test_rejects_empty_budget(self):
        with pytest.raises(ConfigurationError):
            SplitConfig(max_chars_per_slide=0)

    def test_from_mapping_accepts_camel_case(self):
        config = SplitConfig.from_mapping({"maxCharsPerSlide": "80", "minSlides": 2})

        assert config.max_chars_per_slide == 80
        assert config.min_slides == 2
        assert config.max_slides == 20

    def test_from_mapping_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError):
            SplitConfig.from_mapping({"slides": 4})
