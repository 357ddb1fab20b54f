"""
Unit tests for summary validation.
"""

from pagesift.summarizer.validation import validate_summary

ORIGINAL = "LeBron James scored 35 points as the Lakers defeated the Celtics 112-108."


class TestValidateSummary:
    def test_too_short(self, entity_extractor):
        result = validate_summary(ORIGINAL, "Tiny.", entity_extractor)
        assert not result.is_valid
        assert result.score == 0
        assert result.issues == ["Summary too short"]

    def test_good_summary(self, entity_extractor):
        result = validate_summary(ORIGINAL, "LeBron James led the Lakers past the Celtics.", entity_extractor)
        assert result.is_valid
        assert result.score == 100
        assert result.issues == []

    def test_lost_entities(self, entity_extractor):
        result = validate_summary(ORIGINAL, "A basketball team won a close game last night.", entity_extractor)
        assert result.score == 75
        assert result.is_valid
        assert result.issues == ["Lost important entities"]

    def test_repetition_and_entity_loss_reject(self, entity_extractor):
        result = validate_summary(ORIGINAL, "game game game game game.", entity_extractor)
        assert result.score == 55
        assert not result.is_valid
        assert "Contains repetitive content" in result.issues

    def test_no_complete_sentence(self, entity_extractor):
        result = validate_summary("plain words only here", "ok. no. yes. fine. sure.", entity_extractor)
        assert result.score == 70
        assert result.is_valid
        assert result.issues == ["No complete sentences"]

    def test_custom_min_score(self, entity_extractor):
        result = validate_summary("plain words only here", "ok. no. yes. fine. sure.", entity_extractor, min_score=80)
        assert not result.is_valid
