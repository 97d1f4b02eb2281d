"""Unit tests for the map eligibility filter."""

import pytest
from structlog.testing import capture_logs

from beatsaver_cacher.models.enums import MapState
from beatsaver_cacher.transformers.eligibility import should_cache_map


class TestShouldCacheMap:
    """Each rejection rule is checked in isolation against an otherwise eligible map."""

    def test_published_human_map_is_cached(self, make_map):
        assert should_cache_map(make_map()) is True

    def test_never_published_is_rejected(self, make_map):
        assert should_cache_map(make_map(lastPublishedAt=None)) is False

    @pytest.mark.parametrize("state", ["Uploaded", "Testplay", "Feedback", "Scheduled"])
    def test_unpublished_first_version_is_rejected(self, make_map, state):
        assert should_cache_map(make_map(version_state=state)) is False

    @pytest.mark.parametrize("declared", ["Admin", "Uploader", "SageScore"])
    def test_ai_declared_is_rejected(self, make_map, declared):
        assert should_cache_map(make_map(declaredAi=declared)) is False

    def test_automapped_is_rejected(self, make_map):
        assert should_cache_map(make_map(automapper=True)) is False

    def test_map_without_versions_is_rejected(self, make_map):
        assert should_cache_map(make_map(versions=[])) is False

    def test_only_first_version_state_matters(self, make_map):
        map_detail = make_map()
        published = map_detail.versions[0]
        testplay = published.model_copy(update={"state": MapState.TESTPLAY})

        assert should_cache_map(map_detail.model_copy(update={"versions": [testplay, published]})) is False
        assert should_cache_map(map_detail.model_copy(update={"versions": [published, testplay]})) is True


class TestRejectionLogging:
    """The first failing rule decides and is the only reason logged."""

    def test_first_failing_rule_wins(self, make_map):
        map_detail = make_map(lastPublishedAt=None, declaredAi="Admin", automapper=True)

        with capture_logs() as logs:
            assert should_cache_map(map_detail) is False

        assert len(logs) == 1
        assert logs[0]["event"] == "Map has never been published, ignoring"
        assert logs[0]["log_level"] == "info"
        assert logs[0]["map_id"] == map_detail.id

    def test_ai_reason_includes_declaration(self, make_map):
        with capture_logs() as logs:
            should_cache_map(make_map(declaredAi="Uploader", automapper=True))

        assert [log["event"] for log in logs] == ["Map has been declared as AI-generated, ignoring"]
        assert logs[0]["declared_ai"] == "Uploader"

    def test_eligible_map_logs_nothing(self, make_map):
        with capture_logs() as logs:
            should_cache_map(make_map())

        assert logs == []
