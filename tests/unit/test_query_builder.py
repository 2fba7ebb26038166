"""Tests for search payload and start-params builders."""

import pytest

from indexer_console.core.errors import ValidationFailure
from indexer_console.models.search import SearchFilterState
from indexer_console.utils.query_builder import (
    build_search_payload,
    build_start_params,
    format_date_for_api,
    format_date_for_input,
    format_since,
    parse_tag_ids,
)


class TestBuildSearchPayload:
    def test_defaults_only_send_paging_and_vencidos(self) -> None:
        payload = build_search_payload(SearchFilterState())
        assert payload == {"page": 1, "page_size": 15, "incluirVencidos": "0"}

    @pytest.mark.parametrize("field", ["search", "objeto", "agencia", "pais", "rubro"])
    @pytest.mark.parametrize("value", ["", "   ", "all"])
    def test_empty_and_sentinel_values_are_omitted(self, field: str, value: str) -> None:
        payload = build_search_payload(SearchFilterState(**{field: value}))
        assert field not in payload

    def test_none_solo_vigentes_omitted(self) -> None:
        assert "soloVigentes" not in build_search_payload(SearchFilterState(soloVigentes=None))

    def test_strings_are_trimmed(self) -> None:
        payload = build_search_payload(SearchFilterState(search="  obra vial ", agencia=" MOP "))
        assert payload["search"] == "obra vial"
        assert payload["agencia"] == "MOP"

    def test_dates_serialised_day_first(self) -> None:
        payload = build_search_payload(
            SearchFilterState(apertura_fr="2024-03-01", apertura_to="2024-03-31")
        )
        assert payload["apertura_fr"] == "01/03/2024"
        assert payload["apertura_to"] == "31/03/2024"

    def test_unparseable_date_passed_through(self) -> None:
        payload = build_search_payload(SearchFilterState(apertura_fr="next week"))
        assert payload["apertura_fr"] == "next week"

    def test_user_tag_ids_only_when_present(self) -> None:
        assert "user_tag_ids" not in build_search_payload(SearchFilterState())
        payload = build_search_payload(SearchFilterState(user_tag_ids=[3, 9]))
        assert payload["user_tag_ids"] == [3, 9]

    def test_filter_mode_all_omitted(self) -> None:
        assert "filter_mode" not in build_search_payload(SearchFilterState(filter_mode="all"))
        payload = build_search_payload(SearchFilterState(filter_mode="user_tags"))
        assert payload["filter_mode"] == "user_tags"

    def test_deterministic(self) -> None:
        state = SearchFilterState(search="x", pais="12", user_tag_ids=[1])
        assert build_search_payload(state) == build_search_payload(state)


class TestDates:
    def test_input_format_accepts_both(self) -> None:
        assert format_date_for_input("05/02/2024") == "2024-02-05"
        assert format_date_for_input("2024-02-05") == "2024-02-05"
        assert format_date_for_input("garbage") == "garbage"

    def test_api_format(self) -> None:
        assert format_date_for_api("2024-02-05") == "05/02/2024"

    def test_since_keeps_wall_clock(self) -> None:
        assert format_since("2024-01-15T10:00") == "2024-01-15 10:00:00"

    def test_since_empty_rejected(self) -> None:
        with pytest.raises(ValidationFailure):
            format_since("")

    def test_since_invalid_rejected(self) -> None:
        with pytest.raises(ValidationFailure):
            format_since("yesterday")


class TestParseTagIds:
    def test_mixed_tokens(self) -> None:
        assert parse_tag_ids("12, 7,abc, 3 ,") == [12, 7, 3]

    def test_empty(self) -> None:
        assert parse_tag_ids("") == []


class TestBuildStartParams:
    def test_sync_since(self) -> None:
        params = build_start_params("sync-since", since="2024-01-15T10:00")
        assert params == {"since": "2024-01-15 10:00:00"}

    def test_index_licitacion(self) -> None:
        assert build_start_params("index-licitacion", publicacion_id="42") == {"publicacion_id": 42}

    def test_index_licitacion_non_numeric(self) -> None:
        with pytest.raises(ValidationFailure, match="publication"):
            build_start_params("index-licitacion", publicacion_id="abc")

    def test_scraper_requires_since(self) -> None:
        with pytest.raises(ValidationFailure):
            build_start_params("index-scraper-publications", scraper_id=3)

    def test_scraper(self) -> None:
        params = build_start_params("index-scraper-publications", scraper_id="3", since="2024-05-01T08:30")
        assert params == {"scraper_id": 3, "since": "2024-05-01 08:30:00"}

    def test_bulk_has_no_params(self) -> None:
        assert build_start_params("index-bulk") == {}

    def test_unknown_type(self) -> None:
        with pytest.raises(ValidationFailure, match="Invalid indexer type"):
            build_start_params("reindex-everything")
