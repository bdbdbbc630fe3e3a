# tests/core/test_resolution.py
import pytest

from contextualizer.core.domain.context import CountryContext
from contextualizer.core.domain.exceptions import CyclicReferenceError, MarkerNotFoundError
from contextualizer.core.translation.dates import format_date_localized


class TestResolutionCache:
    def test_idempotent(self, make_ctx):
        ctx = make_ctx({"student": {"person": "Raha", "gender": "f"}})
        first = ctx.resolve("student")
        assert ctx.resolve("student") is first
        assert ctx.computations["student"] == 1

    def test_deterministic_across_contexts(self, make_ctx):
        markers = {
            "student": {"person": "Raha", "gender": "f"},
            "city": {"place": "Mashhad", "city-medium": True},
            "protesters": {"number": 1_000, "scaled": True, "variance": 50},
        }
        a, b = make_ctx(markers), make_ctx(markers)
        assert a.resolve_all() == b.resolve_all()

    def test_unknown_key_raises(self, make_ctx):
        ctx = make_ctx({})
        with pytest.raises(MarkerNotFoundError):
            ctx.resolve("ghost")

    def test_resolve_optional_missing(self, make_ctx):
        assert make_ctx({}).resolve_optional("ghost", referenced_by="x") is None


class TestAliases:
    def test_alias_shares_target_result(self, make_ctx):
        """
        Scenario: 'victim' is an alias of 'student'.
        Expected: Both render the same name and the target is computed once.
        """
        ctx = make_ctx({
            "student": {"person": "Raha", "gender": "f"},
            "victim": {"sameAs": "student"},
        })
        assert ctx.resolve("victim") == ctx.resolve("student")
        assert ctx.computations["student"] == 1

    def test_alias_resolved_before_target(self, make_ctx):
        ctx = make_ctx({
            "student": {"person": "Raha", "gender": "f"},
            "victim": {"sameAs": "student"},
        })
        victim = ctx.resolve("victim")
        assert ctx.resolve("student") is victim

    def test_missing_alias_target(self, make_ctx):
        ctx = make_ctx({"victim": {"sameAs": "nobody"}})
        with pytest.raises(MarkerNotFoundError) as excinfo:
            ctx.resolve("victim")
        assert excinfo.value.key == "nobody"
        assert excinfo.value.referenced_by == "victim"

    def test_alias_cycle(self, make_ctx):
        ctx = make_ctx({"a": {"sameAs": "b"}, "b": {"sameAs": "a"}})
        with pytest.raises(CyclicReferenceError):
            ctx.resolve("a")

    def test_self_alias(self, make_ctx):
        ctx = make_ctx({"a": {"sameAs": "a"}})
        with pytest.raises(CyclicReferenceError):
            ctx.resolve("a")


class TestPersons:
    def test_name_from_gender_pool(self, make_ctx):
        result = make_ctx({"student": {"person": "Raha", "gender": "f"}}).resolve("student")
        assert result.value in {"Eva", "Jana", "Lina"}
        assert result.original == "Raha"

    def test_regional_names(self, make_ctx):
        ctx = make_ctx({
            "city": {"place": "Tehran", "city-large": True},
            "student": {"person": "Raha", "gender": "f", "from": "city"},
        })
        assert ctx.resolve("student").value == "Libuše"

    def test_region_without_pool_for_gender(self, make_ctx):
        ctx = make_ctx({
            "city": {"place": "Tehran", "city-large": True},
            "father": {"person": "Ali", "gender": "m", "from": "city"},
        })
        assert ctx.resolve("father").value in {"Jan", "Petr", "Tomáš"}

    def test_empty_pools_keep_authored_name(self, make_ctx):
        bare = CountryContext(code="ZZ", population=1_000_000)
        result = make_ctx({"student": {"person": "Raha"}}, country=bare).resolve("student")
        assert result.value == "Raha"
        assert result.original is None


class TestNumbers:
    def test_scaled(self, make_ctx, us_context):
        result = make_ctx({"protesters": {"number": 100, "scaled": True}}, country=us_context).resolve("protesters")
        assert result.value == "389"
        assert result.original == "100"
        assert result.explanation == "100 × (331,000,000 / 85,000,000) = 389"
        assert result.amount == 389

    def test_unscaled_is_unchanged(self, make_ctx):
        result = make_ctx({"days": {"number": 40, "days": True}}).resolve("days")
        assert result.value == "40"
        assert result.original is None

    def test_variance(self, make_ctx, us_context):
        result = make_ctx(
            {"protesters": {"number": 100, "scaled": True, "variance": 10}},
            country=us_context,
        ).resolve("protesters")
        assert 379 <= int(result.value) < 399
        assert "variance ±10" in result.explanation

    def test_currency(self, make_ctx):
        result = make_ctx({"fine": {"currency": 1_000_000}}).resolve("fine")
        assert result.value == "Kč550"
        assert result.original == "1,000,000 Rial"


class TestCasualties:
    def test_national_scaling(self, make_ctx):
        result = make_ctx({"killed": {"casualties": 36_500, "killed": True}}).resolve("killed")
        assert result.value == "4,380"
        assert result.original == "36,500"
        assert result.explanation == "36,500 × (10,200,000 / 85,000,000) = 4,380"
        assert result.comparison is None

    def test_comparable_event(self, make_ctx):
        result = make_ctx({"killed": {"casualties": 36_500, "comparable": "massacre"}}).resolve("killed")
        assert result.comparison == "13 times the Lidice massacre"
        assert result.comparison_explanation.startswith("Comparison: 4,380 casualties vs. the Lidice massacre")

    def test_no_events_no_comparison(self, make_ctx, us_context):
        result = make_ctx(
            {"killed": {"casualties": 36_500, "comparable": "any"}},
            country=us_context,
        ).resolve("killed")
        assert result.comparison is None
        assert result.value == "142,135"

    def test_city_scope(self, make_ctx):
        """
        Scenario: 900 killed in Tehran, reader city is Prague (1.3M).
        Expected: Prague's population replaces the national one; the source country stays the baseline.
        """
        ctx = make_ctx({
            "city": {"place": "Tehran", "city-large": True, "population": 9_000_000},
            "killed": {"casualties": 900, "scope": "city", "scopeCity": "city"},
        })
        result = ctx.resolve("killed")
        assert result.value == "14"
        assert result.explanation == "900 × (1,300,000 / 85,000,000) = 14"

    def test_city_scope_keeps_authored_population(self, make_ctx):
        """
        Scenario: The reader country has no small city, so Saqqez keeps its name.
        Expected: Its authored population (200k) is the target.
        """
        ctx = make_ctx({
            "town": {"place": "Saqqez", "city-small": True, "population": 200_000},
            "killed": {"casualties": 8_500, "scope": "city", "scopeCity": "town"},
        })
        assert ctx.resolve("town").value == "Saqqez"
        assert ctx.resolve("killed").value == "20"

    def test_city_scope_without_authored_population(self, make_ctx):
        ctx = make_ctx({
            "city": {"place": "Tehran", "city-large": True},
            "killed": {"casualties": 36_500, "scope": "city", "scopeCity": "city"},
        })
        assert ctx.resolve("killed").value == "558"

    def test_city_scope_unusable_falls_back_to_national(self, make_ctx):
        ctx = make_ctx({
            "town": {"place": "Saqqez", "city-small": True},
            "killed": {"casualties": 36_500, "scope": "city", "scopeCity": "town"},
        })
        assert ctx.resolve("killed").value == "4,380"

    def test_compared_to(self, make_ctx):
        ctx = make_ctx({
            "killed": {"casualties": 850, "comparedTo": "earlier"},
            "earlier": {"casualties": 425},
        })
        result = ctx.resolve("killed")
        assert result.comparison == "twice as many as 51"
        assert ctx.computations["earlier"] == 1

    def test_grouping_follows_language(self, make_ctx):
        result = make_ctx({"killed": {"casualties": 36_500}}, language="de").resolve("killed")
        assert result.value == "4.380"


class TestDatesAndOthers:
    def test_date_localized(self, make_ctx):
        assert make_ctx({"d": {"date": "2022-09-20"}}).resolve("d").value == "September 20, 2022"
        assert make_ctx({"d": {"date": "2022-09-20"}}, language="de").resolve("d").value == "20. September 2022"

    def test_unparseable_date_passes_through(self):
        assert format_date_localized("autumn 2022", "en") == "autumn 2022"

    def test_time_passes_through(self, make_ctx):
        result = make_ctx({"t": {"time": "around 4 pm"}}).resolve("t")
        assert result.value == "around 4 pm"
        assert result.original is None

    def test_unknown_kind_placeholder(self, make_ctx):
        assert make_ctx({"job": {"occupation": "nurse"}}).resolve("job").value == "[job]"
