"""
Test Module for the aggregation-with-override engine.

Validates:
- Natural percentages with half-up rounding and their sum bound
- Cache hits for repeated reads
- Override precedence and sorting
- Invalidation limited to the written path
- Lenient empty-path handling
- B1 listing order
- Override validation
"""

from decimal import Decimal

import pytest

from renew_admin.core.errors import StoreError, ValidationError
from renew_admin.models.enums import Level, ScopeType
from renew_admin.services.aggregation import (
    AggregationEngine,
    b1_sort_key,
    round_half_up,
)
from renew_admin.tests.conftest import (
    InMemoryEntryStore,
    InMemoryOverrideStore,
    ManualClock,
    make_entries,
)


class TestRounding:

    def test_half_rounds_up_not_to_even(self) -> None:
        # 1/8 = 12.5%, banker's rounding would give 12
        assert round_half_up(1, 8) == 13
        assert round_half_up(5, 8) == 63

    def test_integer_result_by_default(self) -> None:
        assert isinstance(round_half_up(1, 3), int)
        assert round_half_up(1, 3) == 33

    def test_two_places(self) -> None:
        assert round_half_up(1, 3, places=2) == 33.33
        assert round_half_up(2, 3, places=2) == 66.67
        assert round_half_up(3, 4, places=2) == 75.0

    def test_two_places_half_up(self) -> None:
        # 1/16 = 6.25% exactly, 1/32 = 3.125%
        assert round_half_up(1, 32, places=2) == 3.13
        assert Decimal(str(round_half_up(1, 16, places=2))) == Decimal('6.25')


class TestB1Ordering:

    def test_numeric_prefix_then_lexical(self) -> None:
        values = ['Annex', '129', '2', '12', '2B', 'Block A']

        assert sorted(values, key=b1_sort_key) == ['2', '2B', '12', '129', 'Annex', 'Block A']

    def test_non_numeric_only(self) -> None:
        assert sorted(['b', 'a', 'C'], key=b1_sort_key) == ['C', 'a', 'b']


@pytest.mark.asyncio
class TestTopLevelValues:

    async def test_lists_distinct_b1_sorted(self, aggregation_engine: AggregationEngine) -> None:
        assert await aggregation_engine.list_top_level_values() == ['2', '12', '129', 'Annex']

    async def test_second_call_hits_cache(
        self,
        aggregation_engine: AggregationEngine,
        entry_store: InMemoryEntryStore,
    ) -> None:
        await aggregation_engine.list_top_level_values()
        await aggregation_engine.list_top_level_values()

        assert entry_store.calls['distinct_values'] == 1

    async def test_empty_store(self, override_store, cache) -> None:
        engine = AggregationEngine(InMemoryEntryStore(), override_store, cache)

        assert await engine.list_top_level_values() == []


@pytest.mark.asyncio
class TestChildDistribution:

    async def test_b2_natural_percentages(self, aggregation_engine: AggregationEngine) -> None:
        rows = await aggregation_engine.get_child_distribution(Level.B2, '12')

        # 12 has 5 entries: Phones 3, Tablets 1, Laptops 1
        assert [(r.value, r.count, r.totalCount, r.percentage) for r in rows] == [
            ('Phones', 3, 5, 60),
            ('Tablets', 1, 5, 20),
            ('Laptops', 1, 5, 20),
        ]

    async def test_b3_distribution(self, aggregation_engine: AggregationEngine) -> None:
        rows = await aggregation_engine.get_child_distribution(Level.B3, '12', 'Phones')

        assert [(r.value, r.count, r.percentage) for r in rows] == [
            ('Cases', 2, 67),
            ('Chargers', 1, 33),
        ]

    async def test_percentages_sum_within_rounding_bound(self, override_store, cache) -> None:
        rows = [('X', f'V{i}', 'b') for i in range(7)]
        engine = AggregationEngine(InMemoryEntryStore(make_entries(rows)), override_store, cache)

        result = await engine.get_child_distribution(Level.B2, 'X')

        total = sum(r.percentage for r in result)
        assert abs(total - 100) <= len(result) - 1

    async def test_ties_keep_first_encountered_order(self, override_store, cache) -> None:
        rows = [('X', 'C', 'b'), ('X', 'A', 'b'), ('X', 'B', 'b'), ('X', 'A', 'b')]
        engine = AggregationEngine(InMemoryEntryStore(make_entries(rows)), override_store, cache)

        result = await engine.get_child_distribution(Level.B2, 'X')

        assert [r.value for r in result] == ['A', 'C', 'B']

    async def test_repeated_call_returns_cached_rows(
        self,
        aggregation_engine: AggregationEngine,
        entry_store: InMemoryEntryStore,
    ) -> None:
        first = await aggregation_engine.get_child_distribution(Level.B2, '12')
        second = await aggregation_engine.get_child_distribution(Level.B2, '12')

        assert first == second
        assert entry_store.calls['group_count'] == 1

    async def test_cache_expires_after_aggregate_ttl(
        self,
        aggregation_engine: AggregationEngine,
        entry_store: InMemoryEntryStore,
        clock: ManualClock,
    ) -> None:
        await aggregation_engine.get_child_distribution(Level.B2, '12')
        clock.advance(120)
        await aggregation_engine.get_child_distribution(Level.B2, '12')

        assert entry_store.calls['group_count'] == 2

    @pytest.mark.parametrize('path', [(None,), ('',), ('   ',)])
    async def test_blank_b1_returns_empty(self, aggregation_engine: AggregationEngine, path) -> None:
        assert await aggregation_engine.get_child_distribution(Level.B2, *path) == []

    async def test_blank_b2_returns_empty(self, aggregation_engine: AggregationEngine) -> None:
        assert await aggregation_engine.get_child_distribution(Level.B3, '12', '') == []

    async def test_unknown_b1_returns_empty(
        self,
        aggregation_engine: AggregationEngine,
        cache,
    ) -> None:
        assert await aggregation_engine.get_child_distribution(Level.B2, 'nowhere') == []
        assert 'b2Data:nowhere' not in cache

    async def test_labels_containing_separator_cache_separately(self, override_store, cache) -> None:
        rows = [('A:B', 'C', 'only-in-AB'), ('A', 'B:C', 'only-in-A')]
        engine = AggregationEngine(InMemoryEntryStore(make_entries(rows)), override_store, cache)

        first = await engine.get_child_distribution(Level.B3, 'A:B', 'C')
        second = await engine.get_child_distribution(Level.B3, 'A', 'B:C')

        assert [r.value for r in first] == ['only-in-AB']
        assert [r.value for r in second] == ['only-in-A']

    async def test_override_under_a_keeps_cached_a_colon_b(
        self,
        override_store,
        cache,
    ) -> None:
        entry_store = InMemoryEntryStore(make_entries([('A', 'P', 'x'), ('A:B', 'P', 'y')]))
        engine = AggregationEngine(entry_store, override_store, cache)
        await engine.get_child_distribution(Level.B2, 'A:B')

        await engine.set_override(ScopeType.B2, ('A',), 'P', 10)
        await engine.get_child_distribution(Level.B2, 'A:B')

        assert entry_store.calls['group_count'] == 1

    async def test_wrong_level_raises(self, aggregation_engine: AggregationEngine) -> None:
        with pytest.raises(ValueError):
            await aggregation_engine.get_child_distribution(Level.DETAIL, '12', 'Phones', 'Cases')


@pytest.mark.asyncio
class TestOverrides:

    async def test_override_replaces_displayed_percentage(
        self,
        aggregation_engine: AggregationEngine,
    ) -> None:
        await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Laptops', 77)

        rows = await aggregation_engine.get_child_distribution(Level.B2, '12')

        laptops = next(r for r in rows if r.value == 'Laptops')
        assert laptops.percentage == 77
        assert laptops.count == 1
        assert rows[0].value == 'Laptops'

    async def test_fractional_override_is_kept(self, aggregation_engine: AggregationEngine) -> None:
        await aggregation_engine.set_override(ScopeType.B3, ('12', 'Phones'), 'Chargers', 12.5)

        rows = await aggregation_engine.get_child_distribution(Level.B3, '12', 'Phones')

        assert {r.value: r.percentage for r in rows} == {'Cases': 67, 'Chargers': 12.5}

    async def test_override_for_unseen_value_is_not_listed(
        self,
        aggregation_engine: AggregationEngine,
    ) -> None:
        await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Watches', 50)

        rows = await aggregation_engine.get_child_distribution(Level.B2, '12')

        assert 'Watches' not in [r.value for r in rows]

    async def test_override_invalidates_only_its_path(
        self,
        aggregation_engine: AggregationEngine,
        entry_store: InMemoryEntryStore,
        override_store: InMemoryOverrideStore,
    ) -> None:
        # Arrange: cache both B1 values
        before_129 = await aggregation_engine.get_child_distribution(Level.B2, '129')
        await aggregation_engine.get_child_distribution(Level.B2, '12')
        calls_before = entry_store.calls['group_count']

        # Write an override for 129 directly, bypassing invalidation
        await override_store.upsert(ScopeType.B2, ('129',), 'Phones', 5)

        # Act: override under 12 through the engine
        await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Phones', 10)
        after_129 = await aggregation_engine.get_child_distribution(Level.B2, '129')
        after_12 = await aggregation_engine.get_child_distribution(Level.B2, '12')

        # Assert: 129 still served from cache, 12 recomputed
        assert after_129 == before_129
        assert entry_store.calls['group_count'] == calls_before + 1
        assert next(r for r in after_12 if r.value == 'Phones').percentage == 10

    async def test_b2_override_keeps_b3_cache(
        self,
        aggregation_engine: AggregationEngine,
        entry_store: InMemoryEntryStore,
    ) -> None:
        await aggregation_engine.get_child_distribution(Level.B3, '12', 'Phones')
        await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Phones', 40)
        await aggregation_engine.get_child_distribution(Level.B3, '12', 'Phones')

        assert entry_store.calls['group_count'] == 1

    async def test_set_child_override_by_level(self, aggregation_engine: AggregationEngine) -> None:
        await aggregation_engine.set_child_override(Level.B3, '12', 'Phones', value='Cases', percentage=90)

        rows = await aggregation_engine.list_child_distribution(Level.B3, '12', 'Phones')

        assert rows[0].value == 'Cases'
        assert rows[0].percentage == 90

    async def test_upsert_replaces_previous_override(
        self,
        aggregation_engine: AggregationEngine,
        override_store: InMemoryOverrideStore,
    ) -> None:
        await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Phones', 10)
        await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Phones', 15)

        assert len(override_store.overrides) == 1
        rows = await aggregation_engine.get_child_distribution(Level.B2, '12')
        assert next(r for r in rows if r.value == 'Phones').percentage == 15

    @pytest.mark.parametrize('percentage', ['50', None, True, [50]])
    async def test_non_numeric_percentage_rejected(
        self,
        aggregation_engine: AggregationEngine,
        percentage,
    ) -> None:
        with pytest.raises(ValidationError):
            await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Phones', percentage)

    @pytest.mark.parametrize('path,value', [(('',), 'Phones'), (('12',), ' '), ((None,), 'Phones')])
    async def test_blank_path_or_value_rejected(
        self,
        aggregation_engine: AggregationEngine,
        path,
        value,
    ) -> None:
        with pytest.raises(ValidationError):
            await aggregation_engine.set_override(ScopeType.B2, path, value, 10)

    async def test_wrong_path_length_rejected(self, aggregation_engine: AggregationEngine) -> None:
        with pytest.raises(ValidationError):
            await aggregation_engine.set_override(ScopeType.B3, ('12',), 'Cases', 10)

    async def test_out_of_range_surfaces_store_error(
        self,
        aggregation_engine: AggregationEngine,
    ) -> None:
        with pytest.raises(StoreError):
            await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Phones', 150)

    async def test_clear_all_overrides_restores_natural(
        self,
        aggregation_engine: AggregationEngine,
        override_store: InMemoryOverrideStore,
    ) -> None:
        await aggregation_engine.set_override(ScopeType.B2, ('12',), 'Laptops', 77)
        await override_store.upsert(ScopeType.B3_DETAIL, ('12', 'Phones', 'Cases'), 'iPhone case', 5)
        await aggregation_engine.get_child_distribution(Level.B2, '12')

        deleted = await aggregation_engine.clear_all_overrides()
        rows = await aggregation_engine.get_child_distribution(Level.B2, '12')

        assert deleted == 2
        assert next(r for r in rows if r.value == 'Laptops').percentage == 20
