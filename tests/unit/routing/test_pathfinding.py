"""Tests for candidate route discovery."""

from aggregator.pools.snapshot import PoolSnapshot
from aggregator.pools.types import DexType
from aggregator.routing.pathfinding import PathFinder
from aggregator.routing.selector import RouteSelector
from aggregator.routing.types import PathStrategy
from tests.helpers import APT, DAI, GUI, USDC, USDT, WETH, make_pool, make_request


def paths(routes) -> list[list[str]]:
    return [route.path for route in routes]


class TestDirectRoutes:
    def test_every_direct_pool_is_a_candidate(self, snapshot) -> None:
        routes = PathFinder().find_routes(snapshot, make_request(APT, USDC, max_hops=1))

        assert len(routes) == 2
        assert {r.steps[0].pool_address for r in routes} == {
            "0x1::cetus::APT_USDC",
            "0x2::pancake::APT_USDC",
        }
        assert all(not r.is_multihop for r in routes)

    def test_excluded_dex_is_skipped(self, snapshot) -> None:
        request = make_request(APT, USDC, max_hops=1, exclude_dexes={DexType.PANCAKE})
        routes = PathFinder().find_routes(snapshot, request)

        assert [r.steps[0].dex_type for r in routes] == [DexType.CETUS]

    def test_unpriceable_pool_discards_only_that_candidate(self) -> None:
        depleted = make_pool(APT, USDC, reserve_b=0, dex_type=DexType.PANCAKE)
        healthy = make_pool(APT, USDC, dex_type=DexType.CETUS)
        snapshot = PoolSnapshot([depleted, healthy])

        routes = PathFinder().find_routes(snapshot, make_request(APT, USDC))

        assert [r.steps[0].pool_address for r in routes] == [healthy.address]

    def test_reverse_direction(self, snapshot) -> None:
        routes = PathFinder().find_routes(snapshot, make_request(USDC, APT, 10**7, max_hops=1))
        assert all(r.coin_in == USDC and r.coin_out == APT for r in routes)
        assert len(routes) == 2


class TestMultiHop:
    def test_greedy_adds_one_candidate_per_intermediate(self, snapshot) -> None:
        routes = PathFinder().find_routes(snapshot, make_request(APT, USDC))

        assert len(routes) == 3
        assert [APT, USDT, USDC] in paths(routes)
        two_hop = next(r for r in routes if r.is_multihop)
        assert two_hop.steps[0].pool_address == "0x3::liquidswap::APT_USDT"
        assert two_hop.steps[1].pool_address == "0x2::pancake::USDT_USDC"
        # Each leg is priced with the previous leg's output
        assert two_hop.steps[1].amount_in == two_hop.steps[0].amount_out
        assert two_hop.estimated_gas == 8_000

    def test_exclusion_applies_to_every_leg(self, snapshot) -> None:
        request = make_request(APT, USDC, exclude_dexes={DexType.PANCAKE})
        routes = PathFinder().find_routes(snapshot, request)

        assert paths(routes) == [[APT, USDC]]

    def test_three_hop_chain(self) -> None:
        snapshot = PoolSnapshot(
            [
                make_pool(APT, USDT, 10**12, 10**11),
                make_pool(USDT, WETH, 10**11, 10**9),
                make_pool(WETH, DAI, 10**9, 10**11),
            ]
        )
        finder = PathFinder()

        routes = finder.find_routes(snapshot, make_request(APT, DAI, max_hops=3))
        assert paths(routes) == [[APT, USDT, WETH, DAI]]
        assert routes[0].estimated_gas == 11_000

        assert finder.find_routes(snapshot, make_request(APT, DAI, max_hops=2)) == []

    def test_visited_set_is_path_local(self) -> None:
        """A coin never repeats within a route but may appear on sibling branches."""
        snapshot = PoolSnapshot(
            [
                make_pool(APT, USDT, 10**12, 10**11),
                make_pool(USDT, WETH, 10**11, 10**9),
                make_pool(WETH, APT, 10**9, 10**12),
                make_pool(WETH, USDC, 10**9, 10**11),
            ]
        )

        routes = PathFinder().find_routes(snapshot, make_request(APT, USDC))

        found = sorted(paths(routes), key=len)
        assert found == [[APT, WETH, USDC], [APT, USDT, WETH, USDC]]
        for path in found:
            assert len(path) == len(set(path))

    def test_greedy_picks_best_pool_per_leg(self) -> None:
        shallow = make_pool(APT, USDT, 10**9, 10**8, dex_type=DexType.CETUS)
        deep = make_pool(APT, USDT, 10**12, 10**11, dex_type=DexType.LIQUIDSWAP)
        stable_a = make_pool(USDT, USDC, 10**9, 10**9, dex_type=DexType.CETUS)
        stable_b = make_pool(USDT, USDC, 10**12, 10**12, dex_type=DexType.PANCAKE)
        snapshot = PoolSnapshot([shallow, deep, stable_a, stable_b])

        routes = PathFinder().find_routes(snapshot, make_request(APT, USDC))

        assert len(routes) == 1
        assert [s.pool_address for s in routes[0].steps] == [deep.address, stable_b.address]

    def test_exhaustive_tries_every_pool_combination(self) -> None:
        pools = [
            make_pool(APT, USDT, 10**9, 10**8, dex_type=DexType.CETUS),
            make_pool(APT, USDT, 10**12, 10**11, dex_type=DexType.LIQUIDSWAP),
            make_pool(USDT, USDC, 10**9, 10**9, dex_type=DexType.CETUS),
            make_pool(USDT, USDC, 10**12, 10**12, dex_type=DexType.PANCAKE),
        ]
        snapshot = PoolSnapshot(pools)
        request = make_request(APT, USDC)

        routes = PathFinder(PathStrategy.EXHAUSTIVE).find_routes(snapshot, request)
        assert len(routes) == 4

        capped = PathFinder(PathStrategy.EXHAUSTIVE, max_candidates=3)
        assert len(capped.find_routes(snapshot, request)) == 3


class TestDenseGraph:
    """Ten intermediates, all linked to APT, USDC and each other."""

    COINS = [f"0xc{i}::coin::C{i:02d}" for i in range(1, 11)]

    def dense_snapshot(self) -> PoolSnapshot:
        deep_coin = self.COINS[-1]
        pools = []
        for coin in self.COINS:
            reserve = 10**13 if coin == deep_coin else 10**9
            pools.append(make_pool(APT, coin, reserve, reserve))
            pools.append(make_pool(coin, USDC, reserve, reserve))
        for i, coin_a in enumerate(self.COINS):
            for coin_b in self.COINS[i + 1 :]:
                pools.append(make_pool(coin_a, coin_b, 10**9, 10**9))
        return PoolSnapshot(pools)

    def test_greedy_prices_every_intermediate(self) -> None:
        finder = PathFinder(PathStrategy.GREEDY, max_candidates=5)

        routes = finder.find_routes(self.dense_snapshot(), make_request(APT, USDC))

        two_hop = [r for r in routes if r.hop_count == 2]
        assert sorted(r.path[1] for r in two_hop) == sorted(self.COINS)
        # 10 two-hop routes plus 10 x 9 three-hop routes
        assert len(routes) == 100

    def test_best_route_uses_last_intermediate(self) -> None:
        routes = PathFinder().find_routes(self.dense_snapshot(), make_request(APT, USDC))

        ranked = RouteSelector().select(routes)

        assert ranked is not None
        assert ranked.best.path == [APT, self.COINS[-1], USDC]

    def test_exhaustive_still_capped(self) -> None:
        finder = PathFinder(PathStrategy.EXHAUSTIVE, max_candidates=5)

        routes = finder.find_routes(self.dense_snapshot(), make_request(APT, USDC))

        assert len(routes) == 5


class TestNoRoute:
    def test_disjoint_graph_yields_no_candidates(self, snapshot) -> None:
        assert PathFinder().find_routes(snapshot, make_request(APT, GUI)) == []

    def test_unknown_coin_yields_no_candidates(self, snapshot) -> None:
        assert PathFinder().find_routes(snapshot, make_request(APT, WETH)) == []

    def test_same_coin_yields_no_candidates(self, snapshot) -> None:
        assert PathFinder().find_routes(snapshot, make_request(APT, APT)) == []

    def test_empty_snapshot(self) -> None:
        assert PathFinder().find_routes(PoolSnapshot.empty(), make_request()) == []
