"""Fallback precedence, merge and deadline behaviour of the aggregator."""

from __future__ import annotations

import asyncio
import unittest

from _support import FakeConnector, shipment
from logifacade.errors import BackendUnavailableError, NotFoundError
from logifacade.schemas.shipment import ShipmentSystem
from logifacade.schemas.system import BackendInfo, BackendUnavailableMarker
from logifacade.services.aggregator import DEFAULT_ORDER, FallbackAggregator

GROUND = ShipmentSystem.GROUND
AIR = ShipmentSystem.AIR
SEA = ShipmentSystem.SEA


def _deadline_in(seconds: float) -> float:
    return asyncio.get_running_loop().time() + seconds


class ResolveByIdTests(unittest.TestCase):
    def test_first_backend_hit_stops_the_search(self) -> None:
        ground = FakeConnector(GROUND, [shipment(123, GROUND)])
        air = FakeConnector(AIR, [shipment(123, AIR)])
        sea = FakeConnector(SEA)
        aggregator = FallbackAggregator([ground, air, sea])

        record = asyncio.run(aggregator.resolve_by_id(123))

        self.assertEqual(record.system, GROUND)
        self.assertEqual(air.calls, [])
        self.assertEqual(sea.calls, [])

    def test_unavailable_backend_falls_through_to_next(self) -> None:
        ground = FakeConnector(GROUND, [shipment(456, GROUND)], unavailable=True)
        air = FakeConnector(AIR, [shipment(456, AIR, status="delivered")])
        sea = FakeConnector(SEA)
        aggregator = FallbackAggregator([ground, air, sea])

        record = asyncio.run(aggregator.resolve_by_id(456))

        self.assertEqual(record.system, AIR)
        self.assertEqual(record.status, "delivered")
        self.assertEqual(ground.calls, [("query", 456)])
        self.assertEqual(sea.calls, [])

    def test_absent_everywhere_returns_none_after_asking_each_once(self) -> None:
        connectors = [FakeConnector(GROUND), FakeConnector(AIR, unavailable=True), FakeConnector(SEA)]
        aggregator = FallbackAggregator(connectors)

        self.assertIsNone(asyncio.run(aggregator.resolve_by_id(999)))
        for connector in connectors:
            self.assertEqual(connector.calls, [("query", 999)])

    def test_raising_connector_is_absorbed(self) -> None:
        ground = FakeConnector(GROUND, error=RuntimeError("socket exploded"))
        sea = FakeConnector(SEA, [shipment(789, SEA)])
        aggregator = FallbackAggregator([ground, sea])

        with self.assertLogs("logifacade.services.aggregator", level="ERROR"):
            record = asyncio.run(aggregator.resolve_by_id(789))

        self.assertEqual(record.system, SEA)

    def test_backend_unavailable_error_is_absorbed(self) -> None:
        ground = FakeConnector(GROUND, error=BackendUnavailableError("GROUND", "http_502"))
        air = FakeConnector(AIR, [shipment(5, AIR)])
        aggregator = FallbackAggregator([ground, air])

        record = asyncio.run(aggregator.resolve_by_id(5))

        self.assertEqual(record.system, AIR)

    def test_slow_backend_exhausts_deadline_and_later_backends_are_not_called(self) -> None:
        ground = FakeConnector(GROUND, [shipment(1, GROUND)], delay=5.0)
        air = FakeConnector(AIR, [shipment(1, AIR)])
        aggregator = FallbackAggregator([ground, air])

        async def scenario():
            return await aggregator.resolve_by_id(1, deadline=_deadline_in(0.05))

        self.assertIsNone(asyncio.run(scenario()))
        self.assertEqual(ground.calls, [("query", 1)])
        self.assertEqual(air.calls, [])

    def test_expired_deadline_skips_every_backend(self) -> None:
        ground = FakeConnector(GROUND, [shipment(1, GROUND)])
        aggregator = FallbackAggregator([ground])

        async def scenario():
            return await aggregator.resolve_by_id(1, deadline=_deadline_in(-1.0))

        self.assertIsNone(asyncio.run(scenario()))
        self.assertEqual(ground.calls, [])


class UpdateStatusAnywhereTests(unittest.TestCase):
    def test_update_applies_on_first_backend_that_knows_the_shipment(self) -> None:
        ground = FakeConnector(GROUND)
        air = FakeConnector(AIR, [shipment(457, AIR)])
        sea = FakeConnector(SEA, [shipment(457, SEA)])
        aggregator = FallbackAggregator([ground, air, sea])

        record = asyncio.run(aggregator.update_status_anywhere(457, "delivered"))

        self.assertEqual(record.system, AIR)
        self.assertEqual(record.status, "delivered")
        self.assertEqual(ground.calls, [("update_status", (457, "delivered"))])
        self.assertEqual(sea.calls, [])
        self.assertEqual(sea.records[457].status, "in-transit")

    def test_update_of_unknown_shipment_returns_none(self) -> None:
        aggregator = FallbackAggregator([FakeConnector(GROUND), FakeConnector(AIR, unavailable=True)])

        self.assertIsNone(asyncio.run(aggregator.update_status_anywhere(9, "lost")))


class MergedListingTests(unittest.TestCase):
    def test_merge_keeps_precedence_order_and_duplicate_identifiers(self) -> None:
        ground = FakeConnector(GROUND, [shipment(10, GROUND), shipment(11, GROUND)])
        air = FakeConnector(AIR, [shipment(10, AIR)])
        sea = FakeConnector(SEA, [shipment(30, SEA)])
        aggregator = FallbackAggregator([ground, air, sea])

        merged = asyncio.run(aggregator.list_all_merged())

        self.assertEqual(
            [(record.id, record.system) for record in merged],
            [(10, GROUND), (11, GROUND), (10, AIR), (30, SEA)],
        )

    def test_unavailable_backend_is_skipped(self) -> None:
        ground = FakeConnector(GROUND, [shipment(1, GROUND)])
        air = FakeConnector(AIR, [shipment(2, AIR)], unavailable=True)
        sea = FakeConnector(SEA, [shipment(3, SEA)], error=RuntimeError("boom"))
        aggregator = FallbackAggregator([ground, air, sea])

        merged = asyncio.run(aggregator.list_all_merged())

        self.assertEqual([record.id for record in merged], [1])

    def test_slow_listing_is_dropped_at_deadline(self) -> None:
        ground = FakeConnector(GROUND, [shipment(1, GROUND)], delay=5.0)
        sea = FakeConnector(SEA, [shipment(3, SEA)])
        aggregator = FallbackAggregator([ground, sea])

        async def scenario():
            return await aggregator.list_all_merged(deadline=_deadline_in(0.05))

        self.assertEqual([record.id for record in asyncio.run(scenario())], [3])


class DescribeTests(unittest.TestCase):
    def test_describe_all_isolates_failures(self) -> None:
        aggregator = FallbackAggregator(
            [FakeConnector(GROUND), FakeConnector(AIR, unavailable=True), FakeConnector(SEA)]
        )

        info = asyncio.run(aggregator.describe_all())

        self.assertEqual(list(info), ["GROUND", "AIR", "SEA"])
        self.assertIsInstance(info["GROUND"], BackendInfo)
        self.assertIsInstance(info["AIR"], BackendUnavailableMarker)
        self.assertFalse(info["AIR"].available)
        self.assertEqual(info["AIR"].error, "AIR service unavailable")
        self.assertEqual(info["SEA"].name, "Sea cargo service")

    def test_describe_one_reports_failure(self) -> None:
        aggregator = FallbackAggregator([FakeConnector(GROUND), FakeConnector(AIR, unavailable=True)])

        self.assertEqual(asyncio.run(aggregator.describe_one(GROUND)).system, GROUND)
        with self.assertRaises(BackendUnavailableError) as context:
            asyncio.run(aggregator.describe_one(AIR))
        self.assertEqual(context.exception.status_code, 503)
        self.assertEqual(context.exception.system, "AIR")

    def test_describe_one_past_deadline_is_unavailable(self) -> None:
        aggregator = FallbackAggregator([FakeConnector(SEA, delay=5.0)])

        async def scenario():
            return await aggregator.describe_one(SEA, deadline=_deadline_in(0.05))

        with self.assertRaises(BackendUnavailableError) as context:
            asyncio.run(scenario())
        self.assertEqual(context.exception.reason, "deadline_exceeded")

    def test_describe_one_of_unconfigured_system_is_not_found(self) -> None:
        aggregator = FallbackAggregator([FakeConnector(GROUND)])

        with self.assertRaises(NotFoundError):
            asyncio.run(aggregator.describe_one(SEA))


class ConstructionTests(unittest.TestCase):
    def test_duplicate_systems_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FallbackAggregator([FakeConnector(GROUND), FakeConnector(GROUND)])

    def test_order_follows_connector_sequence(self) -> None:
        aggregator = FallbackAggregator([FakeConnector(SEA), FakeConnector(GROUND)])

        self.assertEqual(aggregator.order, [SEA, GROUND])
        self.assertEqual(DEFAULT_ORDER, (GROUND, AIR, SEA))

    def test_aclose_closes_every_connector(self) -> None:
        connectors = [FakeConnector(GROUND), FakeConnector(AIR)]

        asyncio.run(FallbackAggregator(connectors).aclose())

        self.assertTrue(all(connector.closed for connector in connectors))
