import unittest

from garden_console.operations import NO_ASSET, OperationKind, OperationTracker


class OperationTrackerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tracker = OperationTracker()

    def test_second_reserve_rejected_until_release(self) -> None:
        self.assertTrue(self.tracker.try_reserve(OperationKind.LAUNCH, "factory/x/tnt"))
        self.assertFalse(self.tracker.try_reserve(OperationKind.LAUNCH, "factory/x/tnt"))
        self.assertTrue(self.tracker.is_busy(OperationKind.LAUNCH, "factory/x/tnt"))

        self.tracker.release(OperationKind.LAUNCH, "factory/x/tnt")
        self.assertFalse(self.tracker.is_busy(OperationKind.LAUNCH, "factory/x/tnt"))
        self.assertTrue(self.tracker.try_reserve(OperationKind.LAUNCH, "factory/x/tnt"))

    def test_keys_are_independent_per_asset_and_kind(self) -> None:
        denoms = ["factory/x/aaa", "factory/x/bbb"]
        for kind in OperationKind:
            self.assertTrue(self.tracker.try_reserve(kind, denoms[0]))
        for kind in OperationKind:
            self.assertTrue(self.tracker.try_reserve(kind, denoms[1]))
        self.assertEqual(len(self.tracker.in_flight()), 2 * len(OperationKind))

    def test_working_reflects_any_reservation(self) -> None:
        self.assertFalse(self.tracker.working)
        self.tracker.try_reserve(OperationKind.CREATE)
        self.assertTrue(self.tracker.working)
        self.assertTrue(self.tracker.is_busy(OperationKind.CREATE, NO_ASSET))
        self.tracker.release(OperationKind.CREATE)
        self.assertFalse(self.tracker.working)

    def test_release_without_reservation_is_an_error(self) -> None:
        with self.assertRaises(RuntimeError):
            self.tracker.release(OperationKind.CLAIM, "factory/x/tnt")

    def test_listeners_see_busy_transitions(self) -> None:
        events: list[tuple[OperationKind, str, bool]] = []
        self.tracker.subscribe(lambda kind, asset, busy: events.append((kind, asset, busy)))

        self.tracker.try_reserve(OperationKind.CLAIM, "factory/x/tnt")
        self.tracker.try_reserve(OperationKind.CLAIM, "factory/x/tnt")
        self.tracker.release(OperationKind.CLAIM, "factory/x/tnt")

        self.assertEqual(
            events,
            [
                (OperationKind.CLAIM, "factory/x/tnt", True),
                (OperationKind.CLAIM, "factory/x/tnt", False),
            ],
        )


if __name__ == "__main__":
    unittest.main()
