import unittest

from saunaflow.core.adjustment import adjust_protocol, cold_modifier, has_changes, sauna_modifier
from saunaflow.core.protocol import Protocol, Stage, get_protocol
from saunaflow.core.status import Goal, StageType


def durations(protocol):
    return [stage.duration for stage in protocol.stages]


class TestAdjustment(unittest.TestCase):
    def setUp(self) -> None:
        self.protocol = get_protocol("relax_1")  # sauna 600, cold 60, rest 600

    def test_baseline_temperatures_leave_durations_alone(self) -> None:
        adjusted = adjust_protocol(self.protocol, 85, 10)
        self.assertEqual(durations(adjusted), durations(self.protocol))
        self.assertFalse(has_changes(self.protocol, adjusted))

    def test_hot_sauna_is_clamped_to_half(self) -> None:
        adjusted = adjust_protocol(self.protocol, 110, 10)
        self.assertEqual(sauna_modifier(110), 0.5)
        self.assertEqual(durations(adjusted), [300, 60, 600])
        self.assertTrue(has_changes(self.protocol, adjusted))

    def test_sauna_steps(self) -> None:
        self.assertEqual(durations(adjust_protocol(self.protocol, 90, 10))[0], 528)
        self.assertEqual(durations(adjust_protocol(self.protocol, 80, 10))[0], 636)
        self.assertEqual(durations(adjust_protocol(self.protocol, 60, 10))[0], 780)

    def test_cold_steps(self) -> None:
        protocol = get_protocol("relax_2")  # cold 120
        self.assertEqual(durations(adjust_protocol(protocol, 85, 8))[1], 96)
        self.assertEqual(durations(adjust_protocol(protocol, 85, 14))[1], 144)
        self.assertEqual(durations(adjust_protocol(protocol, 85, 1))[1], 60)
        self.assertEqual(cold_modifier(1), 0.5)

    def test_any_integer_is_accepted(self) -> None:
        self.assertEqual(sauna_modifier(-1000), 1.5)
        self.assertEqual(sauna_modifier(1000), 0.5)
        self.assertEqual(cold_modifier(-50), 0.5)
        self.assertEqual(cold_modifier(500), 1.5)
        adjusted = adjust_protocol(self.protocol, -1000, 500)
        self.assertEqual(durations(adjusted), [900, 90, 600])

    def test_rest_stages_pass_through(self) -> None:
        adjusted = adjust_protocol(self.protocol, 110, 1)
        self.assertIs(adjusted.stages[2], self.protocol.stages[2])

    def test_rounding_is_half_up_with_one_second_floor(self) -> None:
        tiny = Protocol(
            id="tiny", name="tiny", description="", cycles=1, goal=Goal.RELAX,
            stages=(Stage(StageType.SAUNA, 5), Stage(StageType.SAUNA, 1)),
        )
        adjusted = adjust_protocol(tiny, 110, 10)
        self.assertEqual(durations(adjusted), [3, 1])

    def test_returns_new_protocol_with_same_identity(self) -> None:
        adjusted = adjust_protocol(self.protocol, 100, 4)
        self.assertIsNot(adjusted, self.protocol)
        self.assertEqual(durations(self.protocol), [600, 60, 600])
        self.assertEqual(
            (adjusted.id, adjusted.name, adjusted.description, adjusted.cycles, adjusted.goal),
            (self.protocol.id, self.protocol.name, self.protocol.description, self.protocol.cycles, self.protocol.goal),
        )
        self.assertEqual([s.type for s in adjusted.stages], [s.type for s in self.protocol.stages])

    def test_same_inputs_same_output(self) -> None:
        self.assertEqual(adjust_protocol(self.protocol, 97, 6), adjust_protocol(self.protocol, 97, 6))


if __name__ == "__main__":
    unittest.main()
