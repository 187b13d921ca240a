import unittest

from tapebf import DebugSession, ExecutionState, TapeUnderflow
from tapebf.debugger import _format_code_window, format_state
from tapebf.errors import OperationLimitExceeded


class DebugSessionTests(unittest.TestCase):
    def test_basic_stepping(self) -> None:
        session = DebugSession("+++.", tape_window=2)
        initial = session.current_state()
        self.assertIsNone(initial.command)
        states = session.step_forward(2)
        self.assertEqual(len(states), 2)
        self.assertEqual(states[-1].step, 2)
        self.assertFalse(session.is_finished())

    def test_step_forward_zero_count_keeps_state(self) -> None:
        session = DebugSession("++", history_limit=5)
        initial_state = session.current_state()
        self.assertEqual(session.step_forward(0), [])
        self.assertIs(session.current_state(), initial_state)

    def test_runs_to_completion(self) -> None:
        session = DebugSession(",+.", input_data=b"a")
        states = session.run_until_break()
        self.assertTrue(session.is_finished())
        self.assertEqual(states[-1].output, b"b")
        self.assertIsNone(states[-1].command)

    def test_breakpoint(self) -> None:
        session = DebugSession("+++.")
        session.add_breakpoint(2)
        session.run_until_break()
        self.assertEqual(session.hit_breakpoint, 2)
        self.assertEqual(session.current_state().pc, 2)
        self.assertFalse(session.is_finished())

    def test_run_until_break_limit(self) -> None:
        session = DebugSession("+++++.")
        session.add_breakpoint(5)
        states = session.run_until_break(limit=2)
        self.assertEqual(len(states), 2)
        self.assertIsNone(session.hit_breakpoint)
        self.assertEqual(session.current_state(), states[-1])

    def test_error_finishes_session(self) -> None:
        session = DebugSession("+<")
        with self.assertRaises(TapeUnderflow):
            session.run_until_break()
        self.assertTrue(session.is_finished())
        self.assertEqual(session.error.position, 1)
        self.assertEqual(session.step_forward(1), [])

    def test_operation_limit_propagates(self) -> None:
        session = DebugSession("+[]", max_operations=2)
        with self.assertRaises(OperationLimitExceeded):
            session.run_until_break()

    def test_history_limit_discards_old_entries(self) -> None:
        session = DebugSession("+++++.", history_limit=3)
        session.step_forward(5)
        self.assertEqual(len(session.history), 3)
        self.assertGreater(session.history[0].step, 0)
        self.assertEqual(session.history[-1], session.current_state())

    def test_restart(self) -> None:
        session = DebugSession("+.")
        session.step_forward(3)
        self.assertTrue(session.is_finished())
        session.restart()
        self.assertFalse(session.is_finished())
        self.assertEqual(session.current_state().step, 0)
        self.assertEqual(len(session.history), 1)

    def test_breakpoint_management_helpers(self) -> None:
        session = DebugSession("+++.")
        session.add_breakpoint(3)
        session.add_breakpoint(1)
        self.assertEqual(session.list_breakpoints(), [1, 3])
        self.assertTrue(session.remove_breakpoint(1))
        self.assertFalse(session.remove_breakpoint(99))
        session.clear_breakpoints()
        self.assertEqual(session.list_breakpoints(), [])


class FormattingTests(unittest.TestCase):
    def test_format_code_window_marks_end(self) -> None:
        self.assertEqual(_format_code_window("+", 5), "+[END]")

    def test_format_state_renders_core_sections(self) -> None:
        state = ExecutionState(
            step=3,
            pc=1,
            command="+",
            pointer=1,
            tape_start=0,
            tape=[1, 2, 3],
            output=b"A",
            code_length=3,
        )
        rendered = format_state(state, "++.")
        self.assertIn("step=3 pc=1/3 command='+' pointer=1", rendered)
        self.assertIn("output='A'", rendered)
        self.assertIn("[1:002]", rendered)
        self.assertIn("code=+[+].", rendered)


if __name__ == "__main__":
    unittest.main()
