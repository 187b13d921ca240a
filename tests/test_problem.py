import io
import unittest

from tapebf import Problem, ProblemFormatError, parse_problem, read_problem


class ParseProblemTests(unittest.TestCase):
    def test_parses_input_and_joins_lines(self) -> None:
        text = "3 2\nabc$\n,.,.\n,.\n"
        problem = parse_problem(text)
        self.assertEqual(problem, Problem(input_data=b"abc", code=",.,.,."))

    def test_input_may_contain_newlines(self) -> None:
        problem = parse_problem("3 1\na\nb$+\n")
        self.assertEqual(problem.input_data, b"a\nb")
        self.assertEqual(problem.code, "+")

    def test_empty_input(self) -> None:
        problem = parse_problem("0 1\n$\n++.\n")
        self.assertEqual(problem.input_data, b"")
        self.assertEqual(problem.code, "++.")

    def test_extra_lines_are_ignored(self) -> None:
        problem = parse_problem("0 1\n$\n+\n-\n")
        self.assertEqual(problem.code, "+")

    def test_last_line_without_newline(self) -> None:
        self.assertEqual(parse_problem("0 2\n$\n+\n.").code, "+.")

    def test_non_ascii_space_bytes_belong_to_input(self) -> None:
        problem = parse_problem("2 1\n\xa0\x85$\n,.,.\n")
        self.assertEqual(problem.input_data, b"\xa0\x85")
        self.assertEqual(problem.code, ",.,.")

    def test_input_length_mismatch(self) -> None:
        with self.assertRaises(ProblemFormatError) as ctx:
            parse_problem("4 1\nabc$\n.\n")
        self.assertIn("expected 4 characters, received 3", str(ctx.exception))

    def test_missing_lines(self) -> None:
        with self.assertRaises(ProblemFormatError) as ctx:
            parse_problem("0 3\n$\n+\n.\n")
        self.assertIn("Expected 3 lines, received 2", str(ctx.exception))

    def test_bad_header(self) -> None:
        with self.assertRaises(ProblemFormatError):
            parse_problem("x 1\n$\n+\n")
        with self.assertRaises(ProblemFormatError):
            parse_problem("5")

    def test_read_problem_from_binary_stream(self) -> None:
        problem = read_problem(io.BytesIO(b"1 1\n\xe9$\n,.\n"))
        self.assertEqual(problem.input_data, b"\xe9")


if __name__ == "__main__":
    unittest.main()
