import os
import tempfile
import unittest

import redirection
from command import SimpleCommand
from exceptions import FatalError
from shell_state import ShellState
from word import Word


def same_file(fd_a_stat, fd_b_stat):
    return (fd_a_stat.st_dev, fd_a_stat.st_ino) == (fd_b_stat.st_dev, fd_b_stat.st_ino)


class TestRedirected(unittest.TestCase):
    def setUp(self):
        self.state = ShellState(environ={"OUT": "named.txt"})
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.cwd = os.getcwd()
        os.chdir(self.tmpdir.name)
        self.addCleanup(lambda: os.chdir(self.cwd))

    # Helpers
    def read_file(self, name: str) -> str:
        with open(os.path.join(self.tmpdir.name, name), "r", encoding="utf-8") as f:
            return f.read()

    def write_file(self, name: str, content: str):
        with open(os.path.join(self.tmpdir.name, name), "w", encoding="utf-8") as f:
            f.write(content)

    def command(self, **redirs):
        return SimpleCommand(Word.literal("x"), **redirs)

    def test_stdout_truncates_by_default(self):
        self.write_file("out.txt", "old content\n")
        cmd = self.command(stdout=Word.literal("out.txt"))
        with redirection.redirected(cmd, self.state):
            os.write(1, b"new\n")
        self.assertEqual("new\n", self.read_file("out.txt"))

    def test_stdout_append_keeps_existing_content(self):
        self.write_file("out.txt", "first\n")
        cmd = self.command(stdout=Word.literal("out.txt"), stdout_append=True)
        with redirection.redirected(cmd, self.state):
            os.write(1, b"second\n")
        self.assertEqual("first\nsecond\n", self.read_file("out.txt"))

    def test_target_word_is_expanded(self):
        cmd = self.command(stdout=Word.from_token("$OUT"))
        with redirection.redirected(cmd, self.state):
            os.write(1, b"x\n")
        self.assertEqual("x\n", self.read_file("named.txt"))

    def test_stdin_reads_from_file(self):
        self.write_file("in.txt", "line1\nline2\n")
        cmd = self.command(stdin=Word.literal("in.txt"))
        with redirection.redirected(cmd, self.state):
            data = os.read(0, 100)
        self.assertEqual(b"line1\nline2\n", data)

    def test_stderr_to_separate_file(self):
        cmd = self.command(stdout=Word.literal("out.txt"), stderr=Word.literal("err.txt"))
        with redirection.redirected(cmd, self.state):
            os.write(1, b"OUT\n")
            os.write(2, b"ERR\n")
        self.assertEqual("OUT\n", self.read_file("out.txt"))
        self.assertEqual("ERR\n", self.read_file("err.txt"))

    def test_same_target_for_stdout_and_stderr_is_opened_once(self):
        target = Word.literal("both.txt")
        cmd = self.command(stdout=target, stderr=target)
        with redirection.redirected(cmd, self.state):
            self.assertTrue(same_file(os.fstat(1), os.fstat(2)))
            os.write(1, b"OUT\n")
            os.write(2, b"ERR\n")
        self.assertEqual("OUT\nERR\n", self.read_file("both.txt"))

    def test_descriptors_are_restored(self):
        before = [os.fstat(fd) for fd in (0, 1, 2)]
        self.write_file("in.txt", "")
        cmd = self.command(stdin=Word.literal("in.txt"), stdout=Word.literal("o"), stderr=Word.literal("e"))
        with redirection.redirected(cmd, self.state):
            self.assertFalse(same_file(before[1], os.fstat(1)))
        after = [os.fstat(fd) for fd in (0, 1, 2)]
        for b, a in zip(before, after):
            self.assertTrue(same_file(b, a))

    def test_open_failure_is_fatal_and_restores(self):
        before = os.fstat(1)
        cmd = self.command(stdout=Word.literal("missing-dir/out.txt"))
        with self.assertRaises(FatalError) as ctx:
            with redirection.redirected(cmd, self.state):
                self.fail("body must not run")
        self.assertEqual("open", ctx.exception.operation)
        self.assertTrue(same_file(before, os.fstat(1)))

    def test_missing_input_is_fatal(self):
        cmd = self.command(stdin=Word.literal("nope.txt"))
        with self.assertRaises(FatalError):
            with redirection.redirected(cmd, self.state):
                pass

    def test_no_redirections_is_a_no_op(self):
        with redirection.redirected(self.command(), self.state):
            pass

    def test_replaced_fd(self):
        read_fd, write_fd = os.pipe()
        self.addCleanup(os.close, read_fd)
        before = os.fstat(1)
        with redirection.replaced_fd(1, write_fd):
            os.write(1, b"through the pipe")
        os.close(write_fd)
        self.assertEqual(b"through the pipe", os.read(read_fd, 100))
        self.assertTrue(same_file(before, os.fstat(1)))

    def test_create_output_truncates_and_leaves_stdout_alone(self):
        self.write_file("out.txt", "stale\n")
        before = os.fstat(1)
        redirection.create_output(self.command(stdout=Word.literal("out.txt")), self.state)
        self.assertEqual("", self.read_file("out.txt"))
        self.assertTrue(same_file(before, os.fstat(1)))

    def test_create_output_append_keeps_content(self):
        self.write_file("out.txt", "keep\n")
        cmd = self.command(stdout=Word.literal("out.txt"), stdout_append=True)
        redirection.create_output(cmd, self.state)
        self.assertEqual("keep\n", self.read_file("out.txt"))

    def test_create_output_ignores_stdin(self):
        redirection.create_output(self.command(stdin=Word.literal("nope.txt")), self.state)


if __name__ == "__main__":
    unittest.main()
