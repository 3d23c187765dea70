import unittest

from exceptions import ParseError
from lexer import split_operators, tokenize


class TestTokenize(unittest.TestCase):
    def test_words_and_semicolons(self):
        self.assertEqual(["echo", "hi", ";", "ls"], tokenize("echo hi; ls"))

    def test_operators_without_spaces(self):
        self.assertEqual(["a", "&&", "b", "||", "c", "|", "d", "&", "e"], tokenize("a&&b||c|d&e"))

    def test_redirections(self):
        self.assertEqual(["cat", "<", "in", ">>", "out"], tokenize("cat <in >>out"))
        self.assertEqual(["cmd", "2", ">", "err"], tokenize("cmd 2>err"))
        self.assertEqual(["cmd", "&>", "both"], tokenize("cmd &> both"))
        self.assertEqual(["cmd", "&>>", "both"], tokenize("cmd &>>both"))

    def test_quotes_are_removed(self):
        self.assertEqual(["echo", "a b", "c"], tokenize("echo 'a b' \"c\""))

    def test_variable_references_stay_in_the_token(self):
        self.assertEqual(["echo", "$HOME/${USER}"], tokenize("echo $HOME/${USER}"))

    def test_unbalanced_quote_raises(self):
        with self.assertRaises(ParseError):
            tokenize("echo 'oops")

    def test_empty_line(self):
        self.assertEqual([], tokenize("   "))


class TestSplitOperators(unittest.TestCase):
    def test_longest_match_first(self):
        self.assertEqual(["&&", "&"], split_operators("&&&"))
        self.assertEqual([";", "|"], split_operators(";|"))

    def test_every_run_splits(self):
        # every character of the punctuation set is an operator on its own
        self.assertEqual(["<", "<"], split_operators("<<"))


if __name__ == "__main__":
    unittest.main()
