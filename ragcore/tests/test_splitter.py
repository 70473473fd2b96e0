"""Unit tests for the separator splitter, token estimator and chunk hash."""
from __future__ import annotations

import unittest

from ragcore.core.exceptions import ValidationError
from ragcore.rag.splitters import SeparatorSplitter, chunk_document, content_hash, estimate_tokens


def _bilingual_text(paragraphs: int = 40) -> str:
    parts = []
    for i in range(paragraphs):
        parts.append(
            f"第{i}段讨论检索增强生成系统的设计。Paragraph {i} covers hybrid search, "
            f"rank fusion and reranking of candidate passages.\n\n"
        )
    return "".join(parts)


class TestEstimateTokens(unittest.TestCase):
    def test_empty_is_zero(self) -> None:
        self.assertEqual(estimate_tokens(""), 0)

    def test_narrow_characters_count_a_quarter(self) -> None:
        self.assertEqual(estimate_tokens("abcd"), 1)
        self.assertEqual(estimate_tokens("abcde"), 2)

    def test_ideographs_count_one_and_a_half(self) -> None:
        self.assertEqual(estimate_tokens("中文"), 3)
        self.assertEqual(estimate_tokens("中a"), 2)


class TestContentHash(unittest.TestCase):
    def test_known_values(self) -> None:
        self.assertEqual(content_hash(""), "00000000")
        self.assertEqual(content_hash("a"), "00000061")
        self.assertEqual(content_hash("ab"), "00000c21")
        self.assertEqual(content_hash("hello"), "05e918d2")

    def test_hashes_utf16_code_units(self) -> None:
        self.assertEqual(content_hash("中"), "00004e2d")
        # Astral characters hash as their surrogate pair
        self.assertEqual(content_hash("\U0001F600"), "001b0d63")

    def test_polynomial_collision_is_preserved(self) -> None:
        self.assertEqual(content_hash("Aa"), content_hash("BB"))
        self.assertEqual(content_hash("Aa"), "00000840")


class TestSeparatorSplitter(unittest.TestCase):
    def test_empty_and_whitespace_give_no_chunks(self) -> None:
        self.assertEqual(chunk_document(""), [])
        self.assertEqual(chunk_document("  \n\n\t "), [])

    def test_short_text_is_one_chunk(self) -> None:
        pieces = chunk_document("  Hello world.  ")
        self.assertEqual(len(pieces), 1)
        piece = pieces[0]
        self.assertEqual(piece.content, "Hello world.")
        self.assertEqual(piece.token_count, 3)
        self.assertEqual(piece.content_hash, content_hash("Hello world."))
        self.assertEqual((piece.start, piece.end), (0, 12))

    def test_invalid_sizes_are_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            SeparatorSplitter(chunk_size=0, chunk_overlap=0)
        with self.assertRaises(ValidationError):
            SeparatorSplitter(chunk_size=10, chunk_overlap=-1)
        with self.assertRaises(ValidationError):
            SeparatorSplitter(chunk_size=10, chunk_overlap=10)

    def test_deterministic(self) -> None:
        text = _bilingual_text()
        self.assertEqual(chunk_document(text, 64, 16), chunk_document(text, 64, 16))

    def test_chunks_respect_token_budget(self) -> None:
        pieces = chunk_document(_bilingual_text(), 64, 16)
        self.assertGreater(len(pieces), 1)
        for piece in pieces:
            self.assertLessEqual(piece.token_count, 64)
            self.assertEqual(piece.token_count, estimate_tokens(piece.content))
            self.assertEqual(piece.content, piece.content.strip())

    def test_offsets_point_into_trimmed_source_and_cover_it(self) -> None:
        text = _bilingual_text()
        source = text.strip()
        pieces = chunk_document(text, 64, 16)

        covered = [False] * len(source)
        for piece in pieces:
            self.assertEqual(source[piece.start : piece.end], piece.content)
            for i in range(piece.start, piece.end):
                covered[i] = True
        missing = [i for i, ch in enumerate(source) if not ch.isspace() and not covered[i]]
        self.assertEqual(missing, [])
        self.assertEqual(pieces[-1].end, len(source))

    def test_consecutive_chunks_overlap(self) -> None:
        pieces = chunk_document(_bilingual_text(), 64, 16)
        for prev, nxt in zip(pieces, pieces[1:]):
            self.assertLess(prev.start, nxt.start)
            self.assertLess(nxt.start, prev.end)

    def test_no_overlap_partitions_the_text(self) -> None:
        text = "x" * 1000
        pieces = chunk_document(text, 10, 0)
        self.assertEqual(len(pieces), 25)
        self.assertTrue(all(len(p.content) == 40 for p in pieces))
        self.assertEqual("".join(p.content for p in pieces), text)

    def test_hard_cut_overlap_is_bounded_by_overlap_tokens(self) -> None:
        pieces = chunk_document("x" * 200, 10, 2)
        self.assertEqual((pieces[0].start, pieces[0].end), (0, 40))
        self.assertEqual((pieces[1].start, pieces[1].end), (32, 72))

    def test_seed_followed_by_whitespace_is_not_repeated(self) -> None:
        pieces = chunk_document("文dc\n\n中e", 2, 1)
        self.assertEqual([p.content for p in pieces], ["文dc", "中e"])
        self.assertEqual([(p.start, p.end) for p in pieces], [(0, 3), (5, 7)])

    def test_no_chunk_is_contained_in_its_predecessor(self) -> None:
        texts = [
            "文dc\n\n中e",
            "ab\n\n\n\ncd\n\nef",
            "中文 \n 测试。\n\n中文ab  cd\n",
            "word. " * 12 + "\n\n" + "字" * 9,
        ]
        for text in texts:
            for size, overlap in ((2, 1), (3, 1), (4, 2), (6, 3)):
                pieces = chunk_document(text, size, overlap)
                for prev, nxt in zip(pieces, pieces[1:]):
                    self.assertGreater(nxt.end, prev.end, (text, size, overlap, pieces))

    def test_cuts_at_latest_separator_that_fits(self) -> None:
        sentence = "Short sentence here. "
        text = sentence * 10
        pieces = chunk_document(text, 16, 0)
        for piece in pieces[:-1]:
            self.assertTrue(piece.content.endswith("here."), piece.content)
        self.assertEqual(" ".join(p.content for p in pieces), text.strip())


if __name__ == "__main__":
    unittest.main()
