import re
import unittest

from junban.util.ids import gen_task_id, parse_id


class TestGenTaskId(unittest.TestCase):
    def test_format(self) -> None:
        out = gen_task_id()
        # uuidhex_YYYYMMDDHHMMSS
        uuid_part, ts = out.split("_")
        assert re.fullmatch(r"[0-9a-f]{32}", uuid_part)
        assert len(ts) == 14
        assert ts.isdigit()

    def test_unique(self) -> None:
        assert gen_task_id() != gen_task_id()


class TestParseId(unittest.TestCase):
    def test_empty(self) -> None:
        r = parse_id("  ", source_ids=["a", "b"])
        assert r.is_err()
        assert r.unwrap_err() == "Empty ID"

    def test_exact_match(self) -> None:
        r = parse_id("id-1", source_ids=["id-1", "id-2"])
        assert r.is_ok()
        assert r.unwrap() == "id-1"

    def test_prefix_single(self) -> None:
        r = parse_id("abcd", source_ids=["abcd1234", "other"], shortend_length=4)
        assert r.is_ok()
        assert r.unwrap() == "abcd1234"

    def test_prefix_requires_exact_length(self) -> None:
        r = parse_id("abc", source_ids=["abcd1234"], shortend_length=4)
        assert r.is_err()

    def test_prefix_ambiguous(self) -> None:
        r = parse_id("abcd", source_ids=["abcd1", "abcd2"], shortend_length=4)
        assert r.is_err()
        assert "Ambiguous" in r.unwrap_err()

    def test_unknown(self) -> None:
        r = parse_id("z", source_ids=["a", "b"])
        assert r.is_err()
        assert "Unknown" in r.unwrap_err()


if __name__ == "__main__":
    unittest.main()
