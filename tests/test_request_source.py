import random

import pytest

from models import ConfigError
from request_source import LateRequestCursor, make_requests

MAX_BLOCK = 35


class TestLiteral:
    def test_kept_verbatim(self):
        assert make_requests("7,30,8", "ignored", MAX_BLOCK) == [7, 30, 8]

    def test_duplicates_and_order_preserved(self):
        assert make_requests("5,5,0", "", MAX_BLOCK) == [5, 5, 0]

    @pytest.mark.parametrize("addr", ["1,,2", "a", "1;2", ""])
    def test_non_integer_rejected(self, addr):
        with pytest.raises(ConfigError, match="Bad address list"):
            make_requests(addr, "", MAX_BLOCK)

    @pytest.mark.parametrize("addr", ["36", "0,-2"])
    def test_out_of_range_rejected(self, addr):
        with pytest.raises(ConfigError, match="outside the disk"):
            make_requests(addr, "", MAX_BLOCK)


class TestGenerated:
    def test_count_and_bounds(self):
        out = make_requests("-1", "50,20,10", MAX_BLOCK, rng=random.Random(3))
        assert len(out) == 50
        assert all(10 <= b <= 20 for b in out)

    def test_max_minus_one_means_highest_block(self):
        class RecordingRng:
            bounds = []

            def randint(self, lo, hi):
                self.bounds.append((lo, hi))
                return hi

        rng = RecordingRng()
        out = make_requests("-1", "3,-1,2", MAX_BLOCK, rng=rng)
        assert out == [MAX_BLOCK] * 3
        assert rng.bounds == [(2, MAX_BLOCK)] * 3

    def test_zero_count(self):
        assert make_requests("-1", "0,-1,0", MAX_BLOCK) == []

    def test_same_seed_same_stream(self):
        a = make_requests("-1", "10,-1,0", MAX_BLOCK, rng=random.Random(42))
        b = make_requests("-1", "10,-1,0", MAX_BLOCK, rng=random.Random(42))
        assert a == b

    @pytest.mark.parametrize("desc", ["5,10", "5,10,0,1", "five,10,0", "-1,10,0", "5,3,4", "5,99,0"])
    def test_bad_description(self, desc):
        with pytest.raises(ConfigError) as err:
            make_requests("-1", desc, MAX_BLOCK)
        assert desc in str(err.value) or "Maximum address" in str(err.value)

    def test_message_explains_format(self):
        with pytest.raises(ConfigError, match="comma-separated list of length three"):
            make_requests("-1", "5,10", MAX_BLOCK)


class TestLateCursor:
    def test_one_at_a_time(self):
        cur = LateRequestCursor([4, 8])
        assert cur.remaining == 2
        assert cur.take() == 4
        assert cur.take() == 8
        assert cur.exhausted
        assert cur.take() is None
        assert cur.remaining == 0

    def test_empty(self):
        cur = LateRequestCursor([])
        assert cur.exhausted
        assert cur.take() is None
