import logging
import random
from collections import Counter

from shannon_codec.shannon_core import ShannonLogic, code_length, is_prefix_free


def test_empty_histogram_yields_empty_table():
	assert ShannonLogic().build_codes({}) == {}
	assert ShannonLogic().build_codes(Counter()) == {}


def test_single_symbol_gets_zero_code():
	assert ShannonLogic().build_codes({0x41: 1000}) == {0x41: "0"}


def test_dyadic_distribution():
	codes = ShannonLogic().build_codes({ord('A'): 4, ord('B'): 2, ord('C'): 1, ord('D'): 1})
	assert codes == {ord('A'): "0", ord('B'): "10", ord('C'): "110", ord('D'): "111"}


def test_non_dyadic_distribution():
	# p = 3/4 -> 1 bit, p = 1/4 -> 2 bits starting at cumulative 3/4
	codes = ShannonLogic().build_codes({ord('x'): 3, ord('y'): 1})
	assert codes == {ord('x'): "0", ord('y'): "11"}


def test_ties_are_broken_by_ascending_symbol():
	codes = ShannonLogic().build_codes({5: 2, 3: 2})
	assert codes == {3: "0", 5: "1"}
	# insertion order of the histogram does not matter
	assert ShannonLogic().build_codes({3: 2, 5: 2}) == codes


def test_uniform_full_alphabet_gets_eight_bit_codes():
	codes = ShannonLogic().build_codes({symbol: 3 for symbol in range(256)})
	assert len(codes) == 256
	assert {len(code) for code in codes.values()} == {8}
	assert is_prefix_free(codes)


def test_code_length_is_ceil_of_information_content():
	assert code_length(1, 2) == 1
	assert code_length(3, 4) == 1
	assert code_length(1, 4) == 2
	assert code_length(1, 5) == 3
	assert code_length(1, 8) == 3
	assert code_length(1, 9) == 4
	# never below one bit
	assert code_length(99, 100) == 1


def test_codes_are_prefix_free_for_skewed_histograms():
	rng = random.Random(2024)
	logic = ShannonLogic()
	for _ in range(50):
		size = rng.randint(2, 256)
		symbols = rng.sample(range(256), size)
		freqs = {symbol: rng.choice([1, 2, 3, 10, 1000, 123457]) for symbol in symbols}
		codes = logic.build_codes(freqs)
		assert set(codes) == set(freqs)
		assert all(len(code) >= 1 for code in codes.values())
		assert is_prefix_free(codes)


def test_non_positive_counts_are_skipped_with_warning(caplog):
	with caplog.at_level(logging.WARNING, logger="shannon_codec.shannon_core"):
		codes = ShannonLogic().build_codes({1: 3, 2: 1, 9: 0})
	assert 9 not in codes
	assert codes == {1: "0", 2: "11"}
	assert "Skipping symbol 0x09" in caplog.text


def test_all_zero_counts_yield_empty_table():
	assert ShannonLogic().build_codes({1: 0, 2: 0}) == {}


def test_zero_counts_do_not_count_as_single_symbol(caplog):
	with caplog.at_level(logging.WARNING, logger="shannon_codec.shannon_core"):
		assert ShannonLogic().build_codes({7: 0}) == {}
	assert "Skipping symbol 0x07" in caplog.text
	assert ShannonLogic().build_codes({7: 0, 8: 4}) == {8: "0"}


def test_generate_codes_counts_bytes():
	codes = ShannonLogic().generate_codes(b"AAAABBCD")
	assert codes == {ord('A'): "0", ord('B'): "10", ord('C'): "110", ord('D'): "111"}


def test_is_prefix_free_detects_prefixes():
	assert is_prefix_free({1: "0", 2: "10", 3: "11"})
	assert not is_prefix_free({1: "0", 2: "01"})
	assert not is_prefix_free({1: "10", 2: "0", 3: "101"})
	assert is_prefix_free({})
