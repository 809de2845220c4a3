# filename: shannon_core.py

import logging

from .frequency import count_frequencies, sorted_frequencies

logger = logging.getLogger(__name__)


def code_length(count, total):
    # Smallest L with count / total >= 2 ** -L, i.e. ceil(-log2(p)), at least 1.
    length = 1
    while (count << length) < total:
        length += 1
    return length


def is_prefix_free(codes):
    """Return True when no code in *codes* is a proper prefix of another."""
    ordered = sorted(codes.values())
    for shorter, longer in zip(ordered, ordered[1:]):
        if longer.startswith(shorter):
            return False
    return True


class ShannonLogic:
    def build_codes(self, freqs):
        """Build a Shannon code table from a ``symbol -> count`` histogram.

        Symbols are ranked by descending count (ascending symbol on ties). Each
        symbol's code is the first ``ceil(-log2(p))`` binary digits of the
        cumulative probability of the symbols ranked before it. Probabilities
        are kept as integer numerators over the total count, so the doubling
        rule runs without rounding and the result is prefix-free.
        """
        codes = {}
        if not freqs:
            return codes

        ranked = []
        for symbol, count in sorted_frequencies(freqs):
            if count <= 0:
                logger.warning("Skipping symbol 0x%02x with non-positive count %d", symbol, count)
                continue
            ranked.append((symbol, count))

        if not ranked:
            return codes

        # A single-symbol alphabet still needs one bit per symbol
        if len(ranked) == 1:
            codes[ranked[0][0]] = "0"
            return codes

        total = sum(count for _, count in ranked)
        cumulative = 0
        for symbol, count in ranked:
            remainder = cumulative
            bits = []
            for _ in range(code_length(count, total)):
                remainder <<= 1
                if remainder >= total:
                    bits.append("1")
                    remainder -= total
                else:
                    bits.append("0")
            codes[symbol] = "".join(bits)
            cumulative += count

        logger.debug("Built %d codes from %d counted bytes", len(codes), total)
        return codes

    def generate_codes(self, data):
        # Frequency analysis of the input byte data
        return self.build_codes(count_frequencies(data))
