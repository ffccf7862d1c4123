"""Unit tests for index formulas and the priority domain."""
import pytest

from mindpulse.assessment.helpers.indices import DOMAIN_LABELS
from mindpulse.assessment.helpers.indices import clamp
from mindpulse.assessment.helpers.indices import compute_asi
from mindpulse.assessment.helpers.indices import compute_cfi
from mindpulse.assessment.helpers.indices import compute_ici
from mindpulse.assessment.helpers.indices import compute_pci
from mindpulse.assessment.helpers.indices import compute_wme
from mindpulse.assessment.helpers.indices import priority_domain


class TestIndexFormulas:
    def test_asi_all_misses(self):
        assert compute_asi(1.0, 0.0, 0.0) == pytest.approx(0.5)

    def test_asi_weights(self):
        assert compute_asi(0.2, 0.5, 0.5) == pytest.approx(1 - (0.1 + 0.15 + 0.1))

    def test_ici_perfect(self):
        assert compute_ici(0.0, 0.0) == 1.0

    def test_ici_weights(self):
        assert compute_ici(0.5, 0.25) == pytest.approx(1 - (0.3 + 0.1))

    def test_wme_is_accuracy(self):
        assert compute_wme(0.6) == pytest.approx(0.6)

    def test_pci_weights(self):
        assert compute_pci(0.2, 0.4) == pytest.approx(1 - (0.1 + 0.2))

    def test_cfi_at_ceiling_is_zero(self):
        assert compute_cfi(400) == 0.0

    def test_cfi_zero_cost_is_one(self):
        assert compute_cfi(0) == 1.0

    @pytest.mark.parametrize(
        "value",
        [
            compute_asi(3.0, 2.0, 2.0),
            compute_ici(-1.0, -1.0),
            compute_wme(1.7),
            compute_wme(-0.2),
            compute_pci(5.0, 1.0),
            compute_cfi(-400),
            compute_cfi(800),
        ],
    )
    def test_out_of_range_inputs_are_clamped(self, value):
        assert 0.0 <= value <= 1.0

    def test_negative_switch_cost_clamps_to_one(self):
        assert compute_cfi(-400) == 1.0

    def test_clamp(self):
        assert clamp(-0.5) == 0.0
        assert clamp(1.5) == 1.0
        assert clamp(0.25) == 0.25


class TestPriorityDomain:
    def _indices(self, **overrides):
        indices = {"asi": 0.8, "ici": 0.8, "wme": 0.8, "pci": 0.8, "cfi": 0.8}
        indices.update(overrides)
        return indices

    def test_lowest_index_wins(self):
        assert priority_domain(self._indices(wme=0.3)) == "Working Memory"

    def test_tie_goes_to_first_in_order(self):
        assert priority_domain(self._indices()) == "Sustained Attention"

    def test_tie_between_later_domains(self):
        assert priority_domain(self._indices(pci=0.1, cfi=0.1)) == "Processing Speed"

    def test_every_domain_reachable(self):
        for name, label in DOMAIN_LABELS.items():
            assert priority_domain(self._indices(**{name: 0.0})) == label
